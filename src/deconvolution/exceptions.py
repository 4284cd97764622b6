"""
Exception types raised by the deconvolution core.

Both kinds are fatal: they are raised before (or while) the solve operator
is built and always propagate to the caller.  No partial output is produced.
"""


class ConfigurationError(ValueError):
    """Invalid run configuration (window sizes, Gamma, block size, ...)."""


class NumericalError(RuntimeError):
    """The regularized normal-equations matrix could not be factorized.

    Signals an unsuitable choice of Gamma / n / m rather than a transient
    fault, so callers should not retry with the same parameters.
    """
