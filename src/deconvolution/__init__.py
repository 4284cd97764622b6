# Regularized deconvolution of long recordings
#
# Modules:
#   exceptions      - ConfigurationError / NumericalError
#   operators       - Impulse-response model and H, Q, L operator builders
#   estimators      - Tikhonov and Dimension-Reduction solve operators
#   sliding_window  - Residual-deflation loop over arbitrarily long signals
#   metrics         - Error norm and reconstruction metrics
#   delay           - Transport-delay detection, trimming and re-padding
#   recovery        - One-call Tikhonov / Dimension-Reduction recovery
