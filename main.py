#!/usr/bin/env python3
"""
Entry point for the signal-recovery pipeline.

Usage:
    python main.py ImpulseResponse.txt Data.txt --sampling-rate 10 --out-dir recovery_output
    python main.py --help
"""
import sys
from src.pipeline.unified_pipeline import main

if __name__ == '__main__':
    sys.exit(main())
