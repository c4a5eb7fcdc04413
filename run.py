#!/usr/bin/env python3
"""Convenience runner for Trail Whisper.

Usage:
    python run.py visits --lat 51.48 --lon -3.18
"""
import sys

from trail_whisper.main import main

if __name__ == "__main__":
    sys.exit(main())
