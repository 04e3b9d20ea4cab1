#!/usr/bin/env python3
"""
main.py - Entry point for running luksbak from a source checkout.
"""
import sys
from pathlib import Path

if __name__ == "__main__":
    script_dir = Path(__file__).resolve().parent

    # Add to Python path if not already there
    if str(script_dir) not in sys.path:
        sys.path.insert(0, str(script_dir))

    try:
        from luksbak.cli import main
    except ImportError as e:
        print(f"Error importing luksbak modules: {e}")
        print("Make sure you're running from the project root directory and loguru is installed.")
        sys.exit(1)
    sys.exit(main())
