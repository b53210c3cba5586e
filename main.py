"""
Main entry point for vopt.

Normalizes every video in a folder and keeps a ledger so interrupted or repeated
runs only process what is left. See `vopt.cli` for the available options.
"""
import sys

from vopt.cli import main


if __name__ == "__main__":
    sys.exit(main())
