"""
Main entry point for portprobe.
"""
import sys

from portprobe.app import main


def main_entry():
    """
    Runs the command-line application and exits with its status code.
    """
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
