"""Command-line entry point: `python run.py -u example.com -j`."""
import sys

from getends.cli import main


if __name__ == '__main__':
    sys.exit(main())
