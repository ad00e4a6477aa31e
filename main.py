"""
Contour - Main Entry Point

Runs the CLI from a source checkout without installing the package.

Example usage:
    python main.py path/to/reference.wav
    python main.py --config config/config.yaml --output contour.json path/to/lecture.mp3
"""

import sys

from contour.cli import main

if __name__ == "__main__":
    sys.exit(main())
