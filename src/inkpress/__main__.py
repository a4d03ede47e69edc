"""Entry point for running Inkpress as a module.

Usage:
    python -m inkpress [command] [options]

Example:
    python -m inkpress unpack
    python -m inkpress check
"""

from inkpress.cli import app

if __name__ == "__main__":
    app()
