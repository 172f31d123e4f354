"""
Entry point for running sdkfetch CLI as a module.

Usage: python -m sdkfetch.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
