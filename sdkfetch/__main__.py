"""
Entry point for running sdkfetch as a module.

Usage: python -m sdkfetch [command] [options]
"""

from sdkfetch.cli.parser import main

if __name__ == "__main__":
    main()
