"""
Entry point for running the CLI as a module.

Usage: python -m github_mcp_launcher.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
