"""
Entry point for running github-mcp-launcher as a module.

Usage: python -m github_mcp_launcher [command] [options]
"""

from github_mcp_launcher.cli.parser import main

if __name__ == "__main__":
    main()
