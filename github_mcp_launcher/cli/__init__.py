"""
Command-line interface for github-mcp-launcher.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
