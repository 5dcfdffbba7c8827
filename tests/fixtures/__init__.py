"""
Shared test fixtures for github-mcp-launcher.
"""
