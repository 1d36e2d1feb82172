"""
Server package for the Remote File Shell.

This package contains all server-side functionality including:
- Command shell connection handling
- Directory navigation and tree operations
- File transfer sessions
- Configuration and utilities
"""
