"""
Client package for the Remote File Shell.

This package contains client-side functionality including:
- File transfer (upload/download)
- Configuration and utilities
"""
