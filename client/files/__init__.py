"""
File transfer module for client-side file operations.

Handles:
- File uploads to the server root folder
- File downloads from the server root folder
"""
