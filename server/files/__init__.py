"""
File transfer module for server-side file operations.

Handles:
- Length-prefixed upload into the root folder
- Length-prefixed download from the root folder
- One blocking worker thread per transfer connection
"""
