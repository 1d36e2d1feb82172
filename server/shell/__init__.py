"""
Command shell module for server-side directory browsing.

Handles:
- Connection multiplexing
- Command parsing and dispatch
- Working-directory navigation inside the root
- Recursive copy and delete
"""
