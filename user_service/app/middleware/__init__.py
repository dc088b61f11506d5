"""
User service middleware: authentication and error handling.
"""
