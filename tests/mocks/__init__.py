"""
Centralized mock objects for testing.

This package provides reusable mock factories for sockets and the AI
responder, reducing code duplication across test files.
"""
