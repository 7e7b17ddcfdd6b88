"""
Domain layer for the print shop orders service.

Business entities and query descriptors, free of persistence and HTTP
concerns.
"""
