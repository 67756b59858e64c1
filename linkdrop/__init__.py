"""
LinkDrop

File sharing through short, expiring, optionally password-protected links.
"""

__version__ = "1.0.0"
