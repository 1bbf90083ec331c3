"""
FileVault backend package.

Personal file storage with PDF thumbnail conversion and share links.
"""

__version__ = "1.0.0"
