"""
owo - package a directory tree into a single Markdown document.
"""

__version__ = "0.1.0"
