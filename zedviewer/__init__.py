"""
zedviewer: local viewer for archived Zed assistant conversations and threads.
"""

__version__ = "0.1.0"
