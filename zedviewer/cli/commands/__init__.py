"""
CLI commands registered on the ``zedviewer`` group.
"""
