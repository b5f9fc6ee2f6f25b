"""
HTTP API over the entry store.
"""
