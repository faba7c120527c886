"""
Inspection and debugging helpers.
"""
