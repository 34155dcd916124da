"""
Standalone helper tools.
"""
