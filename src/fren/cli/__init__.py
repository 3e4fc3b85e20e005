"""
Command-line tools for the Fren core.
"""
