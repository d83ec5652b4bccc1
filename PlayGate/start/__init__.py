"""
Entry points started from the command line.
"""
