"""
pylings - Small Python exercises, verified as you save

A command-line trainer that walks you through a sequence of broken Python
exercises. Watch mode re-checks your work every time you save a file.
"""

__version__ = "0.1.0"
