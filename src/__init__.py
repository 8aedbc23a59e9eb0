"""Laravel Quality Kit.

Static-analysis helpers for Laravel code bases: parses PHP sources and
applies rewrite rules that add DocBlock annotations for type checkers.
"""

__version__ = "0.1.0"
