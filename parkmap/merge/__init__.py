"""
Merge modules.

Combines normalized lots from all sources into one list.
"""
