"""State/store layer.

This package is the single source of truth for how field registration,
value changes, array operations and resets are merged into a form's value
tree and its auxiliary trees.
"""
