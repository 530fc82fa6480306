"""
Epoch flattening and working-set filters.
"""
