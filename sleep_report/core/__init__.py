"""
Core pipeline stages and models.
"""
