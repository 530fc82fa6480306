"""
Sleep report pipeline.

This package contains the core functionality for:
- Normalizing sleep summaries from vendor API or tabular exports
- Flattening per-night epoch series
- Wake-episode detection and timeline layout
- Report statistics and chart descriptions
"""

__version__ = "0.1.0"
