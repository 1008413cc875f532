"""verse-guidance: Quran passage matching for personal goals.

This package maps free-text goal descriptions to thematically relevant
Quran passages:
- Keyword extraction and theme classification
- Query building against the AlQuran Cloud text API
- Relevance scoring, result assembly and thematic fallback
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
