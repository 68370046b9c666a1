"""
askdocs - session-scoped document Q&A service.

Upload content into a per-session Qdrant collection and ask grounded,
cited questions about it through a resilient model fallback chain.
"""

__version__ = "0.1.0"
