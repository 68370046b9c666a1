"""RAG query business logic.

Includes session-scoped retrieval, the grounded prompt and the resilient
answer generator.
"""

from .generator import ResilientGenerator, classify_failure
from .retrieval_engine import RetrievalEngine

__all__ = ["ResilientGenerator", "RetrievalEngine", "classify_failure"]
