"""
Session namespace lifecycle.

Dependencies: qdrant_client, askdocs.boundary.vdb
System role: Per-session collection ownership
"""

from askdocs.core.session.active_sessions import ActiveSessionRegistry
from askdocs.core.session.collection_manager import CollectionManager

__all__ = ["ActiveSessionRegistry", "CollectionManager"]
