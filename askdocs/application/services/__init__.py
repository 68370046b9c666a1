"""Service orchestrators."""

from .chat_service import ChatService
from .ingestion_service import IngestionService
from .session_service import SessionService

__all__ = [
    "ChatService",
    "IngestionService",
    "SessionService",
]
