"""
Session service orchestrator.

Clears a session's knowledge base and exposes the collection debug views.

Dependencies: askdocs.core.session
System role: Session use case orchestration
"""

from datetime import timedelta

from askdocs.application.services.validation import require_text
from askdocs.core.exceptions import ClientInputError
from askdocs.core.session.collection_manager import CollectionManager
from askdocs.models.session import ClearSessionResponse, CollectionListResponse, CollectionResponse, SweepResponse


class SessionService:
    """Session service orchestrator."""

    def __init__(self, collection_manager: CollectionManager) -> None:
        """
        Initialize session service.

        Args:
            collection_manager: Owner of session collections
        """
        self.collection_manager = collection_manager

    async def clear_session(self, session_id: str | None) -> ClearSessionResponse:
        """
        Delete the session's collection.

        Args:
            session_id: Caller session token

        Returns:
            ClearSessionResponse: cleared is False when there was nothing to delete
        """
        session_id = require_text(session_id, "session_id", "Session ID")
        cleared = await self.collection_manager.delete_namespace(session_id)
        message = "Session cleared successfully" if cleared else "No data found for this session"
        return ClearSessionResponse(message=message, session_id=session_id, cleared=cleared)

    async def list_collections(self) -> CollectionListResponse:
        """
        List every session collection.

        Returns:
            CollectionListResponse: Collections and their total
        """
        infos = await self.collection_manager.list_namespaces()
        collections = [
            CollectionResponse(
                name=info.name,
                session_id=info.session_id,
                points_count=info.points_count,
                created_at=info.created_at,
                active=info.active,
            )
            for info in infos
        ]
        return CollectionListResponse(collections=collections, total=len(collections))

    async def sweep_stale(self, max_age_hours: float | None = None) -> SweepResponse:
        """
        Delete collections older than max_age_hours.

        Args:
            max_age_hours: Age limit (defaults to the configured stale age)

        Returns:
            SweepResponse: Names of deleted collections
        """
        if max_age_hours is not None and max_age_hours <= 0:
            raise ClientInputError("max_age_hours must be positive", field="max_age_hours")
        max_age = timedelta(hours=max_age_hours) if max_age_hours is not None else None
        deleted = await self.collection_manager.sweep_stale(max_age)
        return SweepResponse(
            message=f"Cleaned up {len(deleted)} stale collections",
            deleted=deleted,
        )
