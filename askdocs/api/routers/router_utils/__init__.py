"""Router helper utilities."""

from .disconnect import ClientDisconnectedError, run_until_disconnected
from .error_handling import handle_service_errors

__all__ = ["ClientDisconnectedError", "handle_service_errors", "run_until_disconnected"]
