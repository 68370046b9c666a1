"""
Service error handling for routers.

Decorator mapping the askdocs exception hierarchy onto HTTPExceptions so
every endpoint answers with the same status codes and error shapes.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from askdocs.core.exceptions import (
    AskDocsException,
    BackingStoreUnavailable,
    ClientInputError,
    DocumentProcessingError,
    NamespaceConfigurationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_service_errors(func: F) -> F:
    """
    Decorator to transform service exceptions into HTTPExceptions.

    ClientInputError -> 400, DocumentProcessingError -> 422,
    BackingStoreUnavailable -> 503, anything else -> 500 without internals.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except ClientInputError as e:
            logger.warning(
                f"{__name__}:{func.__name__} - Invalid request",
                extra={"field": e.field, "error": e.message},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except BackingStoreUnavailable as e:
            logger.error(
                f"{__name__}:{func.__name__} - Vector store unavailable",
                extra={"operation": e.operation},
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="The knowledge base is temporarily unavailable. Please try again shortly.",
            )

        except DocumentProcessingError as e:
            logger.warning(
                f"{__name__}:{func.__name__} - Document processing failed",
                extra={"source": e.source, "error": e.message},
            )
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

        except NamespaceConfigurationError as e:
            logger.critical(f"{__name__}:{func.__name__} - {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Vector store configuration error",
            )

        except AskDocsException as e:
            logger.error(f"{__name__}:{func.__name__} - {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

        except Exception as e:
            logger.exception(f"{__name__}:{func.__name__} - Unexpected error: {type(e).__name__}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal server error",
            )

    return wrapper  # type: ignore
