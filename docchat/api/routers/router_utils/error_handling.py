"""
Router error handling utilities.

Provides a decorator for consistent error handling across document
endpoints: domain exceptions are logged with context and mapped to HTTP
status codes with a message-only body.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from docchat.core.exceptions import (
    CompletionError,
    DocChatError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_document_errors(failure_message: str) -> Callable[[F], F]:
    """
    Decorator factory mapping domain errors to HTTPExceptions.

    - ValidationError -> 400 with the validation message
    - NotFoundError -> 404 with the not-found message
    - CompletionError and anything unexpected -> 500 with ``failure_message``

    Args:
        failure_message: Client-facing message for server-side failures
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)

            except HTTPException:
                raise

            except ValidationError as e:
                logger.warning(
                    "Invalid request",
                    extra={"endpoint": func.__name__, "error_msg": str(e)},
                )
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

            except NotFoundError as e:
                logger.warning(
                    "Resource not found",
                    extra={"endpoint": func.__name__, "error_msg": str(e)},
                )
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

            except CompletionError as e:
                logger.error(
                    "Completion backend failure",
                    extra={
                        "endpoint": func.__name__,
                        "error_type": type(e).__name__,
                        "error_msg": str(e),
                    },
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=failure_message,
                )

            except DocChatError as e:
                logger.error(
                    "Request failed",
                    extra={"endpoint": func.__name__, "error_type": type(e).__name__, "error_msg": str(e)},
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=failure_message,
                )

            except Exception as e:
                logger.exception(
                    "Unexpected error",
                    extra={"endpoint": func.__name__, "error_type": type(e).__name__},
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=failure_message,
                )

        return wrapper  # type: ignore[return-value]

    return decorator
