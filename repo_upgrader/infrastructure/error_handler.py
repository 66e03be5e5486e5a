"""
Error taxonomy and API error translation for repo-upgrader.

Remote failures are translated into ``UpgraderError`` subclasses close to the
transport. The public accessors catch these and degrade to "no remote
information" so that checking for updates never interrupts the host.
"""

import functools
import json
from typing import Any, Callable, Optional, TypeVar

import httpx

from .logger import logger


F = TypeVar("F", bound=Callable[..., Any])


class UpgraderError(Exception):
    """Base exception for remote release resolution failures."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class ParseError(UpgraderError):
    """Raised when metadata or a response body cannot be parsed."""


class TransportError(UpgraderError):
    """Raised on network failures and HTTP error statuses."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code


class AuthRequiredError(TransportError):
    """Raised when the provider rejects the request for lack of a credential."""


class EmptyResultError(UpgraderError):
    """Raised when a valid response carries nothing usable."""


class NotConfiguredError(UpgraderError):
    """Raised when no provider type or repository id is known."""


def handle_api_error(func: F) -> F:
    """
    Decorator translating transport exceptions into ``UpgraderError`` types.

    Args:
        func: Function performing a remote call

    Returns:
        Wrapped function raising only ``UpgraderError`` subclasses
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)

        except UpgraderError:
            raise

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            url = str(e.request.url)
            if status in (401, 403):
                raise AuthRequiredError(
                    f"Authentication required for {url} (HTTP {status})", e, status
                ) from e
            raise TransportError(f"HTTP {status} for {url}", e, status) from e

        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}", e) from e

        except (json.JSONDecodeError, ValueError) as e:
            raise ParseError(f"Invalid response body: {e}", e) from e

        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}")
            raise UpgraderError(f"Unexpected error: {e}", e) from e

    return wrapper  # type: ignore[return-value]


__all__ = [
    "UpgraderError",
    "ParseError",
    "TransportError",
    "AuthRequiredError",
    "EmptyResultError",
    "NotConfiguredError",
    "handle_api_error",
]
