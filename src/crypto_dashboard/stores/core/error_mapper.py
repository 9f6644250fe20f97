"""Mapping of store exceptions to remote outcomes (client side) and HTTP (server side)."""
import asyncio
from dataclasses import dataclass
from enum import Enum

import httpx
from fastapi import HTTPException
from pydantic import ValidationError

from crypto_dashboard.stores.core.exceptions import (AlreadyExists,
                                                     NetworkError, NotFound,
                                                     Unauthorized)


class RemoteOutcome(str, Enum):
    """How a remote store call resolved."""

    OK = "ok"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class StoreErrorMapper:
    """Maps store/backend exceptions to RemoteOutcome or HTTP (status_code, detail).

    The client uses to_outcome() so remote failures become values; the API
    routes use raise_http() so repository errors become HTTP responses.
    """

    resource_name: str = "Resource"

    def to_outcome(self, exc: Exception) -> RemoteOutcome:
        """Classify an exception raised while talking to the remote store."""
        if isinstance(exc, Unauthorized):
            return RemoteOutcome.UNAUTHORIZED
        if isinstance(exc, AlreadyExists):
            return RemoteOutcome.CONFLICT
        if isinstance(exc, NotFound):
            return RemoteOutcome.NOT_FOUND
        if isinstance(exc, (NetworkError, httpx.TransportError, asyncio.TimeoutError, TimeoutError)):
            return RemoteOutcome.NETWORK_ERROR
        return RemoteOutcome.SERVER_ERROR

    def to_http(self, exc: Exception, key: str | None = None) -> tuple[int, str]:
        """Map a repository exception to (status_code, detail).

        Args:
            exc: The exception raised by a repository or validation.
            key: Optional identifier to include in detail (e.g. "bitcoin").
        """
        if isinstance(exc, Unauthorized):
            return (401, "Unauthorized")
        if isinstance(exc, AlreadyExists):
            detail = str(exc) or f"{self.resource_name} already exists"
            return (409, detail)
        if isinstance(exc, NotFound):
            detail = (
                f"{self.resource_name} not found"
                if key is None
                else f"{self.resource_name} '{key}' not found"
            )
            return (404, detail)
        if isinstance(exc, (ValidationError, ValueError)):
            return (400, str(exc) or "Invalid request")
        return (500, "Internal server error")

    def raise_http(self, exc: Exception, key: str | None = None) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc, key=key)
        raise HTTPException(status_code=status_code, detail=detail) from exc
