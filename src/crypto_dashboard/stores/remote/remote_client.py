"""Remote Store Client: CRUD against the server-backed API for one entity family.

Every public call resolves to a RemoteResult. Expected failures (401, 404, 409,
transport errors) and unexpected ones alike are caught here and reported as an
outcome next to a neutral value ([] / None / False), so callers never branch on
exceptions.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from crypto_dashboard.session import AuthSession
from crypto_dashboard.stores.core import (AlreadyExists, EntityFamily,
                                          NetworkError, NotFound,
                                          RemoteOutcome, StoreError,
                                          StoreErrorMapper, Unauthorized)
from crypto_dashboard.stores.core.families import EntityT

logger = logging.getLogger(__name__)

ValueT = TypeVar("ValueT")

# Exceptions we translate to SERVER_ERROR; anything else is a bug and propagates.
_UNEXPECTED_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    ValidationError,
    ValueError,
    KeyError,
    TypeError,
)


@dataclass(frozen=True)
class RemoteResult(Generic[ValueT]):
    """Value of a remote call plus how it resolved."""

    value: ValueT
    outcome: RemoteOutcome = RemoteOutcome.OK

    @property
    def ok(self) -> bool:
        return self.outcome is RemoteOutcome.OK

    @property
    def unauthorized(self) -> bool:
        return self.outcome is RemoteOutcome.UNAUTHORIZED


class RemoteStoreClient(Generic[EntityT]):
    """HTTP client for one entity family's collection endpoint.

    The session is passed into each call rather than held by the client, so a
    single client can serve whatever session is current when the call is made.
    """

    def __init__(
        self,
        family: EntityFamily[EntityT],
        client: httpx.AsyncClient,
    ) -> None:
        """Initialize the client.

        Args:
            family: Entity family served (selects path and models).
            client: Shared httpx client with base_url set to the API origin.
        """
        self._family = family
        self._client = client
        self._errors = StoreErrorMapper(resource_name=family.name)

    @property
    def family(self) -> EntityFamily[EntityT]:
        return self._family

    async def list(self, session: AuthSession | None) -> RemoteResult[list[EntityT]]:
        """Fetch every record of the family owned by the session's user."""
        try:
            response = await self._send("GET", session)
            data = response.json()
            if not isinstance(data, list):
                raise ValueError(f"Expected a JSON array from {self._family.api_path}")
            items = [self._family.model.model_validate(entry) for entry in data]
        except (StoreError, *_UNEXPECTED_EXCEPTIONS) as exc:
            return self._failed([], exc, "list")
        return RemoteResult(items)

    async def create(
        self, session: AuthSession | None, fields: BaseModel | Mapping[str, Any]
    ) -> RemoteResult[EntityT | None]:
        """Create a record. A 409 (duplicate) resolves to None with CONFLICT."""
        payload = self._family.parse_create(fields)
        try:
            response = await self._send(
                "POST", session, json=payload.model_dump(mode="json", by_alias=True)
            )
            record = self._family.model.model_validate(response.json())
        except (StoreError, *_UNEXPECTED_EXCEPTIONS) as exc:
            return self._failed(None, exc, "create")
        return RemoteResult(record)

    async def update(
        self,
        session: AuthSession | None,
        record_id: str,
        fields: BaseModel | Mapping[str, Any],
    ) -> RemoteResult[bool]:
        """Merge fields into the record with record_id."""
        changes = self._family.parse_update(fields)
        body = {"id": record_id}
        body.update(
            self._family.update_model.model_validate(changes).model_dump(
                mode="json", by_alias=True, exclude_unset=True
            )
        )
        try:
            await self._send("PUT", session, json=body)
        except (StoreError, *_UNEXPECTED_EXCEPTIONS) as exc:
            return self._failed(False, exc, "update")
        return RemoteResult(True)

    async def remove(self, session: AuthSession | None, key: str) -> RemoteResult[bool]:
        """Delete the record matching key (coin id or id)."""
        key = self._family.key_normalizer(key)
        try:
            await self._send("DELETE", session, params={self._family.remove_param: key})
        except (StoreError, *_UNEXPECTED_EXCEPTIONS) as exc:
            return self._failed(False, exc, "remove")
        return RemoteResult(True)

    async def _send(
        self,
        method: str,
        session: AuthSession | None,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue a request, raising the store error taxonomy for expected failures."""
        if session is None:
            raise Unauthorized("No session")
        try:
            response = await self._client.request(
                method,
                self._family.api_path,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {session.token}"},
            )
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        status = response.status_code
        if status == 401:
            raise Unauthorized(self._detail(response))
        if status == 404:
            raise NotFound(self._detail(response))
        if status == 409:
            raise AlreadyExists(self._detail(response))
        response.raise_for_status()
        return response

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body)
        return str(body)

    def _failed(self, value: ValueT, exc: Exception, operation: str) -> RemoteResult[ValueT]:
        outcome = self._errors.to_outcome(exc)
        if outcome is RemoteOutcome.SERVER_ERROR:
            logger.error(
                "Remote %s %s failed unexpectedly: %s", self._family.name, operation, exc,
                exc_info=exc,
            )
        elif outcome is RemoteOutcome.NETWORK_ERROR:
            logger.warning("Remote %s %s network error: %s", self._family.name, operation, exc)
        else:
            logger.debug("Remote %s %s resolved as %s: %s", self._family.name, operation, outcome.value, exc)
        return RemoteResult(value, outcome)
