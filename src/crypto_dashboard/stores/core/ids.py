"""Tagged record identifiers: local ids vs server-issued ids."""
import secrets
import uuid
from enum import Enum

from crypto_dashboard.utils import epoch_ms

LOCAL_ID_PREFIX = "local_"


class RecordOrigin(str, Enum):
    """Which store issued a record's id."""

    LOCAL = "local"
    REMOTE = "remote"


def new_local_id() -> str:
    """Generate a locally-unique id: prefix, epoch millis, random suffix."""
    return f"{LOCAL_ID_PREFIX}{epoch_ms()}_{secrets.token_hex(4)}"


def new_remote_id() -> str:
    """Generate a server-side id (UUID4)."""
    return str(uuid.uuid4())


def origin_of(record_id: str) -> RecordOrigin:
    """Classify an id as local-origin or server-origin."""
    if record_id.startswith(LOCAL_ID_PREFIX):
        return RecordOrigin.LOCAL
    return RecordOrigin.REMOTE


def is_local_id(record_id: str) -> bool:
    return origin_of(record_id) is RecordOrigin.LOCAL
