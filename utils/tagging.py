"""Per-call tracing identifiers attached to every upstream request."""

import uuid
from typing import NamedTuple

from config import CORRELATION_ID_HEADER, SESSION_ID_HEADER


class TraceIds(NamedTuple):
    session_id: str
    correlation_id: str


def new_trace_ids() -> TraceIds:
    """Return a fresh (session id, correlation id) pair."""
    return TraceIds(str(uuid.uuid4()), str(uuid.uuid4()))


def trace_headers(ids: TraceIds) -> dict[str, str]:
    return {
        SESSION_ID_HEADER: ids.session_id,
        CORRELATION_ID_HEADER: ids.correlation_id,
    }
