"""Per-session request context for the service layer."""

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RequestContext:
    """Created once per client session and passed to every service call."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    language: str = "en"

    @classmethod
    def new(cls, language: str = "en") -> "RequestContext":
        return cls(language=language)

    @staticmethod
    def new_correlation_id() -> str:
        return str(uuid.uuid4())
