"""
Request-scoped context.

Built once per inbound request by the authorization gate and passed
explicitly to every façade operation. Frozen so no handler can swap the
identity halfway through a request.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .user import User


class TokenClaim(BaseModel):
    """Identity and expiry decoded from a signed token."""

    model_config = ConfigDict(frozen=True)

    sub: str
    exp: datetime


class RequestContext(BaseModel):
    """Immutable per-request view of who is calling."""

    model_config = ConfigDict(frozen=True)

    logged_in_user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.logged_in_user is not None

    @classmethod
    def anonymous(cls) -> "RequestContext":
        return cls()
