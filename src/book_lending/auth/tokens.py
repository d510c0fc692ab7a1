"""
Signed bearer tokens.

A token is ``"Bearer " + <JWT>`` where the JWT carries the user id as
``sub`` and an expiry as ``exp``. Decoding is a pure function: no store is
consulted and every kind of bad input (missing, malformed, wrongly signed,
expired) yields ``None`` rather than an exception.
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from pydantic import ValidationError

from ..models.context import TokenClaim

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def issue_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    ttl: timedelta = timedelta(minutes=60),
    now: datetime | None = None,
) -> str:
    """Sign a claim for ``user_id`` and return it with the ``Bearer`` prefix."""
    issued_at = now or datetime.now(UTC)
    claims = {
        "sub": user_id,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return BEARER_PREFIX + jwt.encode(claims, secret, algorithm=algorithm)


def strip_bearer(token: str | None) -> str | None:
    """Drop a leading ``Bearer`` scheme; bare tokens pass through unchanged."""
    if token is None:
        return None
    token = token.strip()
    scheme, _, rest = token.partition(" ")
    if rest and scheme.lower() == "bearer":
        token = rest.strip()
    return token or None


def decode_token(token: str | None, secret: str, algorithm: str = "HS256") -> TokenClaim | None:
    """
    Verify a token and return its claim.

    Returns:
        The decoded claim, or None when the token is absent, malformed,
        signed with another key or algorithm, or expired.
    """
    raw = strip_bearer(token)
    if raw is None:
        return None

    try:
        payload = jwt.decode(raw, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        return None

    try:
        return TokenClaim.model_validate(payload)
    except ValidationError:
        logger.debug("Rejected bearer token: claim is missing sub or exp")
        return None
