"""Authentication: bearer tokens and the per-request authorization gate."""

from .gate import LOGIN_FAILED_MESSAGE, AuthenticationError, AuthorizationGate
from .tokens import BEARER_PREFIX, decode_token, issue_token, strip_bearer

__all__ = [
    "BEARER_PREFIX",
    "LOGIN_FAILED_MESSAGE",
    "AuthenticationError",
    "AuthorizationGate",
    "decode_token",
    "issue_token",
    "strip_bearer",
]
