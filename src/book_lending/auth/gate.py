"""
Authorization gate.

Turns the raw ``Authorization`` header of a request into a
``RequestContext`` once per request, and issues tokens at login.
"""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from ..config import ServiceConfig, get_config
from ..database.user_repository import UserRepository
from ..models.context import RequestContext
from ..models.results import AuthPayload
from ..models.user import User
from .tokens import decode_token, issue_token

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid username or password"


class AuthenticationError(Exception):
    """Login failed. The message never says which credential was wrong."""

    def __init__(self, message: str = LOGIN_FAILED_MESSAGE):
        super().__init__(message)


class AuthorizationGate:
    """Resolves credentials to users against the identity store."""

    def __init__(self, session: Session, config: ServiceConfig | None = None):
        self.config = config or get_config()
        self.users = UserRepository(session)

    def authenticate(self, token: str | None) -> User | None:
        """
        Resolve a bearer token to a user.

        Returns None (anonymous) for a missing or invalid token, and for a
        valid token whose user no longer exists.
        """
        claim = decode_token(token, self.config.jwt_secret, self.config.jwt_algorithm)
        if claim is None:
            return None

        user = self.users.find_user_by_id(claim.sub)
        if user is None:
            logger.info("Token subject %s no longer exists", claim.sub)
        return user

    def build_context(self, authorization: str | None) -> RequestContext:
        user = self.authenticate(authorization)
        if user is None:
            return RequestContext.anonymous()
        return RequestContext(logged_in_user=user)

    def login(self, username: str, password: str) -> AuthPayload:
        """
        Check credentials and issue a token.

        Raises:
            AuthenticationError: For an unknown username or a wrong password alike
        """
        user = self.users.verify_password(username, password)
        if user is None:
            logger.info("Failed login for username %r", username)
            raise AuthenticationError

        token = issue_token(
            user.id,
            self.config.jwt_secret,
            algorithm=self.config.jwt_algorithm,
            ttl=timedelta(minutes=self.config.token_ttl_minutes),
        )
        logger.info("User %s logged in", user.username)
        return AuthPayload(user=user, token=token)
