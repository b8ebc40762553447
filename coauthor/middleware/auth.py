# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT session tokens.

This module extracts the bearer token, checks it against the Redis blocklist,
validates it and hands the caller's identity to the route layer. Failures are
raised as ``AppError`` so the error handler renders them like any other
business error.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from bson import ObjectId
from bson.errors import InvalidId
from flask import g, request
from opentelemetry import trace
import logging

from ..errors import AppError, ErrorKind, already_sessioned, unauthenticated
from ..services.auth import AuthService, TokenValidationError
from ..services.redis import RedisService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Authenticated caller for the duration of one request."""
    user_id: ObjectId
    username: str
    token_id: str
    token_payload: Dict[str, Any]


class AuthMiddleware:
    """
    JWT authentication for the route table.

    Handles token extraction, blocklist checking and session building.
    """

    def __init__(self, auth_service: AuthService, redis_service: RedisService):
        """
        Initialize the authentication middleware.

        Args:
            auth_service: JWT authentication service
            redis_service: Redis service for the token blocklist
        """
        self.auth_service = auth_service
        self.redis_service = redis_service

    def extract_token_from_request(self) -> Optional[str]:
        """Return the bearer token from the Authorization header, if any."""
        auth_header = request.headers.get('Authorization', '')

        if not auth_header.startswith('Bearer '):
            return None

        token = auth_header[7:].strip()
        return token or None

    def is_token_blocked(self, token_id: str) -> bool:
        """
        Check if a token id is in the Redis blocklist.

        Returns:
            True if the token is blocked or the blocklist cannot be reached
        """
        try:
            return self.redis_service.is_token_blocked(token_id)
        except Exception as e:
            logger.error(f"Error checking token blocklist: {str(e)}")
            # Fail secure - treat as blocked if we can't check
            return True

    def current_session(self) -> Optional[Session]:
        """
        Resolve the caller's session from the request, or None when logged out.

        Invalid, expired and revoked tokens count as logged out.
        """
        if "session" in g:
            return g.session

        session = None
        token = self.extract_token_from_request()
        if token:
            session = self._session_from_token(token)

        g.session = session
        return session

    def require_session(self) -> Session:
        """
        Return the caller's session.

        Raises:
            AppError: UNAUTHENTICATED when no valid session exists
        """
        with tracer.start_as_current_span("auth.middleware.require_session") as span:
            session = self.current_session()
            if session is None:
                span.set_attribute("auth.result", "unauthenticated")
                logger.warning("Authentication failed", extra={"path": request.path})
                raise unauthenticated()

            span.set_attributes({"auth.result": "success", "user.id": str(session.user_id)})
            return session

    def require_logged_out(self) -> None:
        """
        Raises:
            AppError: ALREADY_SESSIONED when the caller holds a valid session
        """
        if self.current_session() is not None:
            raise already_sessioned()

    def revoke(self, session: Session) -> None:
        """
        Block the session token until it would have expired.

        Raises:
            AppError: STORAGE_UNAVAILABLE if the blocklist could not be written
        """
        ttl = self.auth_service.remaining_lifetime(session.token_payload)
        if not self.redis_service.block_token(session.token_id, ttl):
            raise AppError(
                ErrorKind.STORAGE_UNAVAILABLE,
                "Could not end the session, please retry"
            )

    def _session_from_token(self, token: str) -> Optional[Session]:
        try:
            payload = self.auth_service.validate_token(token)
        except TokenValidationError as e:
            logger.warning(f"Token rejected: {str(e)}")
            return None

        if self.is_token_blocked(payload["jti"]):
            logger.warning("Token rejected: token is blocked")
            return None

        try:
            user_id = ObjectId(payload["sub"])
        except (InvalidId, TypeError):
            logger.warning("Token rejected: malformed subject")
            return None

        return Session(
            user_id=user_id,
            username=payload.get("username", ""),
            token_id=payload["jti"],
            token_payload=payload
        )
