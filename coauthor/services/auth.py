# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT session tokens and password hashing.

Tokens are signed with RS256; passwords are hashed with bcrypt.
"""

import os
import uuid
import jwt
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """
    JWT session service with RS256 signing and bcrypt password hashing.
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        public_key: Optional[str] = None,
        access_token_expire_minutes: int = 60,
        bcrypt_rounds: int = 12,
    ):
        """
        Initialize the authentication service.

        Args:
            private_key: RS256 private key for token signing (PEM format)
            public_key: RS256 public key for token verification (PEM format)
            access_token_expire_minutes: Session token lifetime
            bcrypt_rounds: bcrypt cost factor
        """
        private_key = private_key or os.getenv("JWT_PRIVATE_KEY")
        public_key = public_key or os.getenv("JWT_PUBLIC_KEY")

        if not private_key or not public_key:
            logger.warning("No JWT key pair configured, generating development key pair")
            private_key, public_key = self._generate_dev_key_pair()

        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = "RS256"
        self.access_token_expire_minutes = access_token_expire_minutes
        self.bcrypt_rounds = bcrypt_rounds

    @staticmethod
    def _generate_dev_key_pair() -> Tuple[str, str]:
        """Generate RSA key pair for development use."""
        private_key = rsa.generate_private_key(
            public_exponent=65537,
            key_size=2048
        )

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        ).decode('utf-8')

        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        ).decode('utf-8')

        return private_pem, public_pem

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with salt."""
        with tracer.start_as_current_span("auth.hash_password"):
            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
            return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        with tracer.start_as_current_span("auth.verify_password") as span:
            try:
                result = bcrypt.checkpw(
                    password.encode('utf-8'),
                    hashed_password.encode('utf-8')
                )
                span.set_attribute("auth.verification_result", "success" if result else "failed")
                return result
            except ValueError as e:
                span.set_attribute("auth.verification_result", "error")
                logger.error(f"Password verification error: {str(e)}")
                return False

    def generate_token(self, user_id: str, username: str) -> Dict[str, Any]:
        """
        Generate a session token for a user.

        Returns:
            Dictionary containing access_token and metadata
        """
        with tracer.start_as_current_span("auth.generate_token") as span:
            span.set_attribute("user.id", user_id)

            now = datetime.now(timezone.utc)
            expires_at = now + timedelta(minutes=self.access_token_expire_minutes)

            payload = {
                "sub": user_id,
                "username": username,
                "iat": now,
                "exp": expires_at,
                "jti": uuid.uuid4().hex,
                "type": "access"
            }

            token = jwt.encode(payload, self.private_key, algorithm=self.algorithm)

            logger.info(
                "Session token generated",
                extra={"user_id": user_id, "expires_at": expires_at.isoformat()}
            )

            return {
                "access_token": token,
                "token_type": "Bearer",
                "expires_in": self.access_token_expire_minutes * 60,
                "expires_at": expires_at.isoformat()
            }

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a session token.

        Raises:
            TokenValidationError: If token is invalid or expired
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            try:
                payload = jwt.decode(
                    token,
                    self.public_key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": True, "require": ["sub", "exp", "jti"]}
                )
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                raise TokenValidationError("Token has expired")
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                raise TokenValidationError(f"Invalid token: {str(e)}")

            if payload.get("type") != "access":
                raise TokenValidationError("Invalid token type")

            span.set_attributes({
                "auth.validation_result": "success",
                "user.id": payload["sub"]
            })
            return payload

    @staticmethod
    def remaining_lifetime(payload: Dict[str, Any]) -> int:
        """Seconds until the token expires, used as blocklist TTL."""
        remaining = int(payload["exp"]) - int(datetime.now(timezone.utc).timestamp())
        return max(1, remaining)
