"""
JWT Token Service

Handles generation and validation of JWT access tokens. The notification
service only verifies tokens issued by the identity service; creation is used
by tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt


class TokenService:
    """Service for JWT token operations"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 30,
    ):
        """
        Initialize token service

        Args:
            secret_key: Secret key for JWT signing
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token expiration in minutes (default: 30)
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(self, user_id: str, additional_claims: Optional[dict] = None) -> str:
        """
        Create JWT access token

        Args:
            user_id: User id placed in the ``sub`` claim
            additional_claims: Optional additional claims to include

        Returns:
            Encoded JWT token string

        Example:
            ```python
            service = TokenService(secret_key="secret")
            token = service.create_access_token("user-123")
            ```
        """
        now = datetime.now(UTC)
        expire = now + timedelta(minutes=self.access_token_expire_minutes)

        claims = {
            "sub": str(user_id),
            "type": "access",
            "iat": now,
            "exp": expire,
        }

        if additional_claims:
            claims.update(additional_claims)

        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[dict]:
        """
        Decode and validate JWT token

        Args:
            token: JWT token string

        Returns:
            Decoded token payload or None if invalid or expired
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def verify_access_token(self, token: str) -> Optional[str]:
        """
        Verify access token and extract user ID

        The user id is read from ``sub``, falling back to a ``userId`` claim
        for tokens issued by the legacy identity service. Tokens typed as
        anything other than ``access`` are rejected.

        Args:
            token: JWT access token string

        Returns:
            User id if valid access token, None otherwise
        """
        payload = self.decode_token(token)

        if payload is None:
            return None

        if payload.get("type", "access") != "access":
            return None

        user_id = payload.get("sub") or payload.get("userId")
        if not user_id:
            return None

        return str(user_id)
