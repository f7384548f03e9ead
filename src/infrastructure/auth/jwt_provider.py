"""JWT authentication provider implementation.

Session token payload structure:
    {
        "sub": "user@example.com",
        "name": "Display Name",
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from core.config import settings
from core.exceptions import InvalidTokenError, TokenExpiredError
from infrastructure.auth.provider import TokenUser


class JWTAuthProvider:
    """JWT-based authentication provider (HS256 shared secret)."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> TokenUser:
        """
        Validate a JWT token and extract user info.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser with the identity and display name claims

        Raises:
            TokenExpiredError: Signature is valid but ``exp`` has passed
            InvalidTokenError: Anything else (bad signature, garbage, missing ``sub``)
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise InvalidTokenError() from e

        email = payload.get("sub")
        if not email or not isinstance(email, str):
            raise InvalidTokenError()

        return TokenUser(email=email, display_name=payload.get("name"))

    def create_token(self, user: TokenUser) -> str:
        """
        Create a signed session token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": user.email,
            "name": user.display_name,
            "exp": expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
