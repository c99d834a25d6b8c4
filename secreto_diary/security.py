"""
Credential hashing and bearer token handling.
"""

import hashlib
import hmac
import secrets
import time

import jwt

from .errors import AuthError, MissingCredentialsError
from .models import User

PBKDF2_ITERATIONS = 260_000
TOKEN_ISSUER = "secreto-diary"


def hash_password(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False

    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


class TokenIssuer:
    """Issues and verifies HS256 JWTs for authenticated users."""

    def __init__(self, secret: str, expire_days: int = 7) -> None:
        self._secret = secret
        self._lifetime = expire_days * 24 * 60 * 60

    def issue(self, user: User) -> str:
        now = int(time.time())
        payload = {
            "iss": TOKEN_ISSUER,
            "sub": user.id,
            "email": user.email,
            "username": user.username,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm="HS256")

    def verify(self, token: str) -> dict:
        """
        Decode a token and return its claims.

        Raises:
            AuthError: If the token is malformed, tampered with or expired
        """
        try:
            claims = jwt.decode(
                token, self._secret, algorithms=["HS256"], issuer=TOKEN_ISSUER
            )
        except jwt.PyJWTError:
            raise AuthError("Invalid or expired token")

        if not claims.get("sub"):
            raise AuthError("Invalid or expired token")
        return claims


def bearer_token(authorization: str | None) -> str:
    """
    Extract the token from an `Authorization: Bearer <token>` header.

    Raises:
        MissingCredentialsError: If the header or the token is absent
    """
    if not authorization:
        raise MissingCredentialsError("Access token required")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingCredentialsError("Access token required")
    return token
