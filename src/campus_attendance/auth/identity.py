from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt

from ..common.datetime_utils import now_utc
from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class Principal:
    """Who is calling: the user id and role asserted by the identity provider."""

    user_id: str
    role: Role


class TokenVerifier:
    """Verifies identity-provider credentials (signed JWTs carrying `uid` and `role`)."""

    def __init__(self, secret: str, *, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> Principal:
        if not token:
            raise AuthenticationError("Access denied. No token provided.")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired.")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token.")

        user_id = claims.get("uid")
        if not user_id:
            raise AuthenticationError("Invalid token.")
        try:
            role = Role(claims.get("role"))
        except ValueError:
            raise AuthenticationError("Invalid token role.")
        return Principal(user_id=str(user_id), role=role)

    def issue(self, user_id: str, role: Role, *, ttl: timedelta = timedelta(hours=8), now: Optional[datetime] = None) -> str:
        """Mint a credential; used by development scripts and tests standing in for the provider."""
        now = now or now_utc()
        payload = {
            "uid": user_id,
            "role": role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)
