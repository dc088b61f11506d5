from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """Authenticated caller, built once from verified token claims"""

    user_id: str
    email: str = ""
    roles: List[str] = []
    expires_at: datetime
    token: str = Field(default="", repr=False)

    model_config = ConfigDict(frozen=True)

    def has_role(self, role: str) -> bool:
        return role in self.roles


class JWTHandler:
    """Issues and verifies the access tokens every service accepts."""

    def __init__(self, secret_key: str, algorithm: str):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def encode_token(
        self, payload: Dict[str, Any], expires_delta: Optional[timedelta] = None
    ) -> str:
        """Encode a JWT token with the given payload and expiration."""
        now = datetime.now(timezone.utc)
        to_encode = payload.copy()
        to_encode.update(
            {
                "exp": now + (expires_delta or timedelta(minutes=30)),
                "iat": int(now.timestamp()),
                "type": "access",
            }
        )
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def issue_access_token(
        self, user_id: str, email: str, role: str, expires_delta: timedelta
    ) -> str:
        return self.encode_token(
            {"user_id": user_id, "email": email, "roles": [role]},
            expires_delta=expires_delta,
        )

    def decode_token(self, token: str) -> Principal:
        """Decode and validate a JWT token, returning the principal."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            user_id = payload.get("user_id")
            exp = payload.get("exp")
            if not user_id or not exp:
                raise ValueError("Invalid token payload")

            return Principal(
                user_id=str(user_id),
                email=payload.get("email") or "",
                roles=payload.get("roles", []),
                expires_at=datetime.fromtimestamp(exp),
                token=token,
            )
        except ExpiredSignatureError:
            raise ValueError("Token has expired")
        except JWTError as e:
            raise ValueError(f"Token validation failed: {e}")
