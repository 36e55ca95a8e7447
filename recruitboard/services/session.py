from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt

from recruitboard.core.errors import Unauthorized


def _decode_token(token: str) -> dict[str, Any]:
    # Signature is checked by the API; the client only reads its own claims.
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        raise Unauthorized("Invalid token") from exc
    return payload


def _parse_user_id(payload: dict[str, Any]) -> int:
    raw_id = payload.get("userId") or payload.get("user_id") or payload.get("sub")
    try:
        return int(raw_id)
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid user id claim") from exc


@dataclass(slots=True)
class SessionContext:
    """Logged-in identity shared by the post controller and the notification store.

    ``set`` at session start, ``clear`` at logout. The current user's profile
    (``/users/whoami``) is resolved per view by the controller, not cached here.
    """

    access_token: str = ""
    user_id: int | None = None

    @classmethod
    def from_access_token(cls, token: str) -> SessionContext:
        session = cls()
        session.set(token)
        return session

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def set(self, access_token: str, user_id: int | None = None) -> None:
        if user_id is None and access_token:
            user_id = _parse_user_id(_decode_token(access_token))
        self.access_token = access_token
        self.user_id = user_id

    def clear(self) -> None:
        self.access_token = ""
        self.user_id = None
