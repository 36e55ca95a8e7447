from __future__ import annotations

from typing import Protocol

LISTING_ROUTE = "/recruit/list"
WAITING_ROOM_ROUTE = "/wait"


def edit_route(post_id: int) -> str:
    return f"/recruit/update/{post_id}"


def mention_route(post_id: int, comment_id: int) -> str:
    return f"/recruit/{post_id}#comment-{comment_id}"


class Navigator(Protocol):
    def navigate(self, route: str) -> None: ...


class Prompter(Protocol):
    def alert(self, message: str) -> None: ...

    def toast(self, message: str) -> None: ...

    async def confirm(self, title: str, description: str) -> bool: ...


class FetchGeneration:
    """Monotonic token so a superseded in-flight fetch cannot overwrite a newer one."""

    def __init__(self) -> None:
        self._current = 0

    def begin(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current
