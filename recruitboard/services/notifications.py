from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, assert_never

from pydantic import ValidationError

from recruitboard.core.errors import (
    ApiError,
    MutationFailure,
    RecruitClientError,
    StaleStateGuard,
    describe_error,
)
from recruitboard.schemas.notification import (
    ACCEPTED,
    FRIEND,
    REJECTED,
    FriendNotification,
    MentionNotification,
    Notification,
    NotificationStatusUpdate,
    notification_adapter,
)
from recruitboard.services.http import ApiClient
from recruitboard.services.session import SessionContext
from recruitboard.services.ui import FetchGeneration, Navigator, Prompter, mention_route

logger = logging.getLogger(__name__)

ESCAPE_KEY = "Escape"


def _parse_feed(payload: Any) -> list[Notification]:
    rows = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        logger.warning("Notification feed is not a list: %r", rows)
        return []
    out: list[Notification] = []
    for row in rows:
        try:
            out.append(notification_adapter.validate_python(row))
        except ValidationError:
            logger.warning("Skipping unsupported notification entry: %r", row)
    return out


def find_pending_friend_request(feed: list[Notification], notification_id: int) -> FriendNotification:
    for item in feed:
        if isinstance(item, FriendNotification) and item.id == notification_id and item.is_pending:
            return item
    raise StaleStateGuard(f"No pending friend request with id={notification_id}")


class NotificationStore:
    def __init__(
        self,
        api: ApiClient,
        session: SessionContext,
        navigator: Navigator,
        prompter: Prompter,
        *,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self.api = api
        self.session = session
        self.navigator = navigator
        self.prompter = prompter
        self._on_close = on_close
        self._generation = FetchGeneration()

        self.notifications: list[Notification] = []
        self.is_open = False
        self.is_loading = False

    @property
    def is_empty(self) -> bool:
        return not self.is_loading and not self.notifications

    def _feed_path(self) -> str:
        return f"/users/{self.session.user_id}/notifications"

    async def _load(self) -> list[Notification]:
        payload = await self.api.get_json(self._feed_path())
        return _parse_feed(payload)

    async def open(self) -> None:
        self.is_open = True
        self.notifications = []
        if self.session.user_id is None:
            logger.info("Notification panel opened without a logged-in user")
            return
        self.is_loading = True
        token = self._generation.begin()
        try:
            await self._fetch(token)
        finally:
            if self._generation.is_current(token):
                self.is_loading = False

    async def fetch(self) -> list[Notification]:
        if self.session.user_id is None:
            return self.notifications
        return await self._fetch(self._generation.begin())

    async def _fetch(self, token: int) -> list[Notification]:
        try:
            feed = await self._load()
        except RecruitClientError as exc:
            logger.warning("Failed to load notifications for user id=%s: %s", self.session.user_id, describe_error(exc))
            return self.notifications
        if not self._generation.is_current(token):
            logger.debug("Discarding superseded notification feed")
            return self.notifications
        feed.reverse()
        self.notifications = feed
        return self.notifications

    def dispatch(self, notification: Notification) -> str | None:
        if isinstance(notification, MentionNotification):
            route = mention_route(notification.comment.post.id, notification.comment.id)
            self.navigator.navigate(route)
            return route
        if isinstance(notification, FriendNotification):
            # Accept/reject controls handle friend requests; clicking does not navigate.
            return None
        assert_never(notification)

    async def accept_friend_request(self, notification_id: int) -> bool:
        return await self._answer_friend_request(notification_id, ACCEPTED)

    async def reject_friend_request(self, notification_id: int) -> bool:
        return await self._answer_friend_request(notification_id, REJECTED)

    async def _answer_friend_request(self, notification_id: int, status: str) -> bool:
        if self.session.user_id is None:
            logger.warning("Cannot answer friend request id=%s without a logged-in user", notification_id)
            return False

        try:
            fresh = await self._load()
            request = find_pending_friend_request(fresh, notification_id)
        except StaleStateGuard as exc:
            logger.error("%s", exc.message)
            return False
        except RecruitClientError as exc:
            logger.warning("Could not refresh notifications before answering id=%s: %s", notification_id, describe_error(exc))
            return False

        body = NotificationStatusUpdate(
            receiver_id=request.sender.id,
            noti_type=FRIEND,
            noti_status=status,
            comment_id=None,
            room_id=None,
        )
        try:
            await self._update_status(notification_id, body)
        except RecruitClientError as exc:
            logger.warning("Friend request id=%s update failed: %s", notification_id, describe_error(exc))
            self.prompter.alert("Could not answer the friend request. Please try again.")
            return False

        if status == ACCEPTED:
            self.prompter.alert("Friend request accepted!")
        else:
            self.prompter.alert("Friend request declined.")
        if self.is_open:
            await self.fetch()
        return True

    async def _update_status(self, notification_id: int, body: NotificationStatusUpdate) -> None:
        try:
            await self.api.patch(f"{self._feed_path()}/{notification_id}", json=body.model_dump(by_alias=True))
        except ApiError as exc:
            raise MutationFailure("Notification status update rejected") from exc

    def close(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        self.is_loading = False
        self.notifications = []
        self._generation.begin()
        if self._on_close is not None:
            self._on_close()

    def handle_key(self, key: str) -> bool:
        if key != ESCAPE_KEY:
            return False
        self.close()
        return True

    def handle_outside_click(self) -> None:
        self.close()
