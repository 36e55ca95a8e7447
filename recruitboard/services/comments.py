from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import ValidationError

from recruitboard.core.config import Settings, settings as default_settings
from recruitboard.core.errors import (
    ApiError,
    MutationFailure,
    NotFound,
    RecruitClientError,
    ValidationFailure,
    describe_error,
)
from recruitboard.schemas.comment import Comment, CommentCreate, CommentRecord
from recruitboard.schemas.user import CurrentUser
from recruitboard.services.http import ApiClient
from recruitboard.services.ui import FetchGeneration, Prompter

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso_stamp(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_comment(record: CommentRecord, profile_image: str) -> Comment:
    created_at = record.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Comment(
        id=record.id,
        text=record.content,
        author_name=record.user.nickname,
        author_id=record.user.id,
        created_at=created_at,
        profile_image=profile_image,
    )


class VisibleWindow:
    """How many already-fetched comments are rendered.

    Grows by ``step`` whenever the viewport comes within ``threshold`` of the
    end of the page. It never requests further server pages.
    """

    def __init__(self, size: int = 10, step: int = 10, threshold: int = 100) -> None:
        self.initial = size
        self.size = size
        self.step = step
        self.threshold = threshold

    def near_bottom(self, viewport_height: float, scroll_y: float, content_height: float) -> bool:
        return viewport_height + scroll_y >= content_height - self.threshold

    def on_scroll(self, viewport_height: float, scroll_y: float, content_height: float) -> bool:
        if not self.near_bottom(viewport_height, scroll_y, content_height):
            return False
        self.size += self.step
        return True

    def clip(self, items: Sequence[T]) -> list[T]:
        return list(items[: min(self.size, len(items))])

    def reset(self) -> None:
        self.size = self.initial


class CommentFeed:
    def __init__(
        self,
        api: ApiClient,
        prompter: Prompter,
        *,
        settings: Settings | None = None,
        submit_enabled: Callable[[], bool] | None = None,
        on_reload: Callable[[], Awaitable[object]] | None = None,
    ) -> None:
        self.api = api
        self.prompter = prompter
        self.settings = settings or default_settings
        self._submit_enabled = submit_enabled or (lambda: True)
        self._on_reload = on_reload
        self._generation = FetchGeneration()

        self.post_id: int | None = None
        self.comments: list[Comment] = []
        self.draft = ""
        self.window = VisibleWindow(
            size=self.settings.comment_window_size,
            step=self.settings.comment_window_step,
            threshold=self.settings.scroll_bottom_threshold,
        )

    def bind(self, post_id: int, *, reset: bool = False) -> None:
        if reset or post_id != self.post_id:
            self.comments = []
            self.draft = ""
            self.window.reset()
        self.post_id = post_id
        self._generation.begin()

    @property
    def visible(self) -> list[Comment]:
        return self.window.clip(self.comments)

    @property
    def can_submit(self) -> bool:
        return self.post_id is not None and self._submit_enabled()

    def on_scroll(self, viewport_height: float, scroll_y: float, content_height: float) -> bool:
        return self.window.on_scroll(viewport_height, scroll_y, content_height)

    async def fetch(self, page: int = 0) -> list[Comment]:
        post_id = self.post_id
        if post_id is None:
            return self.comments
        token = self._generation.begin()

        try:
            payload = await self.api.get_json(f"/posts/comments/{post_id}", params={"page": page})
        except NotFound:
            if self._generation.is_current(token):
                logger.info("No comments for post id=%s", post_id)
                self.comments = []
            return self.comments
        except RecruitClientError as exc:
            logger.warning("Failed to load comments for post id=%s: %s", post_id, describe_error(exc))
            return self.comments

        if not self._generation.is_current(token):
            logger.debug("Discarding superseded comment page for post id=%s", post_id)
            return self.comments

        data = payload.get("data") if isinstance(payload, dict) else None
        rows = data.get("content") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            logger.warning("Comment page for post id=%s is not a list: %r", post_id, rows)
            return self.comments

        try:
            records = [CommentRecord.model_validate(row) for row in rows]
        except ValidationError:
            logger.warning("Malformed comment entry for post id=%s", post_id, exc_info=True)
            return self.comments

        image = self.settings.comment_profile_image
        self.comments = [_to_comment(record, image) for record in records]
        return self.comments

    def set_draft(self, value: str) -> bool:
        if len(value) > self.settings.comment_max_length:
            return False
        self.draft = value
        return True

    def _validate(self, text: str, author: CurrentUser | None) -> None:
        if not text.strip():
            raise ValidationFailure("Please enter a comment.")
        limit = self.settings.comment_max_length
        if len(text) > limit:
            raise ValidationFailure(f"Comments are limited to {limit} characters.")
        if author is None:
            raise ValidationFailure("Login is required.")

    async def _create(self, body: CommentCreate) -> None:
        try:
            resp = await self.api.post("/posts/comments", json=body.model_dump(by_alias=True))
        except ApiError as exc:
            raise MutationFailure("Failed to post comment.") from exc
        if resp.status_code != 201:
            raise MutationFailure(f"Unexpected status {resp.status_code} creating comment")

    async def submit(self, text: str, author: CurrentUser | None) -> bool:
        if not self.can_submit:
            logger.info("Comment submission is closed for post id=%s", self.post_id)
            return False
        try:
            self._validate(text, author)
        except ValidationFailure as exc:
            self.prompter.alert(exc.message)
            return False

        body = CommentCreate(
            post_id=self.post_id,
            user_id=author.id,
            mention_id=None,
            content=text,
            created_at=_iso_stamp(utcnow()),
        )
        try:
            await self._create(body)
        except RecruitClientError as exc:
            logger.warning("Comment submission failed for post id=%s: %s", self.post_id, describe_error(exc))
            self.prompter.alert("Failed to post comment. Please try again.")
            return False

        await self.fetch(0)
        return True

    async def submit_draft(self, author: CurrentUser | None) -> bool:
        ok = await self.submit(self.draft, author)
        if ok:
            self.draft = ""
        return ok

    def can_delete(self, comment: Comment, viewer: CurrentUser | None) -> bool:
        return viewer is not None and comment.author_id == viewer.id

    def deletable_ids(self, viewer: CurrentUser | None) -> set[int]:
        return {c.id for c in self.comments if self.can_delete(c, viewer)}

    async def delete(self, comment_id: int, viewer: CurrentUser | None) -> bool:
        comment = next((c for c in self.comments if c.id == comment_id), None)
        if comment is None or not self.can_delete(comment, viewer):
            logger.warning("Refusing to delete comment id=%s: not owned by the viewer", comment_id)
            return False

        confirmed = await self.prompter.confirm(
            "Delete this comment?",
            "Deleted comments cannot be recovered.",
        )
        if not confirmed:
            return False

        try:
            await self.api.delete(f"/posts/comments/{self.post_id}/{comment_id}")
        except RecruitClientError as exc:
            logger.warning("Failed to delete comment id=%s: %s", comment_id, describe_error(exc))
            self.prompter.alert("Failed to delete comment.")
            return False

        logger.info("Deleted comment id=%s", comment_id)
        if self._on_reload is not None:
            await self._on_reload()
        else:
            await self.fetch(0)
        return True
