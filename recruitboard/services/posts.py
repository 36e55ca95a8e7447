from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from recruitboard.core.config import Settings, settings as default_settings
from recruitboard.core.errors import (
    ApiError,
    MutationFailure,
    RecruitClientError,
    ValidationFailure,
    describe_error,
)
from recruitboard.schemas.common import Envelope
from recruitboard.schemas.post import Post, PostUpdate, RoomRef
from recruitboard.schemas.user import CurrentUser
from recruitboard.services.comments import CommentFeed
from recruitboard.services.http import ApiClient
from recruitboard.services.session import SessionContext
from recruitboard.services.ui import (
    LISTING_ROUTE,
    WAITING_ROOM_ROUTE,
    FetchGeneration,
    Navigator,
    Prompter,
    edit_route,
)

logger = logging.getLogger(__name__)


def _parse_post_id(raw: int | str | None) -> int:
    if isinstance(raw, bool):
        raise ValidationFailure("Please provide a valid post id.")
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationFailure("Please provide a valid post id.") from exc
    if value <= 0:
        raise ValidationFailure("Please provide a valid post id.")
    return value


class RecruitPostController:
    """State for one recruitment post view: the post, who is looking at it, and its comments.

    Authorization is always derived from ``post`` and ``current_user``; mutations
    invalidate and re-fetch instead of patching collections in place.
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionContext,
        navigator: Navigator,
        prompter: Prompter,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.api = api
        self.session = session
        self.navigator = navigator
        self.prompter = prompter
        self.settings = settings or default_settings
        self._generation = FetchGeneration()

        self.post_id: int | None = None
        self.post: Post | None = None
        self.current_user: CurrentUser | None = None
        self.comments = CommentFeed(
            api,
            prompter,
            settings=self.settings,
            submit_enabled=lambda: self.is_recruited,
            on_reload=self.reload,
        )

    @property
    def is_author(self) -> bool:
        if self.post is None or self.current_user is None:
            return False
        return self.post.user.id == self.current_user.id

    @property
    def is_recruited(self) -> bool:
        return self.post is not None and self.post.recruited

    @property
    def study_room(self) -> RoomRef | None:
        return self.post.room if self.post else None

    @property
    def can_enter_room(self) -> bool:
        return self.is_recruited

    async def load(self, post_id: int | str | None, *, fresh: bool = False) -> bool:
        try:
            pid = _parse_post_id(post_id)
        except ValidationFailure as exc:
            self.prompter.alert(exc.message)
            return False

        if pid != self.post_id:
            self.post = None
        self.post_id = pid
        self.comments.bind(pid, reset=fresh)
        token = self._generation.begin()

        _, loaded = await asyncio.gather(self._load_current_user(token), self._load_post(pid, token))
        return loaded

    async def reload(self) -> bool:
        return await self.load(self.post_id, fresh=True)

    async def _load_current_user(self, token: int) -> None:
        try:
            payload = await self.api.get_json("/users/whoami")
            user = Envelope[CurrentUser].model_validate(payload).data
        except (RecruitClientError, ValidationError) as exc:
            if not self._generation.is_current(token):
                return
            logger.warning("Could not resolve the current user: %s", describe_error(exc))
            self.current_user = None
            return
        if self._generation.is_current(token):
            self.current_user = user

    async def _load_post(self, post_id: int, token: int) -> bool:
        try:
            payload = await self.api.get_json(f"/posts/{post_id}")
            post = Envelope[Post].model_validate(payload).data
        except (RecruitClientError, ValidationError) as exc:
            if not self._generation.is_current(token):
                return False
            logger.warning("Failed to load post id=%s: %s", post_id, describe_error(exc))
            self.prompter.alert("Post not found.")
            self.navigator.navigate(LISTING_ROUTE)
            return False

        if not self._generation.is_current(token):
            logger.debug("Discarding superseded post detail for id=%s", post_id)
            return False

        self.post = post
        await self.comments.fetch(0)
        return True

    async def _replace_post(self, post_id: int, body: PostUpdate) -> None:
        try:
            await self.api.patch(f"/posts/{post_id}", json=body.model_dump(by_alias=True))
        except ApiError as exc:
            raise MutationFailure("Post update rejected") from exc

    async def complete_recruitment(self) -> bool:
        post = self.post
        if post is None or not self.is_author:
            logger.warning("Only the author may complete recruitment for post id=%s", self.post_id)
            return False

        body = PostUpdate.from_post(post, is_recruited=False)
        try:
            await self._replace_post(post.id, body)
        except RecruitClientError as exc:
            logger.warning("Failed to complete recruitment for post id=%s: %s", post.id, describe_error(exc))
            self.prompter.alert("Failed to change the recruitment status. Please try again.")
            return False

        self.post = post.model_copy(update={"recruited": False})
        self.prompter.toast("Changes saved!")
        return True

    async def delete_post(self) -> bool:
        post = self.post
        if post is None or not self.is_author:
            logger.warning("Only the author may delete post id=%s", self.post_id)
            return False

        confirmed = await self.prompter.confirm(
            "Delete this post?",
            "Deleted posts cannot be recovered.",
        )
        if not confirmed:
            return False

        try:
            await self.api.delete(f"/posts/{post.id}")
        except RecruitClientError as exc:
            logger.warning("Failed to delete post id=%s: %s", post.id, describe_error(exc))
            self.prompter.alert("Failed to delete the post. Please try again.")
            return False

        logger.info("Deleted post id=%s", post.id)
        self.navigator.navigate(LISTING_ROUTE)
        return True

    def edit_post(self) -> bool:
        if self.post is None or not self.is_author:
            return False
        self.navigator.navigate(edit_route(self.post.id))
        return True

    def enter_study_room(self) -> bool:
        if not self.can_enter_room:
            return False
        self.navigator.navigate(WAITING_ROOM_ROUTE)
        return True

    async def submit_comment(self, text: str) -> bool:
        return await self.comments.submit(text, self.current_user)

    async def delete_comment(self, comment_id: int) -> bool:
        return await self.comments.delete(comment_id, self.current_user)
