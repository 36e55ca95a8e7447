from __future__ import annotations

from pydantic import Field, field_validator

from recruitboard.schemas.common import ApiModel, UserRef


class RoomRef(ApiModel):
    id: int
    title: str = ""
    cam_enabled: bool = Field(default=False, alias="camEnabled")
    current_users: int = Field(default=0, alias="currentUsers")
    max_users: int = Field(default=0, alias="maxUsers")
    thumbnail: str | None = None


class Post(ApiModel):
    id: int
    title: str = ""
    content: str = ""
    type: str = ""
    recruited: bool = False
    user: UserRef
    room: RoomRef | None = None

    @field_validator("recruited", mode="before")
    @classmethod
    def _null_means_closed(cls, value: object) -> object:
        return False if value is None else value


class PostUpdate(ApiModel):
    """Whole-record replace body for ``PATCH /posts/{id}``."""

    user_id: int = Field(alias="userId")
    room_id: int | None = Field(default=None, alias="roomId")
    title: str
    content: str
    type: str
    is_recruited: bool = Field(alias="isRecruited")

    @classmethod
    def from_post(cls, post: Post, *, is_recruited: bool) -> PostUpdate:
        return cls(
            user_id=post.user.id,
            room_id=post.room.id if post.room else None,
            title=post.title,
            content=post.content,
            type=post.type,
            is_recruited=is_recruited,
        )
