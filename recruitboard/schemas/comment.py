from __future__ import annotations

from datetime import datetime

from pydantic import Field

from recruitboard.schemas.common import ApiModel, UserRef


class CommentRecord(ApiModel):
    id: int
    content: str
    user: UserRef
    created_at: datetime = Field(alias="createdAt")


class Comment(ApiModel):
    id: int
    text: str
    author_name: str
    author_id: int
    created_at: datetime
    profile_image: str


class CommentCreate(ApiModel):
    post_id: int = Field(alias="postId")
    user_id: int = Field(alias="userId")
    mention_id: int | None = Field(default=None, alias="mentionId")
    content: str
    created_at: str = Field(alias="createdAt")
