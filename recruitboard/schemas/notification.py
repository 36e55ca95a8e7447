from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter

from recruitboard.schemas.common import ApiModel, UserRef

MENTION = "MENTION"
FRIEND = "FRIEND"

PENDING = "PENDING"
ACCEPTED = "ACCEPTED"
REJECTED = "REJECTED"


class PostRef(ApiModel):
    id: int


class MentionedComment(ApiModel):
    id: int
    content: str = ""
    post: PostRef


class MentionNotification(ApiModel):
    id: int
    noti_type: Literal["MENTION"] = Field(alias="notiType")
    noti_status: str | None = Field(default=None, alias="notiStatus")
    sender: UserRef
    comment: MentionedComment

    @property
    def headline(self) -> str:
        return self.sender.nickname

    @property
    def summary(self) -> str:
        return self.comment.content


class FriendNotification(ApiModel):
    id: int
    noti_type: Literal["FRIEND"] = Field(alias="notiType")
    noti_status: str | None = Field(default=None, alias="notiStatus")
    sender: UserRef

    @property
    def is_pending(self) -> bool:
        return self.noti_status == PENDING

    @property
    def headline(self) -> str:
        return "Friend request"

    @property
    def summary(self) -> str:
        return f"{self.sender.nickname} sent you a friend request!"


Notification = Annotated[
    Union[MentionNotification, FriendNotification],
    Field(discriminator="noti_type"),
]

notification_adapter: TypeAdapter[Notification] = TypeAdapter(Notification)


class NotificationStatusUpdate(ApiModel):
    receiver_id: int = Field(alias="receiverId")
    noti_type: str = Field(alias="notiType")
    noti_status: str = Field(alias="notiStatus")
    comment_id: int | None = Field(default=None, alias="commentId")
    room_id: int | None = Field(default=None, alias="roomId")
