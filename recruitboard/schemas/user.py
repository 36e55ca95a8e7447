from __future__ import annotations

from recruitboard.schemas.common import ApiModel


class CurrentUser(ApiModel):
    id: int
    nickname: str = ""
