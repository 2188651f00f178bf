from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tsync.core.enums import FriendStatus
from tsync.core.state_machine import STATUSES_WITH_REQUEST

__all__ = [
    "RelationshipState",
]


class RelationshipState(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: FriendStatus = FriendStatus.NONE
    request_id: str | None = Field(default=None, alias="requestId")

    @model_validator(mode="after")
    def check_request_id(self) -> Self:
        has_request = self.status in STATUSES_WITH_REQUEST
        if has_request and self.request_id is None:
            raise ValueError(f"Status {self.status.value} requires a request id")
        if not has_request and self.request_id is not None:
            raise ValueError(f"Status {self.status.value} cannot carry a request id")
        return self
