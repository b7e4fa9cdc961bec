"""
VNNOX Response Contracts

Every VNNOX endpoint answers with the same envelope:

    {"code": 0, "message": "ok", "data": {...}}

`code == 0` means success. The payload models below only declare the
fields the monitoring loop reads; anything else is kept as extra.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class TerminalStatus(BaseModel):
    """Payload of GET /terminals/{id}/status"""
    model_config = ConfigDict(extra="allow")

    online: bool = False


class PlayingContent(BaseModel):
    """Payload of GET /terminals/{id}/playing"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    content_id: str | None = Field(default=None, alias="contentId")

    @field_validator("content_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Terminals report numeric ids for some content types
        if isinstance(value, int):
            return str(value)
        return value


class VnnoxResponse(BaseModel, Generic[T]):
    """Envelope shared by all VNNOX endpoints"""

    code: int
    message: str | None = ""
    data: T | None = None

    @property
    def succeeded(self) -> bool:
        return self.code == 0


StatusResponse = VnnoxResponse[TerminalStatus]
PlayingResponse = VnnoxResponse[PlayingContent]
CommandResponse = VnnoxResponse[dict[str, Any]]
