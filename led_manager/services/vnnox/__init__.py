"""VNNOX device API client and response contracts."""

from .client import VnnoxClient
from .responses import (
    CommandResponse,
    PlayingContent,
    PlayingResponse,
    StatusResponse,
    TerminalStatus,
    VnnoxResponse,
)

__all__ = [
    "VnnoxClient",
    "VnnoxResponse",
    "TerminalStatus",
    "PlayingContent",
    "StatusResponse",
    "PlayingResponse",
    "CommandResponse",
]
