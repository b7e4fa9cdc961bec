"""
Custom Exception Classes for the LED Display Manager

Hierarchical exception structure for error handling across services.
"""


class DisplayManagerError(Exception):
    """Base exception for all display manager errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(DisplayManagerError):
    """Configuration-related errors"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class NotFoundError(DisplayManagerError):
    """Display or referenced entity missing in the store"""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}", recoverable=True)


class StoreError(DisplayManagerError):
    """Database request failed"""

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(f"Store Error: {message}", recoverable=True)


class RemoteUnavailableError(DisplayManagerError):
    """Device API call failed (network, timeout, non-success response)"""

    def __init__(
        self,
        message: str,
        terminal_id: str | None = None,
        status_code: int | None = None,
    ):
        self.terminal_id = terminal_id
        self.status_code = status_code
        super().__init__(f"Remote Unavailable: {message}", recoverable=True)


class ReconciliationError(DisplayManagerError):
    """Schedule evaluation or content publish failed after status was stored"""

    def __init__(
        self,
        message: str,
        display_id: str | None = None,
        content_id: str | None = None,
    ):
        self.display_id = display_id
        self.content_id = content_id
        super().__init__(f"Reconciliation Error: {message}", recoverable=True)
