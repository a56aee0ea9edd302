class AssistantError(Exception):
    """Base class for errors raised inside the chat pipeline."""


class CatalogError(AssistantError):
    """The product catalog could not be loaded or is inconsistent."""


class BackendError(AssistantError):
    """The generative backend failed (network, timeout, non-2xx)."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
