"""Typed errors raised by ingestion and the version store"""


class StoryshelfError(Exception):
    """Base class; `retryable` tells callers whether redoing the operation can help."""
    retryable = False

    def user_message(self) -> str:
        return str(self)


class ValidationError(StoryshelfError, ValueError):
    """Caller supplied bad input; `field` names the offending input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidSlug(ValidationError):
    def __init__(self, message: str = "invalid slug: use lowercase letters/numbers/hyphens (e.g. the-gruffalo)"):
        super().__init__(message, field="slug")


class MissingTitle(ValidationError):
    def __init__(self, message: str = "title is required"):
        super().__init__(message, field="title")


class MissingContent(ValidationError):
    def __init__(self, message: str = "markdown is required"):
        super().__init__(message, field="markdown")


class RenderError(StoryshelfError):
    """The markdown renderer failed; usually caused by malformed input."""


class NotFoundError(StoryshelfError, LookupError):
    """A story or version is missing, or does not belong to the addressed story."""

    def __init__(self, message: str, entity: str | None = None):
        super().__init__(message)
        self.entity = entity


class ConflictError(StoryshelfError):
    """A concurrent write won the race for a version number or content hash."""
    retryable = True

    def user_message(self) -> str:
        return "the story was changed by another request; please retry"


class StorageError(StoryshelfError):
    """Transaction or connection failure."""
    retryable = True

    def user_message(self) -> str:
        return "storage is temporarily unavailable; please retry"
