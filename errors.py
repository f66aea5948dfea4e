"""Error taxonomy shared by the repository, services and HTTP layer."""


class PuzzlescoresError(Exception):
    """Base exception for application errors."""


class NotFoundError(PuzzlescoresError):
    """The requested game or score does not exist."""


class InvalidInputError(PuzzlescoresError, ValueError):
    """A request parameter or payload failed validation."""


class ConcurrencyConflictError(PuzzlescoresError):
    """An update was based on a stale version of the row."""
