from __future__ import annotations


class DirectoryError(Exception):
    """Base class for every error the directory core reports to its caller.

    ``code`` is a stable machine-readable identifier, ``message`` is safe to show
    to the user as-is. Only storage failures are worth retrying.
    """

    code = "directory_error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class NotFound(DirectoryError):
    code = "not_found"

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class ForeignKeyViolation(DirectoryError):
    code = "foreign_key_violation"

    def __init__(self, entity: str, business_id: str) -> None:
        super().__init__(f"{entity} references a missing business: {business_id}")
        self.entity = entity
        self.business_id = business_id


class InvalidRating(DirectoryError):
    code = "invalid_rating"


class InvalidComment(DirectoryError):
    code = "invalid_comment"


class InvalidDeal(DirectoryError):
    code = "invalid_deal"


class InvalidUpdate(DirectoryError):
    code = "invalid_update"


class ChallengeFailed(DirectoryError):
    code = "challenge_failed"


class StorageIOError(DirectoryError):
    code = "storage_io_error"
    retryable = True


class InvalidQuery(DirectoryError):
    code = "invalid_query"
