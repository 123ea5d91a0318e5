# backend/errors.py
from typing import Optional


class ConfigError(RuntimeError):
    pass


class FsError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(FsError):
    status_code = 400
    default_message = "Bad Request"


class RootModificationError(FsError):
    status_code = 400
    default_message = "Cannot modify filesystem root"


class ForbiddenError(FsError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(FsError):
    status_code = 404
    default_message = "Not Found"


class PathEscapeError(FsError):
    """Raised when a path resolves outside of the root it was joined onto."""
    status_code = 403
    default_message = "Forbidden"


class StorageError(FsError):
    status_code = 500

    def __init__(self, err: OSError):
        self.cause = err
        super().__init__(f"Internal Server Error: {err}")
