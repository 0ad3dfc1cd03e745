"""Error types raised by the blog services"""


class BlogError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogError):
    """A required field is missing, too short, or produces an empty slug"""
    status_code = 400
    code = "BAD_REQUEST"


class ConflictError(BlogError):
    """A category name or slug is already taken"""
    status_code = 409
    code = "CONFLICT"


class NotFoundError(BlogError):
    """The requested post or category does not exist"""
    status_code = 404
    code = "NOT_FOUND"


class StoreError(BlogError):
    """The database rejected or failed a read/write"""
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
