"""Application errors raised by services and translated to JSON responses."""

from http import HTTPStatus


class ApplicationError(Exception):
    """Base error carrying a message and the HTTP status to answer with."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self):
        return {'message': self.message}


class ValidationError(ApplicationError):
    """Bad or missing input."""

    status_code = HTTPStatus.BAD_REQUEST


class NotFoundError(ApplicationError):
    """Referenced playlist, track or user does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class PermissionDeniedError(ApplicationError):
    """Requester may not act on the resource."""

    status_code = HTTPStatus.FORBIDDEN

    def __init__(self, message: str = 'Dont have permission', status_code: int = None):
        super().__init__(message, status_code)


class ConflictError(ApplicationError):
    """Resource already exists."""

    status_code = HTTPStatus.CONFLICT
