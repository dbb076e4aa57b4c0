class DomainError(Exception):
    """Base error carrying the HTTP status it maps to and extra body fields."""

    status_code = 500

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class ValidationError(DomainError):
    status_code = 400


class Unauthorized(DomainError):
    status_code = 401


class Forbidden(DomainError):
    status_code = 403


class NotFound(DomainError):
    status_code = 404


class Conflict(DomainError):
    status_code = 409


class AlreadySubmitted(Conflict):
    status_code = 400


class ServiceUnavailable(DomainError):
    status_code = 503


class InternalError(DomainError):
    status_code = 500
