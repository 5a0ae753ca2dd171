from typing import Dict, Optional


class DomainError(Exception):
    status_code = 400
    default_detail = "Invalid operation"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(DomainError):
    status_code = 401
    default_detail = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(DomainError):
    status_code = 403
    default_detail = "Access denied"


class NotFound(DomainError):
    status_code = 404
    default_detail = "Not found"


class DuplicateQuote(DomainError):
    status_code = 409
    default_detail = "You have already sent a quote for this request"


class AlreadyProcessed(DomainError):
    status_code = 409
    default_detail = "This quote has already been processed"


class EmailAlreadyRegistered(DomainError):
    status_code = 409
    default_detail = "A user with this email already exists"


class InternalError(DomainError):
    status_code = 500
    default_detail = "Internal server error"
