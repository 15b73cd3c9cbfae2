class ApplicationError(Exception):
    """Base class for application-specific errors."""
    pass


class ValidationFailure(ApplicationError):
    """Raised when user input is rejected locally, before any request is sent."""
    pass


class ReportedFailure(ApplicationError):
    """Raised when the server answers with a well-formed body reporting failure."""
    def __init__(self, message="The server reported a failure."):
        super().__init__(message)
        self.message = message


class TransportFailure(ApplicationError):
    """Raised for network errors, non-2xx responses and undecodable bodies."""
    def __init__(self, message="The request could not be completed.", original_exception=None, status_code=None):
        super().__init__(message)
        self.original_exception = original_exception
        self.status_code = status_code


class ItemNotFoundError(ApplicationError):
    """Raised when an inventory record does not exist."""
    pass


class DatabaseError(ApplicationError):
    """Raised by the backend when its store cannot serve a request."""
    def __init__(self, message="A database error occurred.", original_exception=None):
        super().__init__(message)
        self.original_exception = original_exception


class ItemAlreadyExistsError(ApplicationError):
    """Raised when adding a catalog item whose name is already taken."""
    pass
