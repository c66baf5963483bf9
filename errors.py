class BookingError(Exception):
    """Base class for failures reported back to the user."""

    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self):
        return {"success": False, "message": self.message, "details": self.details}


class AuthenticationRequired(BookingError):
    status_code = 401

    def __init__(self, message="Please log in to continue", details=None):
        super().__init__(message, details)


class AdminRequired(BookingError):
    status_code = 403

    def __init__(self, message="Admin access required", details=None):
        super().__init__(message, details)


class InvalidCredentials(BookingError):
    status_code = 401

    def __init__(self, message="Invalid username or password", details=None):
        super().__init__(message, details)


class DuplicateIdentity(BookingError):
    status_code = 409

    def __init__(self, message="Username or email already exists", details=None):
        super().__init__(message, details)


class EmptyCart(BookingError):
    def __init__(self, message="Please add some items to your cart first", details=None):
        super().__init__(message, details)


class ValidationError(BookingError):
    pass


class NotFound(BookingError):
    status_code = 404


class SeatAlreadyReserved(BookingError):
    status_code = 409


class DuplicateShowTime(BookingError):
    status_code = 409

    def __init__(self, message="A show time with this date and time already exists", details=None):
        super().__init__(message, details)


class StorageUnavailable(BookingError):
    status_code = 503

    def __init__(self, message="Database not accessible", details=None):
        super().__init__(message, details)
