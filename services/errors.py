class ServiceError(Exception):
    """Base error for the data layer. Carries the HTTP status it maps to."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing required field, bad enum value or malformed input"""
    status_code = 400


class NotFoundError(ServiceError):
    """No document for the given identifier"""
    status_code = 404


class ConflictError(ServiceError):
    """Document changed underneath a read-modify-write sequence"""
    status_code = 409


class StoreError(ServiceError):
    """Connectivity or unexpected persistence failure"""
    status_code = 500
