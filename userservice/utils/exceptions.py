from typing import Optional


class UserServiceException(Exception):
    """Base exception for the application, carries the HTTP status to answer with"""
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(UserServiceException):
    """Invalid argument: self-relationship, bad pagination, future birth date"""
    status_code = 400


class AuthorizationError(UserServiceException):
    """Operation blocked for this caller"""
    status_code = 403


class NotFoundError(UserServiceException):
    """Resource not found errors"""
    status_code = 404


class ConflictError(UserServiceException):
    """Resource conflict errors"""
    status_code = 409


class StorageError(UserServiceException):
    """Persistence failure, reported without storage details"""
    status_code = 500
