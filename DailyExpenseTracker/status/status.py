"""Status definitions and exceptions for DailyExpenseTracker.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., AuthenticationFailedException) for error handling in services
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()

    # Config status
    ClientConfigNotFound = enum.auto()
    ClientConfigInvalid = enum.auto()

    # Authentication status
    AuthenticationFailed = enum.auto()
    NotAuthenticated = enum.auto()
    SessionInvalid = enum.auto()

    # Service status
    ServiceUnavailable = enum.auto()

    # Table access status
    FetchFailed = enum.auto()
    WriteFailed = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',

    Status.ClientConfigNotFound: 'Could not find the service URL or API key. Have you set SUPABASE_URL and SUPABASE_ANON_KEY?',
    Status.ClientConfigInvalid: 'The client config seems to be incomplete, or contains invalid values.',

    Status.AuthenticationFailed: 'Authentication failed. Please check your email and password.',
    Status.NotAuthenticated: 'You are not logged in. Please log in first.',
    Status.SessionInvalid: 'The stored session could not be read. Please log in again.',

    Status.ServiceUnavailable: 'The expense service is unavailable. Please check your connection.',

    Status.FetchFailed: 'Could not fetch the expenses.',
    Status.WriteFailed: 'Could not save the changes.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in DailyExpenseTracker.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.
        message (str): The detail message if one was given, otherwise the status message.

    Args:
        message (str): Optional additional context for the error, usually the backend's own message.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        self.message = message or self.status_message
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(self.message)


class ClientConfigNotFoundException(BaseStatusException):
    """Exception raised when the service URL or API key is not configured."""
    status = Status.ClientConfigNotFound


class ClientConfigInvalidException(BaseStatusException):
    """Exception raised when the client configuration is invalid or malformed."""
    status = Status.ClientConfigInvalid


class AuthenticationFailedException(BaseStatusException):
    """Exception raised when the auth service rejects a sign-in or sign-out."""
    status = Status.AuthenticationFailed


class NotAuthenticatedException(BaseStatusException):
    """Exception raised when an operation needs a session and there is none."""
    status = Status.NotAuthenticated


class SessionInvalidException(BaseStatusException):
    """Exception raised when the stored session is corrupt."""
    status = Status.SessionInvalid


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when the backend client cannot be created or reached."""
    status = Status.ServiceUnavailable


class FetchFailedException(BaseStatusException):
    """Exception raised when the expense list cannot be fetched."""
    status = Status.FetchFailed


class WriteFailedException(BaseStatusException):
    """Exception raised when an insert, update or delete fails."""
    status = Status.WriteFailed
