# app/core/exceptions.py

"""
Business errors raised by the services.

Routers turn these into HTTP status codes; nothing here knows about HTTP.
"""


class AppError(Exception):
    """Base class for every expected, caller-recoverable failure."""


# --- friend relationships ---

class SelfReferenceError(AppError):
    """Actor and target are the same user."""


class DuplicateRequestError(AppError):
    """A relationship already exists for the pair."""


class NotFoundError(AppError):
    """No relationship in the state the transition needs."""


# --- sessions ---

class DuplicateSessionError(AppError):
    """The user already has a live session."""


class IncorrectCredentialsError(AppError):
    """Unknown user id or wrong password."""


class UnauthenticatedError(AppError):
    """The token does not resolve to a live session."""


# --- accounts / files ---

class DuplicateUserError(AppError):
    pass


class FileUploadError(AppError):
    pass


# --- infrastructure ---

class StoreUnavailableError(AppError):
    """Storage stayed unreachable after a retry. Never a business outcome."""
