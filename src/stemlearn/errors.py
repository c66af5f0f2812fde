"""Exception hierarchy for the data and gamification engine.

Not-found lookups and credential mismatches are represented as ``None`` and
never raise. Everything here is something a caller must branch on.
"""

from __future__ import annotations

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class StemLearnError(Exception):
    """Base class for all engine errors."""


class StoreInitializationError(StemLearnError):
    """The store could not be opened, reset, migrated or seeded.

    Fatal: the app must not render authenticated content after this.
    """


class StoreNotInitializedError(StemLearnError):
    """A query or command was issued before initialization completed."""

    def __init__(self) -> None:
        super().__init__("Store not initialized. Call initialize() first.")


class DuplicateAccountError(StemLearnError):
    """Registration collided with an existing email or username."""

    def __init__(self, field: str) -> None:
        self.field = field
        if field == "email":
            msg = "Email already exists. This email is already registered."
        elif field == "username":
            msg = "Email already exists. An account with this email already exists."
        else:
            msg = "An account with these details already exists."
        super().__init__(msg)


class InvalidRegistrationError(StemLearnError, ValueError):
    """Registration data failed validation (age bounds, enums, password)."""


class EmptyPatchError(StemLearnError, ValueError):
    """An update was requested with no fields set."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        super().__init__(f"Update for {entity} must set at least one field")


def user_message(exc: BaseException) -> str:
    """Map an exception to the text shown to the user."""
    if isinstance(exc, DuplicateAccountError | InvalidRegistrationError):
        return str(exc)
    return GENERIC_ERROR_MESSAGE
