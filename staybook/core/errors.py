"""Application errors. Services raise these; main.py renders them as envelopes."""


class AppError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code: int = 400
    default_message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UsernameExistsError(AppError):
    status_code = 409
    default_message = "Username already exists."


class RoleNotFoundError(AppError):
    """A seeded role is missing; this is a deployment problem, not a user error."""

    status_code = 500
    default_message = "Role does not exist."


class UserNotFoundError(AppError):
    status_code = 404
    default_message = "User does not exist."


class UsernameInvalidError(AppError):
    status_code = 400
    default_message = "Username is invalid."


class PasswordInvalidError(AppError):
    status_code = 400
    default_message = "Current password is incorrect."


class PasswordConfirmMismatchError(AppError):
    status_code = 400
    default_message = "New password and confirmation do not match."


class TokenParseError(AppError):
    status_code = 401
    default_message = "Token could not be parsed."


class InvalidCredentialsError(AppError):
    status_code = 401
    default_message = "Invalid username or password."


class ListingNotFoundError(AppError):
    status_code = 404
    default_message = "Listing does not exist."


class BookingInvalidError(AppError):
    status_code = 400
    default_message = "Booking request is invalid."


class BookingConflictError(AppError):
    status_code = 409
    default_message = "Listing is already booked for the requested dates."


class ImageStoreError(AppError):
    """Raised when the image store rejects an upload or cannot be reached."""

    status_code = 502
    default_message = "Image upload failed."


class ImageStoreNotConfiguredError(ImageStoreError):
    status_code = 503
    default_message = "Image store is not configured."
