"""
Typed failures raised by the identity service.

The service never knows about HTTP; the transport layer maps each class to a
status code (see ``main.ERROR_STATUS_CODES``).
"""


class IdentityServiceError(Exception):
    """Base class for every failure surfaced by the identity service."""

    default_message = "An error occurred"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ClientError(IdentityServiceError):
    """The caller supplied something the service refuses."""


class ServerError(IdentityServiceError):
    """An unexpected failure in the store or a crypto collaborator."""


class DuplicateEmailError(ClientError):
    default_message = "Email is already taken"


class InvalidCredentialsError(ClientError):
    # Same kind for unknown identity and wrong secret
    default_message = "Invalid email or password"


class NotFoundError(ClientError):
    default_message = "User not found"


class BiometricKeyConflictError(ClientError):
    default_message = "Biometric key already belongs to another user"


class UpdateFailedError(ServerError):
    default_message = "Error while updating user's biometric"


class TokenIssuanceError(ServerError):
    default_message = "Failed to issue access token"


class StoreError(ServerError):
    default_message = "User store is unavailable"
