"""
User service: registration, password login, biometric login and biometric
key rotation.

Collaborators are injected so the service runs against any ``UserStore``,
password hasher and token issuer. Every failure is raised as a typed
``IdentityServiceError`` subclass; nothing is retried here.

Uniqueness of email and biometric key is checked read-then-write. Two
concurrent requests can both pass the read; the store's unique constraints
are the real guard and surface the same error types.
"""
import logging

from .auth import PasswordHasher, TokenIssuer
from .errors import (
    BiometricKeyConflictError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    UpdateFailedError,
)
from .schemas import UserDTO
from .store import UserStore
from .utils.event_logger import log_auth_event

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: UserStore, hasher: PasswordHasher, token_issuer: TokenIssuer):
        self.store = store
        self.hasher = hasher
        self.token_issuer = token_issuer

    def register(self, email: str, password: str) -> UserDTO:
        if self.store.find_by_email(email):
            raise DuplicateEmailError()

        hashed_pw = self.hasher.hash(password)
        new_user = self.store.create(email, hashed_pw)

        log_auth_event("register", user_id=new_user.id, email=new_user.email)
        # Registration does not log the user in
        return self._to_dto(new_user)

    def get_user_by_id(self, user_id: str) -> UserDTO:
        user = self.store.find_by_id(user_id)
        if not user:
            raise NotFoundError()
        return self._to_dto(user)

    def login(self, email: str, password: str) -> UserDTO:
        user = self.store.find_by_email(email)
        if not user or not self.hasher.verify(password, user.password):
            log_auth_event("login_failure", user_id=user.id if user else None, email=email)
            raise InvalidCredentialsError()

        token = self._issue_token(user)
        log_auth_event("login_success", user_id=user.id, email=user.email)
        return self._to_dto(user, access_token=token)

    def biometric_login(self, biometric_key: str) -> UserDTO:
        # The bare key is the credential; no challenge/response is performed
        user = self.store.find_by_biometric_key(biometric_key)
        if not user:
            log_auth_event("biometric_login_failure")
            raise InvalidCredentialsError("Biometric key not found")

        token = self._issue_token(user)
        log_auth_event("biometric_login_success", user_id=user.id, email=user.email)
        return self._to_dto(user, access_token=token)

    def update_biometric_key(self, user_id: str, biometric_key: str) -> None:
        holder = self.store.find_by_biometric_key(biometric_key)
        if holder and holder.id != user_id:
            log_auth_event("biometric_key_conflict", user_id=user_id)
            raise BiometricKeyConflictError()

        updated = self.store.update(user_id, {"biometric_key": biometric_key})
        if not updated:
            logger.error("Biometric key update matched no user: user_id=%s", user_id)
            raise UpdateFailedError()

        log_auth_event("biometric_key_updated", user_id=user_id, email=updated.email)

    def _issue_token(self, user) -> str:
        return self.token_issuer.sign({"userId": user.id, "email": user.email})

    @staticmethod
    def _to_dto(user, access_token: str = None) -> UserDTO:
        dto = UserDTO.model_validate(user)
        if access_token is not None:
            dto = dto.model_copy(update={"access_token": access_token})
        return dto
