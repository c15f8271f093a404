"""
User store contract and its SQLAlchemy implementation.
"""
import logging
from typing import Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import BiometricKeyConflictError, DuplicateEmailError, StoreError, UpdateFailedError
from .models import User

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Storage contract consumed by the user service."""

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def find_by_biometric_key(self, biometric_key: str) -> Optional[User]:
        ...

    def create(self, email: str, password_hash: str) -> User:
        ...

    def update(self, user_id: str, fields: dict) -> Optional[User]:
        """Apply ``fields`` to the user; return None when no such user exists."""
        ...


class SqlAlchemyUserStore:
    """UserStore backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_biometric_key(self, biometric_key: str) -> Optional[User]:
        return self.db.query(User).filter(User.biometric_key == biometric_key).first()

    def create(self, email: str, password_hash: str) -> User:
        new_user = User(email=email, password=password_hash)
        self.db.add(new_user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            self.db.rollback()
            raise DuplicateEmailError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to create user email=%s: %s", email, e)
            raise StoreError() from e
        self.db.refresh(new_user)
        return new_user

    def update(self, user_id: str, fields: dict) -> Optional[User]:
        user = self.find_by_id(user_id)
        if not user:
            return None

        for name, value in fields.items():
            setattr(user, name, value)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if "biometric_key" in fields:
                raise BiometricKeyConflictError() from e
            raise UpdateFailedError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to update user_id=%s: %s", user_id, e)
            raise UpdateFailedError() from e
        self.db.refresh(user)
        return user
