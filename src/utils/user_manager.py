"""User management utilities.

This module provides user management functionality including user storage,
password hashing, user authentication and profile updates.
"""

import logging
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    SchoolNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from models.school import SchoolModel
from models.user import UserModel
from schemas.user import User
from utils.converters import user_to_model, model_to_user
from utils.time_utils import utc_now_iso

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                _password_bytes(plain_password), hashed_password.encode("utf-8")
            )
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def resolve_school_code(self, school_code: Optional[str]) -> Optional[str]:
        """Map a school join code to a school ID.

        Args:
            school_code: Code typed by the user; blank means no school.

        Returns:
            The school ID, or None for a blank code.

        Raises:
            SchoolNotFoundError: If a non-blank code matches no school.
        """
        if not school_code or not school_code.strip():
            return None
        code = school_code.strip().upper()
        school = (
            self.db.query(SchoolModel)
            .filter(SchoolModel.school_code == code)
            .first()
        )
        if not school:
            raise SchoolNotFoundError(code)
        return school.id

    def create_user(
        self,
        email: str,
        password: str,
        role: str,
        first_name: str,
        last_name: str,
        school_id: Optional[str] = None,
        phone: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        address: Optional[str] = None,
    ) -> User:
        """Create a new user.

        Args:
            email: Login email; matched case-insensitively.
            password: Plain text password.
            role: One of the configured roles.
            first_name: Given name.
            last_name: Family name.
            school_id: Optional school the user belongs to.
            phone: Optional phone number.
            date_of_birth: Optional date of birth.
            address: Optional address.

        Returns:
            Created User object.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        email = email.strip().lower()
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise UserAlreadyExistsError(f"An account with email '{email}' already exists")

        user = User(
            email=email,
            password_hash=self.hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            school_id=school_id,
            phone=phone,
            date_of_birth=date_of_birth,
            address=address,
        )

        # The unique constraint still catches two registrations racing past the check above
        try:
            model = user_to_model(user)
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(
                f"An account with email '{email}' already exists"
            ) from e

        logger.info("Created user: %s (%s)", email, role)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if the email and password match, else None."""
        user = self.get_user_by_email(email)
        if user is None:
            return None
        if not self.verify_password(password, user.password_hash):
            return None
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email.

        Args:
            email: Email to look up, case-insensitive.

        Returns:
            User object if found, None otherwise.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_user_by_id(self, user_id: str) -> User:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object.

        Raises:
            UserNotFoundError: If no user has this ID.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if not model:
            raise UserNotFoundError(user_id)
        return model_to_user(model)

    def update_profile(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        date_of_birth: Optional[str] = None,
        address: Optional[str] = None,
        school_code: Optional[str] = None,
    ) -> User:
        """Update the editable profile fields of a user.

        Fields passed as None are left unchanged.

        Raises:
            UserNotFoundError: If the user does not exist.
            SchoolNotFoundError: If a non-blank school code matches no school.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if not model:
            raise UserNotFoundError(user_id)

        if school_code is not None:
            model.school_id = self.resolve_school_code(school_code)
        if first_name is not None and first_name.strip():
            model.first_name = first_name.strip()
        if last_name is not None and last_name.strip():
            model.last_name = last_name.strip()
        if phone is not None:
            model.phone = phone or None
        if date_of_birth is not None:
            model.date_of_birth = date_of_birth or None
        if address is not None:
            model.address = address or None
        model.updated_at = utc_now_iso()

        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated profile of user %s", user_id)
        return model_to_user(model)

    def count_users(self) -> int:
        return self.db.query(UserModel).count()
