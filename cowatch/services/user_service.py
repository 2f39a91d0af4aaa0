"""Account registration and credential checks."""
import logging
import re

from sqlalchemy.orm import Session

from cowatch.auth import hash_password, verify_password
from cowatch.errors import UserRegistrationError
from cowatch.models.user import User
from cowatch.repositories import user_repository

logger = logging.getLogger(__name__)

# Usernames end up in stored filenames, so keep them path-safe
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")
MIN_PASSWORD_LENGTH = 6


def register_user(db: Session, username: str, email: str, password: str) -> User:
    username = username.strip()
    email = email.strip().lower()
    if not USERNAME_PATTERN.match(username) or username.strip(".") == "":
        raise UserRegistrationError(
            "Username must be 3-50 characters: letters, digits, '_', '.', '-'"
        )
    if "@" not in email:
        raise UserRegistrationError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise UserRegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if user_repository.get_user_by_username(db, username):
        raise UserRegistrationError("Username already exists")
    if user_repository.get_user_by_email(db, email):
        raise UserRegistrationError("Email already exists")

    user = user_repository.create_user(db, username, email, hash_password(password))
    logger.info("Registered user %s", username)
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = user_repository.get_user_by_username(db, username.strip())
    if not user or not verify_password(password, user.password):
        return None
    return user
