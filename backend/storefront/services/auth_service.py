# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication and account service.

Passwords are hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default).
Self-registration always creates a customer; only the admin role endpoint
(or the CLI) can promote a user.

PASSWORD RULES:
- Minimum 6 characters
- Must contain uppercase, lowercase and a digit
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User, ROLES, ROLE_CUSTOMER
from ..validation import ValidationError, ConflictError, NotFoundError
from ..time_utils import utcnow

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise PasswordValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_username(username) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("Username is required")
    username = username.strip()
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    return username


def validate_email(email) -> str:
    if not isinstance(email, str) or not _EMAIL_RE.match(email.strip()):
        raise ValidationError("Valid email is required")
    return normalize_email(email)


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. Malformed hashes never verify.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def register(username: str, email: str, password: str) -> User:
    """
    Create a new customer account.

    Raises:
        ValidationError: bad username, email or weak password
        ConflictError: username or email already taken
    """
    username = validate_username(username)
    email = validate_email(email)
    validate_password_strength(password)

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        if existing.email == email:
            raise ConflictError("User already exists with this email")
        raise ConflictError("Username already taken")

    password_hash = hash_password(password)

    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        role=ROLE_CUSTOMER,
    )

    db.session.add(user)
    db.session.commit()

    current_app.logger.info("User registered: user_id=%s email=%s", user.id, email)
    return user


def create_user(username: str, email: str, password: str, role: str = ROLE_CUSTOMER) -> User:
    """Create a user with an explicit role (CLI bootstrap path)."""
    if role not in ROLES:
        raise ValidationError(f"Invalid role: {role}")
    user = register(username, email, password)
    if role != ROLE_CUSTOMER:
        user = set_role(user.id, role)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()

    if user and verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        current_app.logger.info("User logged in: user_id=%s", user.id)
        return user

    current_app.logger.warning("Login failed: email=%s", email)
    return None


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()


def set_role(user_id: int, role: str) -> User:
    """Change a user's role. Callers must already hold ASSIGN_ROLES."""
    if role not in ROLES:
        raise ValidationError("Invalid role")

    user = get_user(user_id)
    previous = user.role
    user.role = role
    db.session.commit()

    current_app.logger.info("User role changed: user_id=%s %s -> %s", user.id, previous, role)
    return user
