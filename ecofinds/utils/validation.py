"""Validation helpers shared by the marketplace services."""

import re
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError

from ecofinds.config import CATEGORIES
from ecofinds.errors import InvalidListing, InvalidProfile, InvalidRating, Unauthenticated

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

EMAIL_REGEX = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
MAX_USERNAME_LENGTH = 80


def require_user(user_id: str | None) -> str:
    """Return the acting user id, or raise Unauthenticated when there is none."""
    if not user_id:
        raise Unauthenticated()
    return user_id


def validate_rating(rating) -> int:
    # bool is an int subclass but never a rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating()
    if not 1 <= rating <= 5:
        raise InvalidRating()
    return rating


# Largest value a Numeric(10, 2) price column holds
MAX_PRICE = Decimal("99999999.99")


def validate_price(price) -> Decimal:
    try:
        value = Decimal(str(price))
        if not value.is_finite() or value < 0:
            raise InvalidListing("Price must be a non-negative number")
        # Rounding can carry past the limit, so compare the stored value
        value = value.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise InvalidListing("Price must be a number")
    if value > MAX_PRICE:
        raise InvalidListing(f"Price must not exceed {MAX_PRICE}")
    return value


def validate_category(category: str) -> str:
    if category not in CATEGORIES:
        raise InvalidListing(f"Unknown category: {category}")
    return category


def validate_username(username: str | None) -> str:
    username = (username or "").strip()
    if not username:
        raise InvalidProfile("Username is required")
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidProfile(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
    return username


def validate_email(email: str | None) -> str:
    """Normalize an email address to lower case, or raise InvalidProfile."""
    email = (email or "").strip().lower()
    if not EMAIL_REGEX.fullmatch(email) or len(email) > 255:
        raise InvalidProfile("Invalid email format")
    return email


def is_unique_violation(error: IntegrityError) -> bool:
    """
    Tell whether an IntegrityError came from a unique constraint.

    PostgreSQL reports SQLSTATE 23505 through psycopg2's pgcode; SQLite only
    says so in the message.
    """
    original = getattr(error, "orig", None)
    if getattr(original, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(original)
