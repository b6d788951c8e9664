"""Shared validation utilities"""

from typing import Optional

from ..config import DEFAULT_COUNTRY_CODE


def normalize_phone(phone: Optional[str], country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalize a phone number to its international form.

    A number already starting with "+" is kept as-is; anything else is
    assumed to be domestic and gets the default country code prepended.
    Normalizing twice gives the same result.

    Raises:
        ValueError: If phone number is empty
    """
    if phone is None:
        raise ValueError("Phone number is required")

    phone = phone.strip()
    if not phone:
        raise ValueError("Phone number is required")

    if phone.startswith("+"):
        return phone

    return f"{country_code}{phone}"


def validate_rating(rating: int) -> int:
    """Ratings run from 1 to 5 stars; 0 means not rated"""
    if rating < 0 or rating > 5:
        raise ValueError("Rating must be between 0 and 5")
    return rating
