"""Shared helpers."""

from .test_data import (
    generate_random_email,
    generate_random_phone_number,
    generate_random_string,
)

__all__ = [
    "generate_random_email",
    "generate_random_phone_number",
    "generate_random_string",
]
