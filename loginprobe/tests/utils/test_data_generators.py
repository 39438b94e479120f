"""Tests for random input generators."""

import re

from loginprobe.utils.test_data import (
    ALPHANUMERIC,
    generate_random_email,
    generate_random_phone_number,
    generate_random_string,
)


def test_random_string_length_and_alphabet():
    value = generate_random_string(32)

    assert len(value) == 32
    assert set(value) <= set(ALPHANUMERIC)


def test_random_string_zero_length():
    assert generate_random_string(0) == ""


def test_random_email_shape():
    assert re.fullmatch(r"test\d+@example\.com", generate_random_email())


def test_random_phone_number():
    number = generate_random_phone_number()

    assert len(number) == 10
    assert number.startswith("9")
    assert number.isdigit()
