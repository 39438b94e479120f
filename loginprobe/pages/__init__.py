"""Page objects for the pages under test."""

from .login_page import LoginPage

__all__ = ["LoginPage"]
