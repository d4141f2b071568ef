"""Connector interfaces and implementations."""

from .targetprocess import TargetProcessClient, TargetProcessError, password_auth, token_auth

__all__ = ["TargetProcessClient", "TargetProcessError", "password_auth", "token_auth"]
