"""Borrow/return state transitions."""

from .engine import (
    BORROW_EMPTY_MESSAGE,
    BORROW_LOGIN_REQUIRED_MESSAGE,
    BORROW_SUCCESS_MESSAGE,
    RETURN_LOGIN_REQUIRED_MESSAGE,
    RETURN_SUCCESS_MESSAGE,
    LendingEngine,
    borrow_failure_message,
    return_failure_message,
)

__all__ = [
    "BORROW_EMPTY_MESSAGE",
    "BORROW_LOGIN_REQUIRED_MESSAGE",
    "BORROW_SUCCESS_MESSAGE",
    "RETURN_LOGIN_REQUIRED_MESSAGE",
    "RETURN_SUCCESS_MESSAGE",
    "LendingEngine",
    "borrow_failure_message",
    "return_failure_message",
]
