# src/taskboard_client/workflow/validation.py

"""
Local, synchronous input checks run before any network call.

Each validator returns the trimmed values to send, or raises ValidationError
with the message to show next to the form.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.models import FormDraft, TaskPayload

MIN_PASSWORD_LENGTH = 6
MIN_TITLE_LENGTH = 3


class ValidationError(ValueError):
    """Input rejected locally; never reaches the network layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RegisterInput:
    name: str
    email: str
    password: str
    confirm_password: str


def validate_login(email: str, password: str) -> LoginInput:
    # Passwords are sent as typed; only the email is trimmed.
    data = LoginInput(email=email.strip(), password=password)
    if not data.email or not data.password.strip():
        raise ValidationError("Enter your email and password.")
    return data


def validate_register(name: str, email: str, password: str, confirm_password: str) -> RegisterInput:
    data = RegisterInput(
        name=name.strip(),
        email=email.strip(),
        password=password,
        confirm_password=confirm_password,
    )
    if not data.name or not data.email or not data.password.strip():
        raise ValidationError("Complete all fields to continue.")
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if data.password != data.confirm_password:
        raise ValidationError("Passwords do not match.")
    return data


def validate_task_form(draft: FormDraft) -> TaskPayload:
    if len(draft.title.strip()) < MIN_TITLE_LENGTH:
        raise ValidationError(f"Title must be at least {MIN_TITLE_LENGTH} characters long.")
    return draft.to_payload()
