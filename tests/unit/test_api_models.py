"""
Unit tests for API request/response models.

Request models accept partial bodies (the domain reports missing fields);
response models never carry password material.
"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    AdminUser,
    ErrorResponse,
    MessageResponse,
    ResetPasswordRequest,
    SendCodeRequest,
    UserResponse,
    VerifyCodeRequest,
)
from src.domain.entities import User

USER = User(
    id=1,
    full_name="A",
    email="a@b.com",
    phone="555",
    password_hash="$2b$04$hash",
    photo="p.png",
    verified=True,
    created_at="2024-01-01 00:00:00",
)


class TestRequestModels:
    """Tests for request models."""

    def test_send_code_request_accepts_empty_body(self) -> None:
        request = SendCodeRequest()
        assert request.email is None
        assert request.password is None
        assert request.photo is None

    def test_send_code_request_keeps_values_verbatim(self) -> None:
        """No EmailStr normalization: case and spacing reach the domain untouched."""
        request = SendCodeRequest(email=" USER@Example.com ", full_name="A", phone="555")
        assert request.email == " USER@Example.com "

    def test_verify_request_code_kept_as_string(self) -> None:
        assert VerifyCodeRequest(email="a@b.com", code="012345").code == "012345"

    def test_non_string_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ResetPasswordRequest(email="a@b.com", code="123456", new_password=["x"])


class TestResponseModels:
    """Tests for response models."""

    def test_user_response_has_no_password_field(self) -> None:
        dumped = UserResponse.from_user(USER).model_dump()
        assert dumped == {
            "id": 1,
            "full_name": "A",
            "email": "a@b.com",
            "phone": "555",
            "photo": "p.png",
        }

    def test_admin_user_has_no_password_field(self) -> None:
        dumped = AdminUser.from_user(USER).model_dump()
        assert "password_hash" not in dumped
        assert dumped["verified"] is True
        assert dumped["created_at"] == "2024-01-01 00:00:00"

    def test_message_response_defaults_ok(self) -> None:
        assert MessageResponse(message="done").model_dump() == {"ok": True, "message": "done"}

    def test_error_response_defaults_not_ok(self) -> None:
        assert ErrorResponse(error="nope").model_dump() == {"ok": False, "error": "nope"}
