# Form models: client-side required-field checks run before any API call.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from clinicdesk.errors import FormError
from clinicdesk.gateways.categories import CategoryStatus

MIN_PASSWORD_LENGTH = 6

F = TypeVar("F", bound=BaseModel)


def parse_form(model: type[F], data: dict[str, Any]) -> F:
    """Validate *data* into *model*, raising ``FormError`` on the first problem."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "form"
        message = first.get("msg", "Invalid input").removeprefix("Value error, ")
        raise FormError(field, message) from e


class _Form(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_default=True)


def _required(value: str | None, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


class LoginForm(_Form):
    email: str = ""
    password: str = ""

    @model_validator(mode="after")
    def _check(self) -> LoginForm:
        if not self.email.strip() or not self.password:
            raise ValueError("Invalid credentials")
        return self


class ReferralCodeForm(_Form):
    code: str = ""
    description: str = ""
    is_active: bool = Field(True, alias="isActive")

    @field_validator("code", mode="before")
    @classmethod
    def _code(cls, v: str | None) -> str:
        return _required(v, "Please enter referral code").upper()

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v: str | None) -> str:
        return (v or "").strip()

    def create_payload(self) -> dict[str, Any]:
        return {"code": self.code, "description": self.description, "isActive": self.is_active}


class ReferralCodeEdit(_Form):
    code: str | None = None
    description: str | None = None

    def update_payload(self, uses: int) -> dict[str, Any]:
        """Description always; the code only while *uses* is zero."""
        payload: dict[str, Any] = {"description": (self.description or "").strip()}
        if uses == 0 and self.code and self.code.strip():
            payload["code"] = self.code.strip().upper()
        return payload


class CategoryForm(_Form):
    speciality_name: str = ""
    status: CategoryStatus | None = None

    @field_validator("speciality_name", mode="before")
    @classmethod
    def _name(cls, v: str | None) -> str:
        return _required(v, "Please enter category name")


class ForgotPasswordForm(_Form):
    email: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: str | None) -> str:
        return _required(v, "Please enter your email")


class VerifyOtpForm(_Form):
    email: str = ""
    otp: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: str | None) -> str:
        return _required(v, "Please enter your email")

    @field_validator("otp", mode="before")
    @classmethod
    def _otp(cls, v: str | None) -> str:
        return _required(v, "Please enter OTP")


class ResetPasswordForm(_Form):
    email: str = ""
    otp: str = ""
    password: str = ""
    confirm_password: str = Field("", alias="confirmPassword")

    @model_validator(mode="after")
    def _check(self) -> ResetPasswordForm:
        if not self.email.strip() or not self.otp.strip():
            raise ValueError("Invalid reset request. Please try again.")
        if not self.password or not self.confirm_password:
            raise ValueError("Please fill in all fields")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ChangePasswordForm(_Form):
    old_password: str = Field("", alias="oldPassword")
    new_password: str = Field("", alias="newPassword")

    @model_validator(mode="after")
    def _check(self) -> ChangePasswordForm:
        if not self.old_password or not self.new_password:
            raise ValueError("Please fill in all fields")
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return self
