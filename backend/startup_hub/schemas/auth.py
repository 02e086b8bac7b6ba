"""
Auth form schemas. Sign-up, sign-in and password reset are executed by the
identity provider; these mirror the constraints the forms enforce before the
provider is called.
"""
import re
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

_PASSWORD_STRENGTH = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password_strength(value: str) -> str:
    if not _PASSWORD_STRENGTH.match(value):
        raise ValueError("Password must contain at least one uppercase letter, one lowercase letter and one number")
    return value


def passwords_match(password: str, confirm_password: str):
    if password != confirm_password:
        raise PydanticCustomError(
            "password_mismatch",
            "Passwords do not match",
            {"field": "confirm_password"},
        )


class SignUpForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    confirm_password: str
    full_name: str = Field(min_length=2)
    role: Literal["entrepreneur", "investor"]
    company: Optional[str] = None
    accept_terms: bool

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)

    @field_validator("accept_terms")
    @classmethod
    def validate_terms(cls, v):
        if v is not True:
            raise ValueError("You must accept the terms and conditions")
        return v

    @model_validator(mode="after")
    def validate_confirmation(self):
        passwords_match(self.password, self.confirm_password)
        return self


class SignInForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ResetPasswordForm(BaseModel):
    email: EmailStr


class NewPasswordForm(BaseModel):
    password: str = Field(min_length=8)
    confirm_password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)

    @model_validator(mode="after")
    def validate_confirmation(self):
        passwords_match(self.password, self.confirm_password)
        return self
