from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    local, sep, domain = value.partition("@")
    if not sep or not local or "." not in domain:
        raise ValueError("must be a valid e-mail address")
    return value


class ClientLoginRequestDTO(BaseModel):
    # Absent fields fall through to the credential check, never a payload error.
    name: str = Field("", max_length=128)
    password: str = Field("", max_length=256)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()


class TrainerLoginRequestDTO(BaseModel):
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=256)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        # Unknown-format e-mails simply fail to match; no format error on login.
        return value.strip().lower()


class RegisterTrainerRequestDTO(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=255)
    # Optional here so an empty or absent password maps to missing_password.
    password: str | None = Field(None, max_length=256)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class RefreshRequestDTO(BaseModel):
    refresh_token: str | None = Field(None, alias="refreshToken", max_length=4096)

    model_config = ConfigDict(populate_by_name=True)


class CreateClientRequestDTO(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    password: str | None = Field(None, max_length=256)
    email: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return _normalize_email(value)


class ChangePasswordRequestDTO(BaseModel):
    password: str | None = Field(None, max_length=256)
