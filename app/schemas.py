from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.validation import is_valid_email, is_valid_password, is_valid_product_url


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please provide a valid email")
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        if not is_valid_password(v):
            raise ValueError("Password must be 8-64 characters with at least one letter and one number")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please provide a valid email")
        return v.strip().lower()


class TwoFactorLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pending_token: str = Field(..., alias="pendingToken", min_length=1)
    code: str = Field(..., min_length=1)


class EmailRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please provide a valid email")
        return v.strip().lower()


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str) -> str:
        if not is_valid_password(v):
            raise ValueError("Password must be 8-64 characters with at least one letter and one number")
        return v


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    target_price: float = Field(..., alias="targetPrice", ge=0, allow_inf_nan=False)
    title: Optional[str] = Field(None, max_length=300)

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        if not is_valid_product_url(v):
            raise ValueError("Please provide a valid URL")
        return v.strip()


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_price: Optional[float] = Field(None, alias="targetPrice", ge=0, allow_inf_nan=False)
    title: Optional[str] = Field(None, min_length=1, max_length=300)


class TotpTokenRequest(BaseModel):
    token: Optional[str] = None


class BackupCodeRequest(BaseModel):
    code: Optional[str] = None
