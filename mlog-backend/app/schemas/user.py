# File: app/schemas/user.py

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    password: str
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def name_is_encodable(cls, v: str) -> str:
        try:
            v.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("contains invalid characters") from None
        return v


class UserLogin(UserBase):
    password: str


class UserSummary(UserBase):
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserRead(UserSummary):
    id: int


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class EmailAvailability(BaseModel):
    available: bool


class PasswordChange(BaseModel):
    """Body of PUT /api/user/password (camelCase keys on the wire)."""

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class Message(BaseModel):
    message: str
