from datetime import datetime
from pydantic import BaseModel, EmailStr, field_validator

BCRYPT_MAX_BYTES = 72


class UserRegister(BaseModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not 3 <= len(v) <= 50:
            raise ValueError("Username must be between 3 and 50 characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        # bcrypt silently ignores anything past 72 bytes
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    message: str = "User created successfully!"
    user: UserResponse


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PublicUser(BaseModel):
    """What other users get to see: search results, friend lists, pending requests."""
    id: int
    username: str
    profile_picture_url: str | None

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    id: int
    username: str
    email: str
    profile_picture_url: str | None
    bio: str | None
    relationship_status: str | None
    age: int | None
    pronouns: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    username: str | None = None
    bio: str | None = None
    relationship_status: str | None = None
    age: int | None = None
    pronouns: str | None = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not 3 <= len(v) <= 50:
            raise ValueError("Username must be between 3 and 50 characters")
        return v

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: int | None) -> int | None:
        if v is not None and not 13 <= v <= 130:
            raise ValueError("age must be between 13 and 130")
        return v


class PhotoUploadResponse(BaseModel):
    message: str = "Profile photo updated successfully!"
    profile_picture_url: str
