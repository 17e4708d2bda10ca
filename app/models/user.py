# app/models/user.py

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy import Column, Date, DateTime, String, Text

from app.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    email = Column(String(255), nullable=False)

    gender = Column(String(20), nullable=True)
    birthday = Column(Date, nullable=True)
    origin_country = Column(String(100), nullable=True)
    living_country = Column(String(100), nullable=True)
    living_town = Column(String(100), nullable=True)
    about_me = Column(Text, nullable=True)

    # profile image stored through FileService
    profile_image_name = Column(String(255), nullable=True)
    profile_image_path = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class UserCreate(BaseModel):
    user_id: str = Field(min_length=4, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(min_length=8, max_length=128)
    email: EmailStr
    gender: Optional[str] = None
    birthday: Optional[date] = None
    origin_country: Optional[str] = None
    living_country: Optional[str] = None
    living_town: Optional[str] = None
    about_me: Optional[str] = None


class UserLoginRequest(BaseModel):
    user_id: str
    password: str


class UserPasswordRequest(BaseModel):
    new_password: str = Field(min_length=8, max_length=128)


class UserUpdateRequest(BaseModel):
    gender: Optional[str] = None
    living_country: Optional[str] = None
    living_town: Optional[str] = None
    about_me: Optional[str] = None


class UserRead(BaseModel):
    user_id: str
    email: str
    gender: Optional[str] = None
    birthday: Optional[date] = None
    origin_country: Optional[str] = None
    living_country: Optional[str] = None
    living_town: Optional[str] = None
    about_me: Optional[str] = None
    profile_image_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
