from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr
from app.models.enums import UserStatus

class UserBase(BaseModel):
    username: str
    email: EmailStr
    role_id: Optional[int] = None
    status: UserStatus = UserStatus.ACTIVE

class UserCreate(UserBase):
    supabase_id: Optional[str] = None

class UserUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    role_id: Optional[int] = None
    status: Optional[UserStatus] = None

class UserInDBBase(BaseModel):
    id: int
    username: str
    email: str
    role_id: Optional[int] = None
    status: str
    last_login: Optional[datetime] = None
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True

class User(UserInDBBase):
    role_name: Optional[str] = None

class Role(BaseModel):
    id: int
    role_name: str
    permissions: Optional[str] = None

    class Config:
        from_attributes = True
