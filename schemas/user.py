from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Literal, Optional

from schemas.common import Name

Role = Literal["user", "admin"]


class UserCreate(BaseModel):
    name: Name
    email: EmailStr
    password: str = Field(min_length=6)


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AdminUserUpdate(BaseModel):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
