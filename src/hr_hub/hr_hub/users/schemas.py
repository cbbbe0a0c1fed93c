from __future__ import annotations

import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ..common.request_parsing import CamelModel
from ..core.enums import Role

PASSWORD_MAX_LENGTH = 64


class LoginBody(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshBody(CamelModel):
    refresh_token: Optional[str] = None


class RegisterBody(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=PASSWORD_MAX_LENGTH)
    role: Role = Role.EMPLOYEE
    employee_code: Optional[str] = Field(None, max_length=20)


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)


class ChangePasswordBody(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=PASSWORD_MAX_LENGTH)


class FirstTimePasswordBody(CamelModel):
    email: EmailStr
    new_password: str = Field(..., min_length=8, max_length=PASSWORD_MAX_LENGTH)


class ForgotPasswordBody(CamelModel):
    email: EmailStr


class VerifyResetTokenBody(CamelModel):
    otp: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordBody(CamelModel):
    otp: str = Field(..., pattern=r"^\d{6}$")
    new_password: str = Field(..., min_length=8, max_length=PASSWORD_MAX_LENGTH)


class SsoCallbackBody(CamelModel):
    subject_id: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None


class EmployeeQuery(CamelModel):
    role: Optional[Role] = None
    active: Optional[bool] = None


class EmployeeCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=75)
    last_name: str = Field("", max_length=75)
    email: EmailStr
    role: Role = Role.EMPLOYEE
    date_of_join: datetime.date
    employee_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    is_active: bool = True


class EmployeeUpdate(CamelModel):
    first_name: Optional[str] = Field(None, max_length=75)
    last_name: Optional[str] = Field(None, max_length=75)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    date_of_join: Optional[datetime.date] = None
    employee_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
