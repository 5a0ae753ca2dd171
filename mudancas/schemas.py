from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .models import AddressKind, QuoteStatus, RequestStatus, Role

# largest value a 32-bit INTEGER primary key can hold
MAX_ID = 2**31 - 1

# ────────────────────────────── AUTH ──────────────────────────────

class RegisterIn(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role
    phone: Optional[str] = Field(default=None, max_length=20)


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    phone: Optional[str]

    class Config:
        from_attributes = True


class AuthOut(BaseModel):
    message: str
    user: UserOut
    access_token: str
    token_type: str = "bearer"


class ContactOut(BaseModel):
    id: int
    name: str
    phone: Optional[str]

    class Config:
        from_attributes = True


# ────────────────────────────── REQUESTS ──────────────────────────────

class AddressIn(BaseModel):
    cep: str = Field(pattern=r"^\d{5}-?\d{3}$")
    street: str = Field(min_length=5, max_length=255)
    number: str = Field(min_length=1, max_length=10)
    complement: Optional[str] = Field(default=None, max_length=255)
    neighborhood: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=255)
    state: str = Field(min_length=2, max_length=2, pattern=r"^[A-Za-z]{2}$")

    @field_validator("state")
    @classmethod
    def upper_state(cls, value: str) -> str:
        return value.upper()


class AddressOut(BaseModel):
    id: int
    cep: str
    street: str
    number: str
    complement: Optional[str]
    neighborhood: str
    city: str
    state: str
    kind: AddressKind

    class Config:
        from_attributes = True


class RequestCreate(BaseModel):
    origin_address: AddressIn
    destination_address: AddressIn
    description: Optional[str] = Field(default=None, max_length=1000)
    move_date: datetime
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("move_date")
    @classmethod
    def move_date_not_in_past(cls, value: datetime) -> datetime:
        now = datetime.now(timezone.utc) if value.tzinfo else datetime.now()
        if value < now:
            raise ValueError("move_date must not be in the past")
        return value


class RequestOut(BaseModel):
    id: int
    client_id: int
    description: Optional[str]
    move_date: datetime
    notes: Optional[str]
    status: RequestStatus
    created_at: datetime
    updated_at: datetime
    origin: AddressOut
    destination: AddressOut
    client: ContactOut

    class Config:
        from_attributes = True


class RequestCreated(BaseModel):
    message: str
    request: RequestOut


# ────────────────────────────── QUOTES ──────────────────────────────

class QuoteCreate(BaseModel):
    request_id: int = Field(gt=0, le=MAX_ID)
    value: float = Field(gt=0)
    service_description: str = Field(min_length=1, max_length=1000)
    deadline_days: int = Field(gt=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class QuoteOut(BaseModel):
    id: int
    request_id: int
    company_id: int
    value: float
    service_description: str
    deadline_days: int
    notes: Optional[str]
    status: QuoteStatus
    created_at: datetime
    updated_at: datetime
    request_description: Optional[str]
    company: ContactOut
    client: ContactOut

    class Config:
        from_attributes = True


class QuoteCreated(BaseModel):
    message: str
    quote: QuoteOut


class QuoteDecision(BaseModel):
    status: Literal["accepted", "rejected"]


class DecisionOut(BaseModel):
    message: str
    status: QuoteStatus
