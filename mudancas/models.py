import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    CLIENT = "client"
    COMPANY = "company"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"


class QuoteStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AddressKind(str, enum.Enum):
    ORIGIN = "origin"
    DESTINATION = "destination"


def _enum(enum_cls):
    # store the lowercase value, not the member name
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(_enum(Role), nullable=False)  # immutable after registration
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Address(Base):
    __tablename__ = "addresses"
    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    cep = Column(String(9), nullable=False)
    street = Column(String(255), nullable=False)
    number = Column(String(10), nullable=False)
    complement = Column(String(255), nullable=True)
    neighborhood = Column(String(255), nullable=False)
    city = Column(String(255), nullable=False)
    state = Column(String(2), nullable=False)
    kind = Column(_enum(AddressKind), nullable=False)


class Request(Base):
    __tablename__ = "requests"
    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    origin_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    destination_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    description = Column(Text, nullable=True)
    move_date = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(_enum(RequestStatus), default=RequestStatus.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    client = relationship(User)
    origin = relationship(Address, foreign_keys=[origin_address_id])
    destination = relationship(Address, foreign_keys=[destination_address_id])
    quotes = relationship("Quote", back_populates="request")


class Quote(Base):
    __tablename__ = "quotes"
    __table_args__ = (
        UniqueConstraint("request_id", "company_id", name="uq_quotes_request_company"),
    )
    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    value = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    service_description = Column(Text, nullable=False)
    deadline_days = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(_enum(QuoteStatus), default=QuoteStatus.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    request = relationship(Request, back_populates="quotes")
    company = relationship(User)

    @property
    def client(self):
        return self.request.client

    @property
    def request_description(self):
        return self.request.description
