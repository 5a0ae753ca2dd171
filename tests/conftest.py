from datetime import datetime, timedelta, timezone
import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from mudancas import models
from mudancas.database import Base, build_engine, get_db
from mudancas.main import app
from mudancas.utils import hash_password

_emails = itertools.count(1)


@pytest.fixture(autouse=True)
def secret_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("ALGORITHM", "HS256")


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, role: models.Role, name: str = None, phone: str = "11999990000") -> models.User:
    n = next(_emails)
    user = models.User(
        name=name or f"{role.value} {n}",
        email=f"user{n}@example.com",
        password_hash=hash_password("secret123"),
        role=role,
        phone=phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def address(**overrides) -> dict:
    data = {
        "cep": "01310-100",
        "street": "Avenida Paulista",
        "number": "1000",
        "complement": "apto 12",
        "neighborhood": "Bela Vista",
        "city": "Sao Paulo",
        "state": "sp",
    }
    data.update(overrides)
    return data


def request_payload(**overrides) -> dict:
    data = {
        "origin_address": address(),
        "destination_address": address(cep="20040002", street="Rua da Assembleia", city="Rio de Janeiro", state="RJ"),
        "description": "Two bedroom apartment",
        "move_date": (datetime.now(timezone.utc) + timedelta(days=10)).isoformat(),
        "notes": "Piano on the second floor",
    }
    data.update(overrides)
    return data


def quote_payload(request_id: int, **overrides) -> dict:
    data = {
        "request_id": request_id,
        "value": 100.0,
        "service_description": "Truck, three movers and packing",
        "deadline_days": 2,
    }
    data.update(overrides)
    return data


def register(client: TestClient, role: str, **overrides) -> dict:
    n = next(_emails)
    body = {
        "name": f"{role} {n}",
        "email": f"reg{n}@example.com",
        "password": "secret123",
        "role": role,
        "phone": "21988887777",
    }
    body.update(overrides)
    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
    return data
