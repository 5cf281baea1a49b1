import os
import threading

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("REMINDER_TICK_TOKEN", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from smartmess.db import get_db
from smartmess.deps import get_dispatcher
from smartmess.main import app
from smartmess.models import Base, Mess, User
from smartmess.routers.auth import get_password_hash
from smartmess.services.notifications import NotificationDispatcher

PASSWORD = "secret-pass"


class RecordingTransport:
    """Channel transport that remembers every send instead of delivering it."""

    def __init__(self, channel, fail_for=()):
        self.channel = channel
        self.fail_for = set(fail_for)
        self.sent = []
        self._lock = threading.Lock()

    def __call__(self, recipient, payload):
        if recipient.user_id in self.fail_for:
            raise RuntimeError(f"{self.channel} gateway down")
        with self._lock:
            self.sent.append((recipient.user_id, payload.title, payload.message))
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def transports():
    return {channel: RecordingTransport(channel) for channel in ("email", "push", "sms", "whatsapp")}


@pytest.fixture
def dispatcher(transports):
    return NotificationDispatcher(transports=transports, max_workers=2)


@pytest.fixture
def client(db, dispatcher):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def _user(db, mess, email, full_name, role="USER", **extra):
    user = User(
        mess_id=mess.id if mess else None,
        email=email,
        full_name=full_name,
        password_hash=get_password_hash(PASSWORD),
        role=role,
        is_active=extra.pop("is_active", True),
        **extra,
    )
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def mess_setup(db):
    """One mess with an owner, three active members, one inactive member and an outsider."""
    mess = Mess(name="Annapurna Mess")
    db.add(mess)
    db.flush()
    owner = _user(db, mess, "owner@smartmess.in", "Ravi Kumar", role="MESS_OWNER")
    mess.owner_user_id = owner.id
    members = [
        _user(db, mess, "asha@smartmess.in", "Asha Rao", phone="+919800000001"),
        _user(db, mess, "vikram@smartmess.in", "Vikram Singh", notify_email=False),
        _user(db, mess, "meera@smartmess.in", "Meera Iyer"),
    ]
    inactive = _user(db, mess, "old@smartmess.in", "Former Member", is_active=False)

    other_mess = Mess(name="Sagar Mess")
    db.add(other_mess)
    db.flush()
    outsider = _user(db, other_mess, "outsider@smartmess.in", "Outside Member")
    db.commit()
    return {
        "mess": mess,
        "owner": owner,
        "members": members,
        "inactive": inactive,
        "other_mess": other_mess,
        "outsider": outsider,
    }


def login(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def owner_client(client, mess_setup):
    login(client, mess_setup["owner"].email)
    return client
