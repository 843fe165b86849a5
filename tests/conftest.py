import os

# must be set before event_manager.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")

import asyncio
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from event_manager.app.common.utils.consts import EventType, UserRole
from event_manager.app.common.utils.datetime_utils import utcnow
from event_manager.app.common.utils.dependency import get_session
from event_manager.app.common.utils.send_email import get_mailer
from event_manager.app.common.utils.verify_password import hash_password
from event_manager.app.v1.auth.repository.token_repository import RefreshTokenRepository
from event_manager.app.v1.auth.service import auth_service as auth_service_module
from event_manager.app.v1.auth.service.auth_service import AuthService
from event_manager.app.v1.auth.service.token_service import TokenService
from event_manager.app.v1.event.repository.event_repository import EventRepository
from event_manager.app.v1.event.service.event_service import EventService
from event_manager.app.v1.participant.repository.participant_repository import ParticipantRepository
from event_manager.app.v1.participant.service.participant_service import ParticipantService
from event_manager.app.v1.user.repository.user_repository import UserRepository
from event_manager.app.v1.user.service.user_service import UserService
from event_manager.config.database import Base, database_models  # noqa: F401
from event_manager.config.database.postgresql import build_engine, build_sessionmaker
from event_manager.main import app

DEFAULT_PASSWORD = "secret123"


class RecordingMailer:
    """Collects outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, body: str) -> bool:
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append((to, subject, body))
        return True

    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]


@pytest.fixture
async def db_engine(tmp_path):
    # file backed so concurrent sessions really use separate connections
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_sessionmaker(db_engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def fake_redis(monkeypatch):
    store: dict[str, str] = {}

    async def save(key: str, value: str, expiry: int):
        store[key] = value

    async def get(key: str):
        # hand control back like a network round trip would
        await asyncio.sleep(0)
        return store.get(key)

    async def pop(key: str):
        return store.pop(key, None)

    monkeypatch.setattr(auth_service_module, "save_to_redis", save)
    monkeypatch.setattr(auth_service_module, "get_from_redis", get)
    monkeypatch.setattr(auth_service_module, "pop_from_redis", pop)
    return store


@pytest.fixture
def token_service():
    return TokenService(token_repo=RefreshTokenRepository())


@pytest.fixture
def auth_service(token_service, mailer, fake_redis):
    return AuthService(user_repo=UserRepository(), token_service=token_service, mailer=mailer)


@pytest.fixture
def user_service():
    return UserService(user_repo=UserRepository(), participant_repo=ParticipantRepository(), event_repo=EventRepository())


@pytest.fixture
def event_service():
    return EventService(event_repo=EventRepository())


@pytest.fixture
def participant_service(mailer):
    return ParticipantService(
        participant_repo=ParticipantRepository(),
        event_repo=EventRepository(),
        user_repo=UserRepository(),
        mailer=mailer,
    )


@pytest.fixture
def make_user(session_factory):
    """Insert a user in its own session and return it detached."""
    counter = {"n": 0}

    async def _make_user(role: UserRole = UserRole.PARTICIPANT, email: str | None = None, full_name: str | None = None):
        counter["n"] += 1
        email = email or f"{role.value.lower()}{counter['n']}@eventhub.io"
        async with session_factory() as s:
            async with s.begin():
                user = await UserRepository().create_user(
                    s,
                    email=email,
                    full_name=full_name or f"{role.value.title()} {counter['n']}",
                    password=hash_password(DEFAULT_PASSWORD),
                    role=role,
                )
        return user

    return _make_user


@pytest.fixture
def make_event(session_factory):
    async def _make_event(organizer, total_seats: int | None = None, title: str = "PyCon Meetup", starts_in: timedelta = timedelta(days=3), **overrides):
        start_at = utcnow() + starts_in
        event_data = {
            "title": title,
            "description": "Talks and snacks",
            "type": EventType.ONSITE,
            "venue": "Hall A",
            "contact_info": "team@eventhub.io",
            "start_at": start_at,
            "end_at": start_at + timedelta(hours=2),
            "total_seats": total_seats,
        }
        event_data.update(overrides)
        async with session_factory() as s:
            async with s.begin():
                organizer = await s.merge(organizer, load=True)
                event = await EventRepository().create_event(s, organizer, event_data)
        return event

    return _make_event


@pytest.fixture
async def client(session_factory, mailer, fake_redis):
    async def override_get_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_mailer] = lambda: mailer
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['access_token']}"}

    return _login
