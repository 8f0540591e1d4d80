"""Shared test helpers: settings, fake clock, recording notifier, in-memory database, app client."""

from datetime import UTC, datetime, timedelta
from http.cookies import SimpleCookie
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from planner_auth.core.config import Settings
from planner_auth.core.database import get_db
from planner_auth.main import create_app
from planner_auth.models import Base, Role

# 64 bytes: long enough for HS512 without key-length warnings.
TEST_SECRET = "test-secret-" + "k" * 52
COOKIE_DOMAIN = "planner.test"
API = "/api/v1/auth"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests; overrides win."""
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "JWT_ALGORITHM": "HS512",
        "JWT_ACCESS_TOKEN_EXPIRE_MINUTES": 60,
        "JWT_RESET_TOKEN_EXPIRE_MINUTES": 5,
        "COOKIE_JWT_NAME": "jwt",
        "COOKIE_DOMAIN": COOKIE_DOMAIN,
        "CLIENT_URL": "https://planner.test",
        "SMTP_ENABLED": False,
    }
    values.update(overrides)
    return Settings(**values)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that records what would have been sent."""

    def __init__(self) -> None:
        self.activations: list[tuple[str, str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_activation_email(self, email: str, username: str, activation_token: str) -> None:
        self.activations.append((email, username, activation_token))

    def send_reset_password_email(self, email: str, reset_token: str) -> None:
        self.resets.append((email, reset_token))


def make_session_factory(roles: tuple[str, ...] = ("USER", "ADMIN")) -> sessionmaker:
    """Fresh in-memory SQLite database with all tables and the given roles seeded."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        db.add_all([Role(name=name) for name in roles])
        db.commit()
    finally:
        db.close()
    return factory


def fast_bcrypt(test_case) -> None:
    """Lower the bcrypt cost for the duration of a test."""
    patcher = patch("planner_auth.core.security.BCRYPT_ROUNDS", 4)
    patcher.start()
    test_case.addCleanup(patcher.stop)


def make_client(
    settings: Settings | None = None,
    clock: FakeClock | None = None,
    notifier: RecordingNotifier | None = None,
    session_factory: sessionmaker | None = None,
) -> tuple[TestClient, sessionmaker, RecordingNotifier, FakeClock]:
    """App wired to an in-memory database, a recording notifier and a fake clock."""
    settings = settings or make_settings()
    clock = clock or FakeClock()
    notifier = notifier or RecordingNotifier()
    session_factory = session_factory or make_session_factory()
    app = create_app(settings=settings, notifier=notifier, clock=clock)

    def override_get_db():
        db: Session = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app), session_factory, notifier, clock


def parse_set_cookie(header: str, name: str = "jwt"):
    """Parse one Set-Cookie header value into a Morsel."""
    cookie = SimpleCookie()
    cookie.load(header)
    return cookie[name]


def cookie_header(token: str, name: str = "jwt") -> dict[str, str]:
    return {"Cookie": f"{name}={token}"}


def bearer_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
