import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from prompt_gallery.core.config import Settings
from prompt_gallery.core.errors import UpstreamServiceError
from prompt_gallery.core.security import CredentialIssuer
from prompt_gallery.main import create_app
from prompt_gallery.models.user import User

TEST_SECRET = "test-secret"


class DummyStore:
    """In-memory stand-in for SupabaseBucket."""

    def __init__(self, bucket: str):
        self.bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.deletes: list[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self.fail_presign = False

    def upload(self, file_bytes, filename, content_type):
        if self.fail_upload:
            raise UpstreamServiceError("upload failed")
        url = f"https://storage.test/{self.bucket}/{len(self.uploads)}-{filename}"
        self.objects[url] = file_bytes
        self.uploads.append(url)
        return url

    def delete(self, url):
        self.deletes.append(url)
        if self.fail_delete:
            raise UpstreamServiceError("delete failed")
        self.objects.pop(url, None)

    def presign_get(self, url, ttl_seconds):
        if self.fail_presign:
            raise UpstreamServiceError("presign failed")
        return f"{url}?signed=1&ttl={ttl_seconds}"


class DummyEmailSender:
    is_configured = True

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to_email, subject, html_body, text_body=None):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append(
            {"to": to_email, "subject": subject, "html": html_body, "text": text_body}
        )

    def last_code(self, to_email: str | None = None) -> str:
        messages = [m for m in self.sent if to_email is None or m["to"] == to_email]
        assert messages, "no email was sent"
        return re.search(r"\b(\d{6})\b", messages[-1]["text"]).group(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings():
    return Settings(_env_file=None, JWT_SECRET=TEST_SECRET, DATABASE_URL="sqlite://")


@pytest.fixture(scope="session")
def credentials():
    return CredentialIssuer(TEST_SECRET)


@pytest.fixture
def email_sender():
    return DummyEmailSender()


@pytest.fixture
def stores():
    return {
        "image": DummyStore("images"),
        "gif": DummyStore("gifs"),
        "video": DummyStore("videos"),
    }


@pytest.fixture
def client(settings, engine, credentials, email_sender, stores):
    app = create_app(
        settings,
        engine=engine,
        credentials=credentials,
        email_sender=email_sender,
        stores=stores,
    )
    with TestClient(app) as client:
        yield client


def make_user(
    session: Session,
    credentials: CredentialIssuer,
    username: str,
    role: str = "user",
    password: str = "password123",
    is_active: bool = True,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=credentials.hash_password(password),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def alice(session, credentials):
    return make_user(session, credentials, "alice")


@pytest.fixture
def bob(session, credentials):
    return make_user(session, credentials, "bob")


@pytest.fixture
def admin(session, credentials):
    return make_user(session, credentials, "admin", role="admin")


@pytest.fixture
def user_factory(session, credentials):
    def factory(username: str, **kwargs) -> User:
        return make_user(session, credentials, username, **kwargs)

    return factory
