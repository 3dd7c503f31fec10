import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BACKGROUND_TASKS_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models, models_pdc  # noqa: E402,F401
from app.database import Base, get_db, install_sqlite_transactions  # noqa: E402
from app.domain.appointments.schemas import DesignInfo, InquiryCreate  # noqa: E402
from app.main import app  # noqa: E402

# Monday
FIXED_NOW = datetime(2025, 6, 2, 9, 30)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_sqlite_transactions(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeMailer:
    """Records sent emails; raises when fail is set"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def __call__(self, to, subject, html):
        if self.fail:
            raise RuntimeError("provider down")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"fake-{len(self.sent)}"}


@pytest.fixture
def mailer():
    return FakeMailer()


def inquiry_data(**overrides) -> InquiryCreate:
    data = {
        "name": "Juan Dela Cruz",
        "email": "juan@example.com",
        "phone": "09171234567",
        "message": "Interested in a two-storey build",
        "design": DesignInfo(id="D-100", name="Modern Bungalow", price=2500000, square_meters=120),
        "preferredDate": "2025-06-10",
        "preferredTime": "10:00",
        "meetingType": "onsite",
    }
    data.update(overrides)
    return InquiryCreate(**data)
