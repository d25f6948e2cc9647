"""
Pytest configuration and fixtures

Every test gets a fresh in-memory SQLite database. The engine uses a
StaticPool so every checkout sees the same in-memory database, and API
requests run on the test's own session.
"""
from datetime import date, datetime

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifecycle_engine.database import Base, configure_sqlite, get_db
from lifecycle_engine.models import (
    Achievement, Client, ClientWorkflowState, DailyLog, MealLog, PendingReviewCard,
)

NOW = datetime(2025, 3, 7, 9, 0, 0)
TODAY = NOW.date()


@pytest.fixture
def engine():
    eng = configure_sqlite(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def api_client(db_session):
    """TestClient bound to the per-test session (lifespan not run)."""
    from lifecycle_engine.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_client(db_session):
    def _make(name="Asha Rao", target_kcal=2000, **kwargs):
        client = Client(name=name, target_kcal=target_kcal, **kwargs)
        db_session.add(client)
        db_session.commit()
        return client
    return _make


@pytest.fixture
def make_achievement(db_session):
    def _make(criteria_type, criteria_value, name=None, is_active=True, category="milestone", points=10):
        achievement = Achievement(
            name=name or f"{criteria_type} {criteria_value}",
            description="test achievement",
            category=category,
            criteria_type=str(criteria_type),
            criteria_value=criteria_value,
            points=points,
            is_active=is_active,
        )
        db_session.add(achievement)
        db_session.commit()
        return achievement
    return _make


@pytest.fixture
def add_meal(db_session):
    def _add(client, logged_at=NOW, meal_type="lunch"):
        meal = MealLog(client_id=client.id, logged_at=logged_at, meal_type=meal_type)
        db_session.add(meal)
        db_session.commit()
        return meal
    return _add


@pytest.fixture
def add_daily_log(db_session):
    def _add(client, log_date: date, **values):
        log = DailyLog(client_id=client.id, log_date=log_date, **values)
        db_session.add(log)
        db_session.commit()
        return log
    return _add


@pytest.fixture
def make_workflow(db_session):
    def _make(client, service_type="hundred_days", stage=None,
              next_action="send_health_assessment", due_at=NOW):
        state = ClientWorkflowState(
            client_id=client.id,
            service_type=service_type,
            workflow_stage=stage,
            next_action=next_action,
            next_action_due_at=due_at,
        )
        db_session.add(state)
        db_session.commit()
        return state
    return _make


@pytest.fixture
def make_card(db_session):
    def _make(client, card_type="sleep_card", workflow_stage="sleep_card_sent",
              status="edited", content=None):
        card = PendingReviewCard(
            client_id=client.id,
            card_type=card_type,
            generated_content=content or {"summary": "Sleep 7h+, no screens after 10pm"},
            status=status,
            workflow_stage=workflow_stage,
        )
        db_session.add(card)
        db_session.commit()
        return card
    return _make


@pytest.fixture
def unreachable_push(monkeypatch):
    """Enable push dispatch against an endpoint that always refuses connections."""
    from lifecycle_engine.config import settings
    from lifecycle_engine.services import card_finalizer, push_service, workflow_scheduler

    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    http_client = httpx.Client(transport=httpx.MockTransport(handler))

    def send(client_id, title, body, url=push_service.DEFAULT_URL):
        return push_service.send_push_notification(client_id, title, body, url, http_client=http_client)

    monkeypatch.setattr(settings, "PUSH_NOTIFICATION_URL", "https://push.example.test/send")
    monkeypatch.setattr(workflow_scheduler, "send_push_notification", send)
    monkeypatch.setattr(card_finalizer, "send_push_notification", send)
    yield attempts
    http_client.close()
