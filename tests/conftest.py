# /tests/conftest.py

"""
Shared fixtures: a fresh SQLite database per test, a DatabaseService bound to
it, small factories for users, sentences and questions, a fake MT scorer and
a TestClient wired to the same database.
"""

import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from annotation_backend.core import security
from annotation_backend.core.errors import ScoringError
from annotation_backend.db.database import get_db, init_db
from annotation_backend.main import app
from annotation_backend.models.mt_quality_model import QualityScore, TranslationError
from annotation_backend.services.database_service import DatabaseService
from annotation_backend.services.quality_scorer import get_quality_scorer
from annotation_backend.services.storage_service import LocalVoiceStorage, get_voice_storage

TEST_PASSWORD = "correct-horse-battery"
# Hashing once keeps the factories fast.
_HASHED_PASSWORD = security.hash_password(TEST_PASSWORD)
_counter = itertools.count(1)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'annotation_test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def db_service(db_session):
    """A NEW, CLEAN DatabaseService for each test function."""
    return DatabaseService(db_session=db_session)


# --- Factories ---

@pytest.fixture
def make_user(db_service):
    def _make_user(**overrides):
        n = next(_counter)
        record = {
            "email": f"user{n}@example.com",
            "username": f"user{n}",
            "hashed_password": _HASHED_PASSWORD,
            "languages": [],
            "skip_onboarding": False,
        }
        record.update(overrides)
        return db_service.add_user(record)
    return _make_user


@pytest.fixture
def make_sentence(db_service):
    def _make_sentence(**overrides):
        n = next(_counter)
        record = {
            "source_text": f"Source sentence number {n}.",
            "machine_translation": f"Phrase source numéro {n}.",
            "source_language": "English",
            "target_language": "French",
            "is_active": True,
        }
        record.update(overrides)
        return db_service.add_sentence(record)
    return _make_sentence


@pytest.fixture
def make_question(db_service):
    def _make_question(language="French", correct_answer=0, **overrides):
        n = next(_counter)
        record = {
            "language": language,
            "question": f"Question {n}?",
            "options": ["a", "b", "c", "d"],
            "correct_answer": correct_answer,
            "difficulty": "intermediate",
            "is_active": True,
        }
        record.update(overrides)
        return db_service.add_question(record)
    return _make_question


@pytest.fixture
def annotator(make_user):
    """Trusted for French without taking a test."""
    return make_user(skip_onboarding=True, languages=["French"])


@pytest.fixture
def evaluator(make_user):
    return make_user(is_evaluator=True, skip_onboarding=True)


@pytest.fixture
def admin(make_user):
    return make_user(is_admin=True, skip_onboarding=True)


# --- Collaborators ---

class FakeScorer:
    """Returns a fixed verdict, or fails for the sentence ids in `fail_for`."""

    def __init__(self, fail_for=None, overall=80.0):
        self.fail_for = set(fail_for or [])
        self.overall = overall
        self.calls = []

    async def score(self, sentence):
        self.calls.append(sentence.id)
        if sentence.id in self.fail_for:
            raise ScoringError(f"Scoring model unavailable for sentence {sentence.id}.")
        return QualityScore(
            fluency_score=75.0,
            adequacy_score=85.0,
            overall_quality_score=self.overall,
            confidence=0.9,
            explanation="Mostly faithful.",
            errors=[TranslationError(type="Grammar", severity="minor", description="Agreement error.")],
            suggestions=["Fix the agreement."],
            model_name="fake-scorer",
        )


@pytest.fixture
def fake_scorer():
    return FakeScorer()


@pytest.fixture
def make_scorer():
    return FakeScorer


# --- HTTP Client ---

@pytest.fixture
def client(session_factory, fake_scorer, tmp_path):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quality_scorer] = lambda: fake_scorer
    app.dependency_overrides[get_voice_storage] = lambda: LocalVoiceStorage(root_dir=str(tmp_path / "voice"), max_bytes=1024)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {security.create_access_token(user.id)}"}
    return _headers
