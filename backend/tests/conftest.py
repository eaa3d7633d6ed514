import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from season_engine.database import build_engine, get_session, init_db
from season_engine.main import app

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so every session shares one DB
# 2. build_engine disables check_same_thread for TestClient's worker thread
# 3. Tables dropped and recreated per test so ids and rows never leak
# 4. App dependency overridden to use test_engine (see client_fixture)
test_engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)


def override_get_session():
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema."""
    SQLModel.metadata.drop_all(test_engine)
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client bound to the test engine.

    The override is installed before TestClient() so requests never reach
    the application engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Builders
# ============================================================================


@pytest.fixture(name="make_season")
def make_season_fixture(session: Session):
    """Factory: league + season + named teams in roster order."""
    from season_engine.models import League, Season, Team

    def _make(team_names, competition=None, league=True):
        league_row = None
        if league:
            league_row = League(name="Test League")
            session.add(league_row)
            session.flush()
        settings = {"competition": competition} if competition is not None else {}
        season = Season(
            name="Test Season",
            league_id=league_row.id if league_row else None,
            settings_json=settings,
        )
        session.add(season)
        session.flush()
        for pos, name in enumerate(team_names, start=1):
            session.add(Team(season_id=season.id, name=name, roster_position=pos))
        session.commit()
        session.refresh(season)
        return season

    return _make
