"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.core.dice.catalog import AssetCatalog
from src.db.database import get_db
from src.main import app

ASSET_MANIFEST_PATH = Path("src/data/dice_assets.json")

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database.

    Not entered as a context manager, so the startup lifespan does not run.
    """
    return TestClient(app)


@pytest.fixture()
def asset_catalog() -> AssetCatalog:
    """Catalog loaded from the bundled asset manifest."""
    catalog = AssetCatalog()
    catalog.load_from_json(ASSET_MANIFEST_PATH)
    return catalog
