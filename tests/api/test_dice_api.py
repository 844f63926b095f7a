"""주사위 API 통합 테스트

TestClient + in-memory SQLite + manifest 카탈로그.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.dice import router as dice_router
from src.core.event_bus import EventBus
from src.db.models import Base
from src.services.dice_service import DiceService

WHITE_BG = "/dice/Backgrounds/WhiteBackground.svg"
WHITE_DICE = "/dice/Dice/WhiteDice.svg"
BOX_DICE = "/dice/Dice/BoxDice.svg"
ICE_DICE = "/dice/Dice/IceCubeDice.svg"
PATTERN_123 = "/dice/Patterns/1-2-3.svg"
CONE = "/dice/Crowns%20%26%20Hats/Cone.svg"


@pytest.fixture()
def client(asset_catalog):
    """TestClient + 인메모리 환경 세팅"""
    db_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(db_engine)
    session_factory = sessionmaker(bind=db_engine)
    db = session_factory()

    dice_service = DiceService(db, EventBus(), asset_catalog)

    app = FastAPI()
    app.include_router(dice_router)
    app.state.dice_service = dice_service

    yield TestClient(app)

    db.close()


def _category(data: dict, name: str) -> dict:
    return next(c for c in data["categories"] if c["category"] == name)


# ── assets ───────────────────────────────────────────────────


class TestAssets:
    def test_ranked_assets(self, client: TestClient) -> None:
        resp = client.get("/dice/assets", params={"user_level": 1})
        assert resp.status_code == 200
        data = resp.json()
        assert data["user_level"] == 1
        assert len(data["categories"]) == 8

        dice = _category(data, "dice")["assets"]
        assert dice[0]["name"] == "WhiteDice"
        assert dice[0]["display_name"] == "White"
        assert dice[0]["thumbnail"] == "/dice/Thumbnails/WhiteDicethumbnail.svg"
        assert not dice[0]["locked"]
        assert dice[1]["locked"]

    def test_default_level(self, client: TestClient) -> None:
        assert client.get("/dice/assets").json()["user_level"] == 1

    def test_none_labels(self, client: TestClient) -> None:
        data = client.get("/dice/assets").json()
        assert _category(data, "pattern")["none_label"] == "No Pattern"
        assert _category(data, "dice")["none_label"] is None

    def test_blocked_under_base(self, client: TestClient) -> None:
        data = client.get(
            "/dice/assets", params={"user_level": 10, "base": ICE_DICE}
        ).json()
        hats = _category(data, "hat")
        assert hats["disabled"]
        assert all(a["blocked"] for a in hats["assets"])
        assert not _category(data, "item")["disabled"]


# ── config ───────────────────────────────────────────────────


class TestConfig:
    def test_default_config(self, client: TestClient) -> None:
        data = client.get("/dice/config/u1").json()
        assert data["config"]["dice"] == WHITE_DICE
        assert data["layers"] == [WHITE_BG, WHITE_DICE, PATTERN_123]
        assert data["updated_at"] is None

    def test_save_repairs(self, client: TestClient) -> None:
        resp = client.post(
            "/dice/config",
            json={
                "user_id": "u1",
                "user_level": 10,
                "config": {"background": WHITE_BG, "dice": ICE_DICE, "hat": CONE},
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["config"]["hat"] is None
        assert data["cleared"] == ["hat"]
        assert data["disabled_categories"] == ["pattern", "accessories", "hat"]
        assert data["layers"] == [WHITE_BG, ICE_DICE]

        reloaded = client.get("/dice/config/u1", params={"user_level": 10}).json()
        assert reloaded["config"]["dice"] == ICE_DICE
        assert reloaded["updated_at"] is not None

    def test_save_requires_user_id(self, client: TestClient) -> None:
        resp = client.post("/dice/config", json={"config": {}})
        assert resp.status_code == 422


# ── select ───────────────────────────────────────────────────


class TestSelect:
    def test_base_change(self, client: TestClient) -> None:
        resp = client.post(
            "/dice/select",
            json={"user_id": "u1", "user_level": 3, "category": "dice", "resource_ref": BOX_DICE},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["accepted"]
        assert data["cleared"] == ["pattern"]
        assert data["layers"] == [WHITE_BG, BOX_DICE]

        layers = client.get("/dice/layers/u1", params={"user_level": 3}).json()
        assert layers["layers"] == [WHITE_BG, BOX_DICE]

    def test_blocked_returns_200(self, client: TestClient) -> None:
        client.post(
            "/dice/select",
            json={"user_id": "u1", "user_level": 10, "category": "dice", "resource_ref": ICE_DICE},
        )
        resp = client.post(
            "/dice/select",
            json={"user_id": "u1", "user_level": 10, "category": "hat", "resource_ref": CONE},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert not data["accepted"]
        assert data["reason"] == "blocked"
        assert data["config"]["hat"] is None

    def test_locked(self, client: TestClient) -> None:
        resp = client.post(
            "/dice/select",
            json={"user_id": "u1", "category": "hat", "resource_ref": CONE},
        )
        assert resp.json()["reason"] == "locked"

    def test_unknown_category(self, client: TestClient) -> None:
        resp = client.post(
            "/dice/select",
            json={"user_id": "u1", "category": "wings", "resource_ref": None},
        )
        assert resp.status_code == 400


# ── share / counter / unlocks ────────────────────────────────


class TestShare:
    def test_share_and_list(self, client: TestClient) -> None:
        resp = client.post("/dice/share", json={"user_id": "u1", "title": "Mine"})
        assert resp.status_code == 200
        share = resp.json()
        assert share["title"] == "Mine"
        assert share["layers"] == [WHITE_BG, WHITE_DICE, PATTERN_123]

        shares = client.get("/dice/shares").json()
        assert [s["share_id"] for s in shares] == [share["share_id"]]

    def test_default_title(self, client: TestClient) -> None:
        share = client.post("/dice/share", json={"user_id": "u1"}).json()
        assert share["title"] == "My Dice"


class TestCounter:
    def test_increment(self, client: TestClient) -> None:
        assert client.get("/dice/counter").json()["counter"] == 0
        client.post("/dice/counter")
        data = client.post("/dice/counter").json()
        assert data == {"counter": 2, "dice_name": "Dice 000002"}


class TestUnlocks:
    def test_level_up(self, client: TestClient) -> None:
        data = client.get(
            "/dice/unlocks", params={"old_level": 1, "new_level": 2}
        ).json()
        assets = {(u["category"], u["asset"]) for u in data["unlocked"]}
        assert ("dice", "BlackDice") in assets
        assert ("dice", "WhiteDice") not in assets

    def test_missing_params(self, client: TestClient) -> None:
        assert client.get("/dice/unlocks").status_code == 422
