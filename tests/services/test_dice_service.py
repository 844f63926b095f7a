"""DiceService 통합 테스트 (인메모리 SQLite + EventBus)"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from src.core.dice.models import Category
from src.core.dice.selection import RejectReason
from src.core.event_bus import DiceEvent, EventBus
from src.core.event_types import EventTypes
from src.db.models import Base, DiceConfigModel, DiceShareModel
from src.services.dice_service import DiceService, parse_category

WHITE_BG = "/dice/Backgrounds/WhiteBackground.svg"
WHITE_DICE = "/dice/Dice/WhiteDice.svg"
BOX_DICE = "/dice/Dice/BoxDice.svg"
ICE_DICE = "/dice/Dice/IceCubeDice.svg"
BLACK_DICE = "/dice/Dice/BlackDice.svg"
PATTERN_123 = "/dice/Patterns/1-2-3.svg"
CONE = "/dice/Crowns%20%26%20Hats/Cone.svg"
BOW = "/dice/Accessories/Bow.svg"
SWORD = "/dice/Items/Sword.svg"


@pytest.fixture()
def setup(asset_catalog):
    """인메모리 DB + EventBus + DiceService"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine)
    db = session_factory()
    bus = EventBus()

    service = DiceService(db, bus, asset_catalog)
    yield service, db, bus
    db.close()


def _record(bus: EventBus, event_type: str) -> list[DiceEvent]:
    received: list[DiceEvent] = []
    bus.subscribe(event_type, received.append)
    return received


def _saved(db, user_id: str) -> dict | None:
    orm = db.query(DiceConfigModel).filter(DiceConfigModel.user_id == user_id).first()
    return orm.config if orm else None


# ── 조회 ─────────────────────────────────────────────────────


class TestLoad:
    def test_new_user_gets_default_config(self, setup) -> None:
        service, _, _ = setup
        payload, updated_at = service.load_config("u1")
        assert payload["background"] == WHITE_BG
        assert payload["dice"] == WHITE_DICE
        assert payload["pattern"] == PATTERN_123
        assert payload["hat"] is None
        assert updated_at is None

    def test_open_session_does_not_persist_clean_state(self, setup) -> None:
        service, db, _ = setup
        manager = service.open_session("u1", 1)
        assert manager.base.name == "WhiteDice"
        assert manager.selection[Category.PATTERN].name == "1 2 3"
        assert _saved(db, "u1") is None

    def test_open_session_repairs_and_saves_stale_config(self, setup) -> None:
        service, db, _ = setup
        db.add(
            DiceConfigModel(
                user_id="u1",
                config={"dice": BOX_DICE, "pattern": PATTERN_123, "item": "/dice/Items/Gone.svg"},
                updated_at=datetime(2024, 1, 1),
            )
        )
        db.commit()

        manager = service.open_session("u1", 10)

        assert manager.selection[Category.PATTERN] is None
        assert manager.selection[Category.ITEM] is None
        saved = _saved(db, "u1")
        assert saved["dice"] == BOX_DICE
        assert saved["pattern"] is None
        assert saved["item"] is None

    def test_ranked_assets(self, setup) -> None:
        service, _, _ = setup
        assets = service.get_assets(1)
        assert assets[Category.BASE][0].name == "WhiteDice"
        assert assets[Category.BASE][-1].locked

    def test_read_only_block_queries(self, setup) -> None:
        service, _, _ = setup
        hats = service.get_assets(10)[Category.HAT]
        assert all(service.is_blocked(ICE_DICE, Category.HAT, h) for h in hats)
        assert service.is_category_disabled(ICE_DICE, Category.HAT)
        assert not service.is_category_disabled(WHITE_DICE, Category.HAT)


# ── 변경 ─────────────────────────────────────────────────────


class TestApplySelection:
    def test_base_change_persists_repaired_state(self, setup) -> None:
        service, db, bus = setup
        saved_events = _record(bus, EventTypes.DICE_CONFIG_SAVED)

        result, manager = service.apply_selection("u1", 10, "dice", BOX_DICE)

        assert result.accepted
        assert result.cleared == (Category.PATTERN,)
        saved = _saved(db, "u1")
        assert saved["dice"] == BOX_DICE
        assert saved["pattern"] is None
        assert len(saved_events) == 1

    def test_blocked_selection_rejected(self, setup) -> None:
        service, db, bus = setup
        rejected = _record(bus, EventTypes.DICE_SELECTION_REJECTED)
        service.apply_selection("u1", 10, "dice", ICE_DICE)
        before = _saved(db, "u1")

        result, _ = service.apply_selection("u1", 10, "hat", CONE)

        assert not result.accepted
        assert result.reason == RejectReason.BLOCKED
        assert _saved(db, "u1") == before
        assert rejected[0].data["reason"] == "blocked"

    def test_locked_selection_rejected(self, setup) -> None:
        service, db, _ = setup
        result, _ = service.apply_selection("u1", 1, "dice", BLACK_DICE)
        assert result.reason == RejectReason.LOCKED
        assert _saved(db, "u1") is None

    def test_unknown_ref(self, setup) -> None:
        service, _, _ = setup
        result, _ = service.apply_selection("u1", 10, "item", "/dice/Items/Wings.svg")
        assert result.reason == RejectReason.NOT_IN_CATALOG

    def test_clear_selection(self, setup) -> None:
        service, db, _ = setup
        result, _ = service.apply_selection("u1", 1, "pattern", None)
        assert result.accepted
        assert _saved(db, "u1")["pattern"] is None

    def test_unknown_category_raises(self, setup) -> None:
        service, _, _ = setup
        with pytest.raises(ValueError, match="Unknown category"):
            service.apply_selection("u1", 1, "wings", None)

    def test_parse_category(self) -> None:
        assert parse_category("accessories") == Category.ACCESSORY

    def test_failing_subscriber_does_not_break_selection(self, setup) -> None:
        service, db, bus = setup

        def broken(event: DiceEvent) -> None:
            raise RuntimeError("boom")

        bus.subscribe(EventTypes.DICE_SELECTION_SETTLED, broken)
        result, _ = service.apply_selection("u1", 10, "item", SWORD)
        assert result.accepted
        assert _saved(db, "u1")["item"] == SWORD


class TestSaveConfig:
    def test_save_repairs_before_storing(self, setup) -> None:
        service, db, _ = setup
        manager = service.save_config(
            "u1",
            10,
            {"dice": ICE_DICE, "hat": CONE, "accessories": BOW, "pattern": PATTERN_123},
        )
        assert set(manager.restored_cleared) == {
            Category.PATTERN,
            Category.ACCESSORY,
            Category.HAT,
        }
        saved = _saved(db, "u1")
        assert saved["dice"] == ICE_DICE
        assert saved["hat"] is None
        assert saved["background"] is None

    def test_save_overwrites(self, setup) -> None:
        service, db, _ = setup
        service.save_config("u1", 10, {"dice": WHITE_DICE})
        service.save_config("u1", 10, {"dice": BOX_DICE})
        assert _saved(db, "u1")["dice"] == BOX_DICE
        assert db.query(DiceConfigModel).count() == 1
        _, updated_at = service.load_config("u1")
        assert updated_at is not None


# ── 공유 / 카운터 ────────────────────────────────────────────


class TestShare:
    def test_share_current_config(self, setup) -> None:
        service, db, bus = setup
        shared = _record(bus, EventTypes.DICE_SHARED)

        share = service.share_config("u1", 1)

        assert share.share_id.startswith("share_")
        assert share.title == "My Dice"
        assert share.layers == [WHITE_BG, WHITE_DICE, PATTERN_123]
        assert db.query(DiceShareModel).count() == 1
        assert shared[0].data["share_id"] == share.share_id

    def test_list_shares(self, setup) -> None:
        service, _, _ = setup
        service.share_config("u1", 1, "First")
        service.share_config("u2", 1, "Second")
        assert {s.title for s in service.list_shares()} == {"First", "Second"}
        assert len(service.list_shares(limit=1)) == 1


class TestCounter:
    def test_next_dice_name(self, setup) -> None:
        service, _, _ = setup
        assert service.current_counter() == 0
        assert service.next_dice_name() == (1, "Dice 000001")
        assert service.next_dice_name() == (2, "Dice 000002")
        assert service.current_counter() == 2


class TestUnlocks:
    def test_newly_unlocked(self, setup) -> None:
        service, _, _ = setup
        keys = {key for _, key, _ in service.newly_unlocked(2, 3)}
        assert {"BoxDice", "Meeple", "Knight"} <= keys

    def test_catalog_size(self, setup) -> None:
        service, _, _ = setup
        assert service.catalog_size() == 89


def _fail_first_commit(db, monkeypatch) -> None:
    original_commit = db.commit
    calls = {"count": 0}

    def commit() -> None:
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        original_commit()

    monkeypatch.setattr(db, "commit", commit)


class TestCommitFailure:
    def test_share_rolls_back_and_session_recovers(self, setup, monkeypatch) -> None:
        service, db, _ = setup
        _fail_first_commit(db, monkeypatch)

        with pytest.raises(SQLAlchemyError):
            service.share_config("u1", 1, "Lost")

        share = service.share_config("u1", 1, "Kept")
        assert [s.title for s in service.list_shares()] == ["Kept"]
        assert share.title == "Kept"

    def test_counter_rolls_back_and_session_recovers(self, setup, monkeypatch) -> None:
        service, db, _ = setup
        _fail_first_commit(db, monkeypatch)

        with pytest.raises(SQLAlchemyError):
            service.next_dice_name()

        assert service.next_dice_name() == (1, "Dice 000001")
