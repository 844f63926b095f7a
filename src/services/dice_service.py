"""주사위 Service: Core↔DB 연결, EventBus 통신

요청마다 저장된 설정으로 SelectionManager를 복원하고,
변경이 확정되면 DICE_SELECTION_SETTLED를 발행한다.
저장은 그 이벤트의 핸들러가 담당 (fire-and-forget).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.dice.catalog import AssetCatalog
from src.core.dice.compatibility import (
    DEFAULT_RULES,
    RuleTable,
    is_blocked,
    is_category_disabled,
)
from src.core.dice.layers import compose_layers
from src.core.dice.levels import LevelRequirement, newly_unlocked
from src.core.dice.models import Category, DiceAsset
from src.core.dice.ranking import rank_catalog
from src.core.dice.selection import RejectReason, SelectionManager, SelectionResult
from src.core.event_bus import DiceEvent, EventBus
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.db.models import DiceConfigModel, DiceCounterModel, DiceShareModel

logger = get_logger(__name__)

SOURCE = "dice_service"

DEFAULT_SHARE_TITLE = "My Dice"
COUNTER_NAME = "dice"

# 신규 사용자 기본 설정 (파일명 기준, ref는 카탈로그가 만든다)
DEFAULT_CONFIG_FILES: dict[Category, str] = {
    Category.BACKGROUND: "WhiteBackground.svg",
    Category.BASE: "WhiteDice.svg",
    Category.PATTERN: "1-2-3.svg",
}


def parse_category(value: str) -> Category:
    """문자열 → Category. 알 수 없으면 ValueError."""
    try:
        return Category(value)
    except ValueError:
        raise ValueError(f"Unknown category: {value}") from None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DiceService:
    """주사위 설정 조회/변경/저장 + 공유"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        catalog: AssetCatalog,
        rules: RuleTable = DEFAULT_RULES,
    ):
        self._db = db
        self._bus = event_bus
        self._catalog = catalog
        self._rules = rules
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        """EventBus 구독"""
        self._bus.subscribe(
            EventTypes.DICE_SELECTION_SETTLED, self._on_selection_settled
        )

    # === 카탈로그 ===

    def get_assets(self, user_level: int) -> dict[Category, list[DiceAsset]]:
        """user_level 기준 잠금 표시 + 정렬된 카탈로그."""
        return rank_catalog(self._catalog.build(user_level))

    def is_blocked(
        self, base_ref: Optional[str], category: Category, asset: DiceAsset
    ) -> bool:
        """읽기 전용 UI 질의: base_ref 하에서 asset 비활성 여부."""
        return is_blocked(base_ref, category, asset, self._rules)

    def is_category_disabled(self, base_ref: Optional[str], category: Category) -> bool:
        return is_category_disabled(base_ref, category, self._rules)

    def catalog_size(self) -> int:
        return self._catalog.count()

    def newly_unlocked(
        self, old_level: int, new_level: int
    ) -> list[tuple[Category, str, LevelRequirement]]:
        return newly_unlocked(old_level, new_level)

    def default_config(self) -> dict[str, Optional[str]]:
        config: dict[str, Optional[str]] = {c.value: None for c in Category}
        for category, filename in DEFAULT_CONFIG_FILES.items():
            config[category.value] = self._catalog.resource_ref(category, filename)
        return config

    # === 설정 조회 ===

    def load_config(
        self, user_id: str
    ) -> tuple[dict[str, Optional[str]], Optional[datetime]]:
        """저장된 payload + 갱신 시각. 없으면 기본 설정과 None."""
        orm = (
            self._db.query(DiceConfigModel)
            .filter(DiceConfigModel.user_id == user_id)
            .first()
        )
        if orm is None:
            return self.default_config(), None
        return dict(orm.config), orm.updated_at

    def open_session(self, user_id: str, user_level: int) -> SelectionManager:
        """저장 설정 복원 + repair.
        repair로 바뀐 항목이 있으면 정리된 상태를 다시 저장한다.
        """
        payload, _ = self.load_config(user_id)
        manager = SelectionManager.restore(
            payload, self._catalog.build(user_level), self._rules
        )
        if manager.restored_cleared:
            self._settle(user_id, manager)
        return manager

    # === 설정 변경 ===

    def apply_selection(
        self,
        user_id: str,
        user_level: int,
        category: str,
        resource_ref: Optional[str],
    ) -> tuple[SelectionResult, SelectionManager]:
        """카테고리 하나 변경. 거절되어도 예외 없이 결과 반환.
        알 수 없는 category 문자열만 ValueError.
        """
        parsed = parse_category(category)
        manager = self.open_session(user_id, user_level)

        if resource_ref:
            asset = manager.find(parsed, resource_ref)
            if asset is None:
                result = SelectionResult(
                    accepted=False,
                    category=parsed,
                    reason=RejectReason.NOT_IN_CATALOG,
                )
            else:
                result = manager.select(parsed, asset)
        else:
            result = manager.select(parsed, None)

        if result.accepted:
            self._settle(user_id, manager)
        else:
            self._bus.emit(
                DiceEvent(
                    event_type=EventTypes.DICE_SELECTION_REJECTED,
                    data={
                        "user_id": user_id,
                        "category": parsed.value,
                        "resource_ref": resource_ref,
                        "reason": result.reason.value if result.reason else None,
                    },
                    source=SOURCE,
                )
            )
        return result, manager

    def save_config(
        self,
        user_id: str,
        user_level: int,
        payload: dict[str, Optional[str]],
    ) -> SelectionManager:
        """payload 전체 저장. 카탈로그/규칙 기준으로 정리한 뒤 저장된다."""
        manager = SelectionManager.restore(
            payload,
            self._catalog.build(user_level),
            self._rules,
            fill_defaults=False,
        )
        self._settle(user_id, manager)
        return manager

    def _commit(self) -> None:
        """commit 실패 시 rollback 후 재발생."""
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    def _settle(self, user_id: str, manager: SelectionManager) -> None:
        self._bus.emit(
            DiceEvent(
                event_type=EventTypes.DICE_SELECTION_SETTLED,
                data={"user_id": user_id, "config": manager.to_payload()},
                source=SOURCE,
            )
        )

    def _on_selection_settled(self, event: DiceEvent) -> None:
        """확정된 payload를 upsert."""
        user_id = event.data["user_id"]
        config = event.data["config"]

        orm = (
            self._db.query(DiceConfigModel)
            .filter(DiceConfigModel.user_id == user_id)
            .first()
        )
        if orm is None:
            orm = DiceConfigModel(user_id=user_id, config=config, updated_at=_now())
            self._db.add(orm)
        else:
            orm.config = config
            orm.updated_at = _now()

        self._commit()

        logger.debug("Saved dice config for %s", user_id)
        self._bus.emit(
            DiceEvent(
                event_type=EventTypes.DICE_CONFIG_SAVED,
                data={"user_id": user_id},
                source=SOURCE,
            )
        )

    # === 공유 ===

    def share_config(
        self, user_id: str, user_level: int, title: Optional[str] = None
    ) -> DiceShareModel:
        """현재 설정을 갤러리 공유 항목으로 저장."""
        manager = self.open_session(user_id, user_level)
        share = DiceShareModel(
            share_id=f"share_{uuid.uuid4().hex}",
            user_id=user_id,
            title=title or DEFAULT_SHARE_TITLE,
            config=manager.to_payload(),
            layers=compose_layers(manager.selection),
            upvotes=0,
            downvotes=0,
            created_at=_now(),
        )
        self._db.add(share)
        self._commit()

        self._bus.emit(
            DiceEvent(
                event_type=EventTypes.DICE_SHARED,
                data={"user_id": user_id, "share_id": share.share_id},
                source=SOURCE,
            )
        )
        logger.info("User %s shared dice %s", user_id, share.share_id)
        return share

    def list_shares(self, limit: int = 20) -> list[DiceShareModel]:
        """최신순."""
        return (
            self._db.query(DiceShareModel)
            .order_by(DiceShareModel.created_at.desc())
            .limit(limit)
            .all()
        )

    # === 일련번호 ===

    def current_counter(self) -> int:
        orm = self._db.get(DiceCounterModel, COUNTER_NAME)
        return orm.value if orm is not None else 0

    def next_dice_name(self) -> tuple[int, str]:
        """카운터 증가 후 (번호, "Dice 000001") 반환."""
        orm = self._db.get(DiceCounterModel, COUNTER_NAME)
        if orm is None:
            orm = DiceCounterModel(name=COUNTER_NAME, value=0)
            self._db.add(orm)
        orm.value += 1
        self._commit()
        return orm.value, f"Dice {orm.value:06d}"
