"""선택 상태 관리: Base 변경 시 연쇄 정리(repair), 단일 변경 진입점

불변식:
- Base가 None이면 Pattern도 None
- 어떤 항목도 현재 Base 규칙에 의해 차단된 에셋을 가리키지 않는다
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from .compatibility import DEFAULT_RULES, RuleTable, is_blocked, is_category_disabled
from .models import Category, DiceAsset, Selection
from .ranking import rank_catalog

logger = logging.getLogger(__name__)

# 저장값이 비어 있을 때 첫 해금 에셋으로 채우는 카테고리
DEFAULT_FILLED_CATEGORIES = (Category.BACKGROUND, Category.BASE)


class RejectReason(str, Enum):
    BLOCKED = "blocked"
    LOCKED = "locked"
    NOT_IN_CATALOG = "not_in_catalog"
    NO_BASE = "no_base"  # Pattern은 Base 위에만


@dataclass(frozen=True)
class SelectionResult:
    """select/set_base 결과. 거절 시 상태는 그대로."""

    accepted: bool
    category: Category
    reason: Optional[RejectReason] = None
    cleared: tuple[Category, ...] = ()


def repair(selection: Selection, rules: RuleTable = DEFAULT_RULES) -> Selection:
    """Base 기준으로 종속 선택을 재검증. 위반 항목은 None으로.

    순수 함수, 멱등.
    """
    base = selection[Category.BASE]
    repaired = selection
    for category in Category:
        if category == Category.BASE:
            continue
        asset = repaired[category]
        if asset is None:
            continue
        if category == Category.PATTERN and base is None:
            repaired = repaired.replace(category, None)
        elif is_blocked(base, category, asset, rules):
            repaired = repaired.replace(category, None)
    return repaired


def cleared_categories(before: Selection, after: Selection) -> tuple[Category, ...]:
    """before에는 있고 after에서 None이 된 카테고리."""
    return tuple(
        c for c in Category if before[c] is not None and after[c] is None
    )


def resolve_payload(
    payload: Mapping[str, Optional[str]],
    catalog: Mapping[Category, Sequence[DiceAsset]],
) -> tuple[Selection, tuple[Category, ...]]:
    """저장 payload(category → resource_ref)를 카탈로그 에셋으로 변환.

    알 수 없는 카테고리, 카탈로그에 없는 ref, 빈 문자열 → None.
    Returns: (Selection, 카탈로그 누락으로 버린 카테고리)
    """
    entries: dict[Category, Optional[DiceAsset]] = {}
    dropped: list[Category] = []
    for key, ref in payload.items():
        try:
            category = Category(key)
        except ValueError:
            logger.warning("Ignoring unknown category in saved config: %s", key)
            continue
        if not ref:
            continue
        asset = _find_by_ref(catalog.get(category, ()), ref)
        if asset is None:
            logger.warning(
                "Saved %s no longer in catalog, dropping: %s", category.value, ref
            )
            dropped.append(category)
            continue
        entries[category] = asset
    return Selection(entries), tuple(dropped)


def _find_by_ref(assets: Sequence[DiceAsset], ref: str) -> Optional[DiceAsset]:
    for asset in assets:
        if asset.resource_ref == ref:
            return asset
    return None


class SelectionManager:
    """세션 하나의 선택 상태. 단일 소유자 전제 (락 없음).

    변경은 select()/set_base()로만.
    """

    def __init__(
        self,
        catalog: Mapping[Category, Sequence[DiceAsset]],
        rules: RuleTable = DEFAULT_RULES,
        selection: Optional[Selection] = None,
    ) -> None:
        self._catalog = rank_catalog(catalog)
        self._rules = rules
        self._selection = repair(selection or Selection(), rules)
        self.restored_cleared: tuple[Category, ...] = ()

    @classmethod
    def restore(
        cls,
        payload: Mapping[str, Optional[str]],
        catalog: Mapping[Category, Sequence[DiceAsset]],
        rules: RuleTable = DEFAULT_RULES,
        fill_defaults: bool = True,
    ) -> SelectionManager:
        """저장된 설정으로 세션 시작. 노출 전에 repair.

        restored_cleared: 카탈로그 누락 또는 규칙 위반으로 비워진 카테고리.
        """
        manager = cls(catalog, rules)
        resolved, dropped = resolve_payload(payload, manager._catalog)

        if fill_defaults:
            resolved = manager._fill_defaults(resolved)

        repaired = repair(resolved, rules)
        manager._selection = repaired
        manager.restored_cleared = tuple(
            c for c in dropped if repaired[c] is None
        ) + cleared_categories(resolved, repaired)

        if manager.restored_cleared:
            logger.info(
                "Repaired saved config, cleared: %s",
                [c.value for c in manager.restored_cleared],
            )
        return manager

    def _fill_defaults(self, selection: Selection) -> Selection:
        for category in DEFAULT_FILLED_CATEGORIES:
            if selection[category] is not None:
                continue
            fallback = next(
                (a for a in self._catalog.get(category, []) if not a.locked), None
            )
            if fallback is not None:
                selection = selection.replace(category, fallback)
        return selection

    # === 조회 (상태 변경 없음) ===

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def base(self) -> Optional[DiceAsset]:
        return self._selection[Category.BASE]

    def ranked(self, category: Category) -> list[DiceAsset]:
        """카테고리 표시 순서."""
        return list(self._catalog.get(Category(category), []))

    def find(self, category: Category, resource_ref: str) -> Optional[DiceAsset]:
        """카테고리 카탈로그에서 resource_ref로 조회."""
        return _find_by_ref(self._catalog.get(Category(category), []), resource_ref)

    def is_blocked(self, category: Category, asset: DiceAsset) -> bool:
        return is_blocked(self.base, Category(category), asset, self._rules)

    def is_locked(self, asset: DiceAsset) -> bool:
        return asset.locked

    def disabled_categories(self) -> list[Category]:
        return [
            c for c in Category if is_category_disabled(self.base, c, self._rules)
        ]

    def to_payload(self) -> dict[str, Optional[str]]:
        return self._selection.to_payload()

    # === 변경 ===

    def set_base(self, asset: Optional[DiceAsset]) -> SelectionResult:
        """Base 교체 후 전체 repair."""
        if asset is not None:
            entry, reason = self._lookup(Category.BASE, asset)
            if reason is not None:
                return self._reject(Category.BASE, asset, reason)
            asset = entry

        before = self._selection.replace(Category.BASE, asset)
        after = repair(before, self._rules)
        self._selection = after
        cleared = cleared_categories(before, after)

        logger.info(
            "Base set to %s (cleared=%s)",
            asset.resource_ref if asset else None,
            [c.value for c in cleared],
        )
        return SelectionResult(accepted=True, category=Category.BASE, cleared=cleared)

    def select(
        self, category: Category, asset: Optional[DiceAsset]
    ) -> SelectionResult:
        """카테고리 하나 변경. Base가 아니면 다른 항목은 건드리지 않는다."""
        category = Category(category)
        if category == Category.BASE:
            return self.set_base(asset)

        if asset is None:
            self._selection = self._selection.replace(category, None)
            return SelectionResult(accepted=True, category=category)

        entry, reason = self._lookup(category, asset)
        if reason is None and category == Category.PATTERN and self.base is None:
            reason = RejectReason.NO_BASE
        if reason is None and self.is_blocked(category, entry):
            reason = RejectReason.BLOCKED
        if reason is not None:
            return self._reject(category, asset, reason)

        self._selection = self._selection.replace(category, entry)
        return SelectionResult(accepted=True, category=category)

    def _lookup(
        self, category: Category, asset: DiceAsset
    ) -> tuple[Optional[DiceAsset], Optional[RejectReason]]:
        """카탈로그 항목 기준으로 검사 (호출자가 만든 locked 값은 믿지 않는다)."""
        entry = self.find(category, asset.resource_ref)
        if entry is None:
            return None, RejectReason.NOT_IN_CATALOG
        if entry.locked:
            return entry, RejectReason.LOCKED
        return entry, None

    def _reject(
        self, category: Category, asset: DiceAsset, reason: RejectReason
    ) -> SelectionResult:
        logger.info(
            "Rejected %s selection %s: %s",
            category.value,
            asset.resource_ref,
            reason.value,
        )
        return SelectionResult(accepted=False, category=category, reason=reason)
