"""주사위 커스터마이징 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping, Optional


class Category(str, Enum):
    """카테고리. 값은 저장 payload의 키와 동일."""

    BACKGROUND = "background"
    BASE = "dice"
    PATTERN = "pattern"
    ACCESSORY = "accessories"
    HAT = "hat"
    ITEM = "item"
    COMPANION = "companion"
    TITLE = "title"


@dataclass(frozen=True)
class DiceAsset:
    """선택 가능한 코스메틱 에셋: 불변."""

    asset_id: str  # "Dice-BoxDice.svg"
    name: str  # "BoxDice", "Conethumbnail" 등 원본 표기
    resource_ref: str  # "/dice/Dice/BoxDice.svg"

    locked: bool = False
    required_level: Optional[int] = None  # 0 = 보상 등급
    level_name: str = ""
    description: str = ""

    @property
    def is_reward_tier(self) -> bool:
        """레벨 미지정과 0은 모두 보상 등급으로 취급."""
        return not self.required_level


class Selection:
    """카테고리별 현재 선택. 카테고리마다 정확히 한 항목 (기본 None).

    불변 객체: 변경은 replace()로 새 Selection을 만든다.
    """

    __slots__ = ("_entries",)

    def __init__(
        self, entries: Optional[Mapping[Category, Optional[DiceAsset]]] = None
    ) -> None:
        self._entries: dict[Category, Optional[DiceAsset]] = {c: None for c in Category}
        if entries:
            for category, asset in entries.items():
                self._entries[Category(category)] = asset

    def __getitem__(self, category: Category) -> Optional[DiceAsset]:
        return self._entries[Category(category)]

    def __iter__(self) -> Iterator[Category]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        chosen = {
            c.value: a.resource_ref for c, a in self._entries.items() if a is not None
        }
        return f"Selection({chosen})"

    def items(self) -> list[tuple[Category, Optional[DiceAsset]]]:
        return list(self._entries.items())

    def replace(self, category: Category, asset: Optional[DiceAsset]) -> Selection:
        """한 카테고리만 바꾼 새 Selection 반환."""
        entries = dict(self._entries)
        entries[Category(category)] = asset
        return Selection(entries)

    def is_empty(self) -> bool:
        return all(a is None for a in self._entries.values())

    def to_payload(self) -> dict[str, Optional[str]]:
        """저장용 payload: {category 값: resource_ref | None}"""
        return {
            c.value: (a.resource_ref if a is not None else None)
            for c, a in self._entries.items()
        }
