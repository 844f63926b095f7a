"""카탈로그 정렬: 카테고리 내 결정적 표시 순서

정렬 키 (우선순위 순):
1. 보상 등급(레벨 0/미지정)은 맨 뒤
2. required_level 오름차순
3. 카테고리별 RankTable 키워드 순위 (미매칭은 UNRANKED)
4. 이름 알파벳순 (대소문자 무시 → 원본 → asset_id)
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from .models import Category, DiceAsset
from .naming import clean_name

logger = logging.getLogger(__name__)

UNRANKED = 99

RankTable = tuple[tuple[str, int], ...]

# 키워드는 순서대로 검사, 첫 매칭이 순위를 결정한다.
# "baroness"는 "baron"에 먼저 걸리므로 동순위 → 알파벳순으로 정리됨.
RANK_TABLES: dict[Category, RankTable] = {
    Category.BACKGROUND: (
        ("white", 0),
        ("black", 1),
        ("blue", 2),
        ("green", 3),
        ("red", 4),
        ("yellow", 5),
        ("gameboard", 6),
        ("chessboard", 7),
        ("casino", 8),
        ("cardgame", 9),
    ),
    Category.BASE: (
        ("white", 0),
        ("black", 1),
        ("blue", 2),
        ("green", 3),
        ("orange", 4),
        ("pink", 5),
        ("purple", 6),
        ("red", 7),
        ("yellow", 8),
        ("box", 9),
        ("icecube", 10),
        ("rubik", 11),
        ("dice skull", 12),
        ("safe", 13),
    ),
    Category.PATTERN: (
        ("1-2-3", 0),
        ("1 2 3", 0),
        ("123", 0),
        ("2-1-4", 1),
        ("2 1 4", 1),
        ("214", 1),
        ("3-6-5", 2),
        ("3 6 5", 2),
        ("365", 2),
        ("4-5-6", 3),
        ("4 5 6", 3),
        ("456", 3),
        ("5-4-1", 4),
        ("5 4 1", 4),
        ("541", 4),
        ("6-3-2", 5),
        ("6 3 2", 5),
        ("632", 5),
        ("abc", 6),
        ("mistery", 7),
        ("suits", 8),
        ("elements", 9),
    ),
    Category.ACCESSORY: (
        ("belt", 0),
        ("blush", 1),
        ("scar", 2),
        ("patch", 3),
        ("kingscape", 4),
    ),
    Category.HAT: (
        ("cone", 0),
        ("tophat", 1),
        ("sorcerer", 2),
        ("wizard", 3),
        ("prince", 4),
        ("king", 5),
    ),
    Category.ITEM: (
        ("manapotion", 0),
        ("healthpotion", 1),
        ("cardcastle", 2),
        ("pokerchips", 3),
        ("map", 4),
        ("coins", 5),
        ("shield", 6),
        ("mace", 7),
        ("bomb", 8),
        ("staff", 9),
        ("spellbook", 10),
        ("sword", 11),
        ("holygrail", 12),
    ),
    Category.COMPANION: (
        ("meeple", 0),
        ("mini dice", 1),
        ("chessknight", 2),
        ("dice skull", 3),
        ("eightball", 4),
        ("mimic", 5),
    ),
    Category.TITLE: (
        ("commoner", 0),
        ("squire", 1),
        ("knight", 2),
        ("champion", 3),
        ("baron", 4),
        ("baroness", 5),
        ("lord", 6),
        ("lady", 7),
        ("archmage", 8),
        ("duke", 9),
        ("duchess", 10),
        ("prince", 11),
        ("princess", 12),
        ("king", 13),
        ("queen", 14),
    ),
}


def domain_rank(
    category: Category,
    name: str,
    tables: Mapping[Category, RankTable] = RANK_TABLES,
) -> int:
    """이름 키워드 순위. 매칭 없음/테이블 없음 → UNRANKED."""
    cleaned = clean_name(name)
    for keyword, rank in tables.get(category, ()):
        if keyword in cleaned:
            return rank
    return UNRANKED


def sort_key(
    category: Category,
    asset: DiceAsset,
    tables: Mapping[Category, RankTable] = RANK_TABLES,
) -> tuple:
    """rank_assets에서 쓰는 전순서 키."""
    return (
        asset.is_reward_tier,
        asset.required_level or 0,
        domain_rank(category, asset.name, tables),
        asset.name.lower(),
        asset.name,
        asset.asset_id,
    )


def rank_assets(
    category: Category,
    assets: Iterable[DiceAsset],
    tables: Mapping[Category, RankTable] = RANK_TABLES,
) -> list[DiceAsset]:
    """카테고리 표시 순서로 정렬한 새 리스트. 입력은 변경하지 않는다."""
    return sorted(assets, key=lambda a: sort_key(category, a, tables))


def rank_catalog(
    catalog: Mapping[Category, Sequence[DiceAsset]],
    tables: Mapping[Category, RankTable] = RANK_TABLES,
) -> dict[Category, list[DiceAsset]]:
    """전체 카테고리 정렬."""
    ranked = {
        Category(category): rank_assets(Category(category), assets, tables)
        for category, assets in catalog.items()
    }
    logger.debug(
        "Ranked catalog: %s",
        {c.value: len(items) for c, items in ranked.items()},
    )
    return ranked
