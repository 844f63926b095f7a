"""에셋 해금 레벨 테이블

레벨 0 = 보상 등급(Special). 일반 진행으로는 해금되지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .models import Category

logger = logging.getLogger(__name__)

REWARD_LEVEL = 0


@dataclass(frozen=True)
class LevelRequirement:
    level: int
    level_name: str
    description: str = ""


def _req(level: int, level_name: str, description: str) -> LevelRequirement:
    return LevelRequirement(level=level, level_name=level_name, description=description)


# 카테고리 → 에셋 키(확장자 제외 파일명) → 요구 레벨
ASSET_LEVEL_REQUIREMENTS: dict[Category, dict[str, LevelRequirement]] = {
    Category.BACKGROUND: {
        "WhiteBackground": _req(1, "Commoner", "Basic white background"),
        "BlackBackground": _req(1, "Commoner", "Basic black background"),
        "BlueBackground": _req(2, "Squire", "Blue background"),
        "GreenBackground": _req(2, "Squire", "Green background"),
        "RedBackground": _req(2, "Squire", "Red background"),
        "YellowBackground": _req(2, "Squire", "Yellow background"),
        "GameBoardBackground": _req(4, "Champion", "Game board themed background"),
        "ChessBoardBackground": _req(6, "Lord/Lady", "Chess board themed background"),
        "CasinoBackground": _req(8, "Duke/Duchess", "Casino themed background"),
        "CardGameBackground": _req(10, "King/Queen", "Card game themed background"),
        "KingsRoomBackground": _req(
            0,
            "Special",
            "King's Room background - only unlockable by winning Dice of the Week",
        ),
    },
    Category.BASE: {
        "WhiteDice": _req(1, "Commoner", "Basic white dice"),
        "BlackDice": _req(2, "Squire", "Basic black dice"),
        "BlueDice": _req(2, "Squire", "Basic blue dice"),
        "GreenDice": _req(2, "Squire", "Basic green dice"),
        "OrangeDice": _req(2, "Squire", "Orange dice"),
        "PinkDice": _req(2, "Squire", "Pink dice"),
        "PurpleDice": _req(2, "Squire", "Purple dice"),
        "RedDice": _req(2, "Squire", "Basic red dice"),
        "YellowDice": _req(2, "Squire", "Basic yellow dice"),
        "BoxDice": _req(3, "Knight", "Box-themed dice"),
        "IceCubeDice": _req(5, "Baron/Baroness", "Ice cube dice"),
        "RubikDice": _req(7, "Archmage", "Rubik's cube dice"),
        "Dice-SkullDice": _req(8, "Duke/Duchess", "Skull-themed dice"),
        "SafeDice": _req(9, "Lord/Lady", "Safe-themed dice"),
        "GiftDice": _req(
            0, "Special", "Gift dice - only unlockable by donating to the page"
        ),
        "Dice-BotDice": _req(
            0, "Special", "Dice-Bot dice - only unlockable by donating to the page"
        ),
    },
    Category.PATTERN: {
        "1-2-3": _req(1, "Commoner", "Basic 1-2-3 pattern"),
        "2-1-4": _req(1, "Commoner", "Basic 2-1-4 pattern"),
        "3-6-5": _req(1, "Commoner", "Basic 3-6-5 pattern"),
        "4-5-6": _req(1, "Commoner", "Basic 4-5-6 pattern"),
        "5-4-1": _req(1, "Commoner", "Basic 5-4-1 pattern"),
        "6-3-2": _req(1, "Commoner", "Basic 6-3-2 pattern"),
        "ABC": _req(4, "Champion", "Alphabet pattern"),
        "Mistery": _req(6, "Lord/Lady", "Mystery pattern"),
        "Suits": _req(6, "Lord/Lady", "Card suit pattern"),
        "Elements": _req(8, "Duke/Duchess", "Elemental pattern"),
    },
    Category.ACCESSORY: {
        "Bow": _req(2, "Squire", "Basic bow accessory"),
        "Belt": _req(4, "Champion", "Basic belt accessory"),
        "Blush": _req(5, "Baron/Baroness", "Blush accessory"),
        "Sunglasses": _req(5, "Baron/Baroness", "Cool sunglasses accessory"),
        "Scar": _req(7, "Archmage", "Scar accessory"),
        "Patch": _req(9, "Lord/Lady", "Patch accessory"),
        "KingsCape": _req(10, "King/Queen", "King's cape - very exclusive!"),
    },
    Category.HAT: {
        "Cone": _req(2, "Squire", "Basic cone hat"),
        "Joker": _req(2, "Squire", "Joker hat"),
        "TopHat": _req(5, "Baron/Baroness", "Elegant top hat"),
        "SorcererHat": _req(8, "Duke/Duchess", "Powerful sorcerer hat"),
        "WizardHat": _req(8, "Duke/Duchess", "Magical wizard hat"),
        "PrincesCrown": _req(9, "Lord/Lady", "Prince's crown - royal item!"),
        "QueensCrown": _req(10, "King/Queen", "Queen's crown - ultimate prestige!"),
        "KingsCrown": _req(10, "King/Queen", "King's crown - ultimate prestige!"),
    },
    Category.ITEM: {
        "ManaPotion": _req(1, "Commoner", "Mana potion"),
        "HealthPotion": _req(1, "Commoner", "Health potion"),
        "CardCastle": _req(3, "Knight", "Card castle item"),
        "PokerChips": _req(4, "Champion", "Poker chips"),
        "Map": _req(5, "Baron/Baroness", "Adventure map"),
        "Coins": _req(5, "Baron/Baroness", "Coins"),
        "Shield": _req(6, "Lord/Lady", "Basic shield"),
        "Mace": _req(6, "Lord/Lady", "Heavy mace"),
        "Bomb": _req(7, "Archmage", "Explosive bomb"),
        "Staff": _req(8, "Duke/Duchess", "Magical staff"),
        "Spellbook": _req(8, "Duke/Duchess", "Ancient spellbook"),
        "Sword": _req(9, "Lord/Lady", "Basic sword"),
        "HolyGrail": _req(10, "King/Queen", "Legendary holy grail"),
        "KingsCard": _req(
            0,
            "Special",
            "King's Card - only unlockable by winning Card of the Week",
        ),
    },
    Category.COMPANION: {
        "Meeple": _req(3, "Knight", "Basic meeple companion"),
        "Mini-Dice": _req(5, "Baron/Baroness", "Mini dice companion"),
        "JackInTheBox": _req(6, "Lord/Lady", "Jack in the box companion"),
        "ChessKnight": _req(6, "Lord/Lady", "Chess knight companion"),
        "Dice-Skull": _req(7, "Archmage", "Legendary dice skull companion"),
        "EightBall": _req(8, "Duke/Duchess", "Eight ball companion"),
        "Mimic": _req(9, "Lord/Lady", "Mysterious mimic companion"),
        "Dice-Bot": _req(
            10, "King/Queen", "Legendary Dice-Bot companion - unlocks at level 10"
        ),
    },
    Category.TITLE: {
        "Commoner": _req(1, "Commoner", "Basic title for new players"),
        "Squire": _req(2, "Squire", "Squire title"),
        "Knight": _req(3, "Knight", "Knight title"),
        "Champion": _req(4, "Champion", "Champion title"),
        "Baron": _req(5, "Baron/Baroness", "Baron title"),
        "Baroness": _req(5, "Baron/Baroness", "Baroness title"),
        "Lord": _req(6, "Lord/Lady", "Lord title"),
        "Lady": _req(6, "Lord/Lady", "Lady title"),
        "Archmage": _req(7, "Archmage", "Archmage title"),
        "Duke": _req(8, "Duke/Duchess", "Duke title"),
        "Duchess": _req(8, "Duke/Duchess", "Duchess title"),
        "Prince": _req(9, "Prince/Princess", "Prince title"),
        "Princess": _req(9, "Prince/Princess", "Princess title"),
        "King": _req(10, "King/Queen", "King title"),
        "Queen": _req(10, "King/Queen", "Queen title"),
    },
}


def get_level_requirement(
    category: Category, key: str
) -> Optional[LevelRequirement]:
    """요구 레벨 조회. 테이블에 없으면 None."""
    return ASSET_LEVEL_REQUIREMENTS.get(Category(category), {}).get(key)


def is_locked_for(user_level: int, requirement: Optional[LevelRequirement]) -> bool:
    """잠금 여부. 요구사항 없음 → 해금, 보상 등급 → 항상 잠금."""
    if requirement is None:
        return False
    if requirement.level == REWARD_LEVEL:
        return True
    return user_level < requirement.level


def can_access(user_level: int, category: Category, key: str) -> bool:
    """요구사항이 없으면 접근 허용. 보상 등급은 레벨로 열리지 않는다."""
    return not is_locked_for(user_level, get_level_requirement(category, key))


def available_assets(user_level: int, category: Category) -> list[str]:
    """user_level에서 접근 가능한 에셋 키 목록 (테이블 순서)."""
    return [
        key
        for key, req in ASSET_LEVEL_REQUIREMENTS.get(Category(category), {}).items()
        if not is_locked_for(user_level, req)
    ]


def newly_unlocked(
    old_level: int, new_level: int
) -> list[tuple[Category, str, LevelRequirement]]:
    """레벨업으로 새로 해금된 에셋. old_level < level <= new_level."""
    unlocked: list[tuple[Category, str, LevelRequirement]] = []
    for category, assets in ASSET_LEVEL_REQUIREMENTS.items():
        for key, req in assets.items():
            if old_level < req.level <= new_level:
                unlocked.append((category, key, req))
    logger.debug(
        "Level %d → %d unlocked %d assets", old_level, new_level, len(unlocked)
    )
    return unlocked
