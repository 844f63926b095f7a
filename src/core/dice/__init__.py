"""주사위 커스터마이징 Core: 순수 Python, DB 무관"""

from .catalog import AssetCatalog, CATEGORY_DIRS
from .compatibility import (
    DEFAULT_RULES,
    BlockedSubstrings,
    CompatibilityRule,
    FullyBlocked,
    Unrestricted,
    is_blocked,
    is_category_disabled,
    load_rules,
)
from .layers import LAYER_ORDER, compose_layers
from .levels import LevelRequirement, newly_unlocked
from .models import Category, DiceAsset, Selection
from .naming import display_name, normalize_identifier, thumbnail_ref
from .ranking import rank_assets, rank_catalog
from .selection import RejectReason, SelectionManager, SelectionResult, repair

__all__ = [
    "AssetCatalog",
    "CATEGORY_DIRS",
    "DEFAULT_RULES",
    "BlockedSubstrings",
    "CompatibilityRule",
    "FullyBlocked",
    "Unrestricted",
    "is_blocked",
    "is_category_disabled",
    "load_rules",
    "LAYER_ORDER",
    "compose_layers",
    "LevelRequirement",
    "newly_unlocked",
    "Category",
    "DiceAsset",
    "Selection",
    "display_name",
    "normalize_identifier",
    "thumbnail_ref",
    "rank_assets",
    "rank_catalog",
    "RejectReason",
    "SelectionManager",
    "SelectionResult",
    "repair",
]
