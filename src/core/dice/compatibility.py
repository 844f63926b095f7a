"""호환성 규칙 엔진: Base(주사위) 선택에 따른 카테고리/아이템 차단 판정

규칙 테이블은 정규화된 Base 식별자 → CompatibilityRule.
규칙이 없는 식별자는 제한 없음 (에러 아님).

카테고리 정책은 태그드 유니온:
- Unrestricted: 차단 없음
- BlockedSubstrings: 소문자 이름에 부분 문자열이 포함되면 차단
- FullyBlocked: 카테고리 전체 차단
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from .models import Category, DiceAsset
from .naming import normalize_identifier

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class Unrestricted:
    def blocks(self, asset_name: str) -> bool:
        return False


@dataclass(frozen=True)
class BlockedSubstrings:
    substrings: tuple[str, ...]

    def blocks(self, asset_name: str) -> bool:
        # TODO: 전체 정규화 식별자 일치로 좁힐지 결정 필요 ("belt"가 "seatbelt"도 차단)
        lowered = asset_name.lower()
        return any(s in lowered for s in self.substrings)


@dataclass(frozen=True)
class FullyBlocked:
    def blocks(self, asset_name: str) -> bool:
        return True


BlockPolicy = Union[Unrestricted, BlockedSubstrings, FullyBlocked]

UNRESTRICTED = Unrestricted()
FULLY_BLOCKED = FullyBlocked()


def policy_from_list(entries: Sequence[str]) -> BlockPolicy:
    """레거시 리스트 표기 → 정책.

    [] → Unrestricted, ["*"] (또는 "*" 포함) → FullyBlocked,
    그 외 → BlockedSubstrings (소문자화)
    """
    if not entries:
        return UNRESTRICTED
    if WILDCARD in entries:
        return FULLY_BLOCKED
    return BlockedSubstrings(tuple(e.lower() for e in entries if e))


def policy_to_list(policy: BlockPolicy) -> list[str]:
    """정책 → 레거시 리스트 표기 (직렬화용)."""
    if isinstance(policy, FullyBlocked):
        return [WILDCARD]
    if isinstance(policy, BlockedSubstrings):
        return list(policy.substrings)
    return []


@dataclass(frozen=True)
class CompatibilityRule:
    """Base 하나에 대한 제한."""

    patterns_allowed: bool = True
    accessories: BlockPolicy = UNRESTRICTED
    hats: BlockPolicy = UNRESTRICTED

    def policy_for(self, category: Category) -> Optional[BlockPolicy]:
        """Accessory/Hat 정책. 그 외 카테고리는 None."""
        if category == Category.ACCESSORY:
            return self.accessories
        if category == Category.HAT:
            return self.hats
        return None


RuleTable = Mapping[str, CompatibilityRule]

DEFAULT_RULES: dict[str, CompatibilityRule] = {
    "box": CompatibilityRule(patterns_allowed=False),
    "dice-skull": CompatibilityRule(
        patterns_allowed=False,
        accessories=BlockedSubstrings(("belt",)),
    ),
    "gift": CompatibilityRule(patterns_allowed=False, hats=FULLY_BLOCKED),
    "icecube": CompatibilityRule(
        patterns_allowed=False,
        accessories=FULLY_BLOCKED,
        hats=FULLY_BLOCKED,
    ),
    "rubik": CompatibilityRule(patterns_allowed=False),
    "safe": CompatibilityRule(
        patterns_allowed=False,
        accessories=BlockedSubstrings(("blush",)),
    ),
}


def _base_ref(base: DiceAsset | str | None) -> Optional[str]:
    if base is None:
        return None
    if isinstance(base, DiceAsset):
        return base.resource_ref
    return base or None


def rule_for(
    base: DiceAsset | str | None, rules: RuleTable = DEFAULT_RULES
) -> Optional[CompatibilityRule]:
    """현재 Base에 적용되는 규칙. 없으면 None (제한 없음)."""
    ref = _base_ref(base)
    if ref is None:
        return None
    return rules.get(normalize_identifier(ref, Category.BASE))


def is_blocked(
    base: DiceAsset | str | None,
    category: Category,
    asset: DiceAsset,
    rules: RuleTable = DEFAULT_RULES,
) -> bool:
    """base 선택 하에서 asset이 차단되는지. 상태 없음, 읽기 전용."""
    rule = rule_for(base, rules)
    if rule is None:
        return False

    if category == Category.PATTERN:
        return not rule.patterns_allowed

    policy = rule.policy_for(category)
    if policy is None:
        return False
    return policy.blocks(asset.name)


def is_category_disabled(
    base: DiceAsset | str | None,
    category: Category,
    rules: RuleTable = DEFAULT_RULES,
) -> bool:
    """카테고리 탭 전체 비활성 여부 (패턴 불허 또는 FullyBlocked)."""
    rule = rule_for(base, rules)
    if rule is None:
        return False
    if category == Category.PATTERN:
        return not rule.patterns_allowed
    return isinstance(rule.policy_for(category), FullyBlocked)


def rules_from_dict(raw: Mapping[str, Mapping]) -> dict[str, CompatibilityRule]:
    """레거시 JSON 구조 → 규칙 테이블.

    {"box": {"patterns": false, "accessories": [], "hats": ["*"]}, ...}
    키는 소문자화. 형식 오류 항목은 경고 후 건너뛴다.
    """
    rules: dict[str, CompatibilityRule] = {}
    for key, entry in raw.items():
        try:
            accessories = entry.get("accessories", [])
            hats = entry.get("hats", [])
            if not isinstance(accessories, list) or not isinstance(hats, list):
                raise ValueError("accessories/hats must be lists")
            rules[key.lower()] = CompatibilityRule(
                patterns_allowed=bool(entry.get("patterns", True)),
                accessories=policy_from_list([str(a) for a in accessories]),
                hats=policy_from_list([str(h) for h in hats]),
            )
        except (AttributeError, ValueError) as e:
            logger.warning("Skipping compatibility rule %s: %s", key, e)
    return rules


def rules_to_dict(rules: RuleTable) -> dict[str, dict]:
    """규칙 테이블 → 레거시 JSON 구조."""
    return {
        key: {
            "patterns": rule.patterns_allowed,
            "accessories": policy_to_list(rule.accessories),
            "hats": policy_to_list(rule.hats),
        }
        for key, rule in rules.items()
    }


def load_rules(path: str | Path) -> dict[str, CompatibilityRule]:
    """JSON 파일에서 규칙 테이블 로드."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw: dict = json.load(f)

    rules = rules_from_dict(raw)
    logger.info("Loaded %d compatibility rules from %s", len(rules), path)
    return rules
