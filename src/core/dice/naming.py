"""에셋 이름 처리: 식별자 정규화, 표시명, 썸네일 경로"""

from __future__ import annotations

import re
from urllib.parse import unquote

from .models import Category

THUMBNAIL_SUFFIX = "thumbnail"
BASE_SUFFIX = "dice"

# 소유격 등 자동 변환으로 만들 수 없는 표시명 (소문자 키 → 표시명)
DISPLAY_NAME_EXCEPTIONS: dict[str, str] = {
    "kings crown": "King's Crown",
    "princes crown": "Prince's Crown",
    "queens crown": "Queen's Crown",
    "kings cape": "King's Cape",
    "kings room": "King's Room",
    "kings card": "King's Card",
}

# "선택 안 함" 옵션 라벨
NONE_LABELS: dict[Category, str] = {
    Category.PATTERN: "No Pattern",
    Category.ACCESSORY: "No Accessory",
    Category.HAT: "Nothing",
    Category.ITEM: "No Item",
    Category.COMPANION: "No Companion",
    Category.TITLE: "No Title",
}

_SEPARATORS = re.compile(r"[-_]+")
_WHITESPACE = re.compile(r"\s+")
_WORD_START = re.compile(r"\b\w")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def _strip_suffix(value: str, suffix: str) -> str:
    """대소문자 무시하고 끝의 suffix 제거."""
    if value.lower().endswith(suffix):
        return value[: -len(suffix)]
    return value


def _split_extension(filename: str) -> tuple[str, str]:
    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


def normalize_identifier(resource_ref: str, category: Category = Category.BASE) -> str:
    """resource_ref → 호환성 규칙 조회 키.

    마지막 경로 조각 → 확장자 제거 → "thumbnail" 제거
    → (Base만) "Dice" 제거 → 소문자.
    "/dice/Dice/Dice-SkullDice.svg" → "dice-skull"
    """
    segment = unquote(resource_ref.rsplit("/", 1)[-1])
    stem, _ = _split_extension(segment)
    stem = _strip_suffix(stem, THUMBNAIL_SUFFIX)
    if category == Category.BASE:
        stem = _strip_suffix(stem, BASE_SUFFIX)
    return stem.lower()


def asset_key(filename: str) -> str:
    """레벨 테이블 조회 키: 확장자만 제거한 파일명."""
    return _split_extension(filename)[0]


def title_case_name(stem: str) -> str:
    """카탈로그 원본 이름. "Dice-Skull" → "Dice Skull", "mini_dice" → "Mini Dice"."""
    spaced = _WHITESPACE.sub(" ", _SEPARATORS.sub(" ", stem)).strip()
    return _WORD_START.sub(lambda m: m.group(0).upper(), spaced)


def clean_name(name: str) -> str:
    """정렬용 이름: 소문자 + "thumbnail" 제거."""
    return name.lower().replace(THUMBNAIL_SUFFIX, "")


def display_name(name: str) -> str:
    """사용자 표시명.

    1. 끝의 "thumbnail" 제거
    2. "Background" 제거
    3. dice+skull 조합은 "Dice-Skull", 그 외 "Dice" 제거
    4. camelCase 분리
    5. DISPLAY_NAME_EXCEPTIONS 적용
    """
    result = _strip_suffix(name, THUMBNAIL_SUFFIX)

    if "background" in result.lower():
        result = re.sub("background", "", result, flags=re.IGNORECASE).strip()

    lowered = result.lower()
    if "dice" in lowered and "skull" in lowered:
        result = "Dice-Skull"
    elif "dice" in lowered:
        result = re.sub("dice", "", result, flags=re.IGNORECASE).strip()

    result = _CAMEL_BOUNDARY.sub(r"\1 \2", result)

    return DISPLAY_NAME_EXCEPTIONS.get(result.lower(), result)


def thumbnail_ref(resource_ref: str, url_prefix: str = "/dice") -> str:
    """썸네일 경로. 확장자가 없으면 원본 그대로."""
    filename = resource_ref.rsplit("/", 1)[-1]
    stem, ext = _split_extension(filename)
    if not ext:
        return resource_ref
    return f"{url_prefix}/Thumbnails/{stem}{THUMBNAIL_SUFFIX}{ext}"
