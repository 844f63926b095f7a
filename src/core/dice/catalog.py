"""에셋 카탈로그: 카테고리별 SVG 파일 목록 + 사용자 레벨별 잠금 표시

파일 목록은 JSON manifest 또는 디렉터리 스캔으로 채운다.
Title은 파일이 아닌 TITLE_NAMES에서 생성.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping
from urllib.parse import quote

from .levels import get_level_requirement, is_locked_for
from .models import Category, DiceAsset
from .naming import asset_key, title_case_name

logger = logging.getLogger(__name__)

SVG_SUFFIX = ".svg"

CATEGORY_DIRS: dict[Category, str] = {
    Category.BACKGROUND: "Backgrounds",
    Category.BASE: "Dice",
    Category.PATTERN: "Patterns",
    Category.ACCESSORY: "Accessories",
    Category.HAT: "Crowns & Hats",
    Category.ITEM: "Items",
    Category.COMPANION: "Companions",
    Category.TITLE: "Titles",
}

TITLE_NAMES: tuple[str, ...] = (
    "Commoner",
    "Squire",
    "Knight",
    "Champion",
    "Baron",
    "Baroness",
    "Lord",
    "Lady",
    "Archmage",
    "Duke",
    "Duchess",
    "Prince",
    "Princess",
    "King",
    "Queen",
)


class AssetCatalog:
    """
    에셋 파일 저장소.
    build(user_level)로 카테고리별 DiceAsset 목록을 만든다.
    """

    def __init__(self, url_prefix: str = "/dice") -> None:
        self._url_prefix = url_prefix.rstrip("/")
        self._files: dict[Category, list[str]] = {
            c: [] for c in Category if c != Category.TITLE
        }

    def load_from_json(self, path: str | Path) -> int:
        """manifest 로드. {"background": ["WhiteBackground.svg", ...], ...}

        반환: 등록된 파일 수. 알 수 없는 카테고리는 경고 후 건너뜀.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw: dict[str, list[str]] = json.load(f)

        count = 0
        for key, filenames in raw.items():
            try:
                category = Category(key)
            except ValueError:
                logger.warning("Unknown category in manifest: %s", key)
                continue
            count += self.register_many(category, filenames)

        logger.info("Loaded %d asset files from %s", count, path)
        return count

    def scan_directory(self, root: str | Path) -> int:
        """root/<카테고리 디렉터리>/*.svg 스캔. 없는 디렉터리는 빈 목록."""
        root = Path(root)
        count = 0
        for category, dirname in CATEGORY_DIRS.items():
            if category == Category.TITLE:
                continue
            directory = root / dirname
            if not directory.is_dir():
                logger.debug("Asset directory missing: %s", directory)
                continue
            filenames = sorted(
                p.name
                for p in directory.iterdir()
                if p.is_file() and p.suffix.lower() == SVG_SUFFIX
            )
            count += self.register_many(category, filenames)

        logger.info("Scanned %d asset files under %s", count, root)
        return count

    def register_many(self, category: Category, filenames: list[str]) -> int:
        category = Category(category)
        if category == Category.TITLE:
            logger.warning("Titles are generated, ignoring %d files", len(filenames))
            return 0
        count = 0
        for filename in filenames:
            if not filename.lower().endswith(SVG_SUFFIX):
                logger.warning("Skipping non-SVG asset: %s", filename)
                continue
            if filename in self._files[category]:
                continue
            self._files[category].append(filename)
            count += 1
        return count

    def count(self) -> int:
        """등록된 파일 수 + 생성 Title 수."""
        return sum(len(f) for f in self._files.values()) + len(TITLE_NAMES)

    def resource_ref(self, category: Category, filename: str) -> str:
        dirname = CATEGORY_DIRS[Category(category)]
        return f"{self._url_prefix}/{quote(dirname)}/{quote(filename)}"

    def build(self, user_level: int) -> dict[Category, list[DiceAsset]]:
        """user_level 기준 잠금 표시된 카테고리별 에셋 (정렬 전)."""
        catalog: dict[Category, list[DiceAsset]] = {}
        for category, filenames in self._files.items():
            catalog[category] = [
                self._make_asset(category, filename, user_level)
                for filename in filenames
            ]
        catalog[Category.TITLE] = [
            self._make_title(title, user_level) for title in TITLE_NAMES
        ]
        return catalog

    def _make_asset(
        self, category: Category, filename: str, user_level: int
    ) -> DiceAsset:
        key = asset_key(filename)
        requirement = get_level_requirement(category, key)
        return DiceAsset(
            asset_id=f"{CATEGORY_DIRS[category]}-{filename}",
            name=title_case_name(key),
            resource_ref=self.resource_ref(category, filename),
            locked=is_locked_for(user_level, requirement),
            required_level=requirement.level if requirement else None,
            level_name=requirement.level_name if requirement else "",
            description=requirement.description if requirement else "",
        )

    def _make_title(self, title: str, user_level: int) -> DiceAsset:
        requirement = get_level_requirement(Category.TITLE, title)
        return DiceAsset(
            asset_id=f"title-{title}",
            name=title,
            resource_ref=f"{self._url_prefix}/Titles/{title}.svg",
            locked=is_locked_for(user_level, requirement),
            required_level=requirement.level if requirement else None,
            level_name=requirement.level_name if requirement else "",
            description=requirement.description if requirement else "",
        )


def catalog_from_mapping(
    files: Mapping[Category, list[str]], user_level: int, url_prefix: str = "/dice"
) -> dict[Category, list[DiceAsset]]:
    """테스트/스크립트용: 파일 목록 dict에서 바로 카탈로그 생성."""
    catalog = AssetCatalog(url_prefix=url_prefix)
    for category, filenames in files.items():
        catalog.register_many(category, filenames)
    return catalog.build(user_level)
