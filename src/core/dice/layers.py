"""레이어 합성 순서: Selection → 렌더링용 resource_ref 목록"""

from .models import Category, Selection

# 아래 → 위. Title은 헤더에만 표시되는 메타데이터라 제외.
LAYER_ORDER: tuple[Category, ...] = (
    Category.BACKGROUND,
    Category.BASE,
    Category.PATTERN,
    Category.ACCESSORY,
    Category.HAT,
    Category.ITEM,
    Category.COMPANION,
)


def compose_layers(selection: Selection) -> list[str]:
    """선택된 카테고리만 순서대로. 빈 선택이면 [].

    호환성 규칙은 다시 검사하지 않는다 (repair된 입력 전제).
    Pattern은 Base 면 위에 그려지므로 Base가 없으면 내보내지 않는다.
    """
    has_base = selection[Category.BASE] is not None
    layers: list[str] = []
    for category in LAYER_ORDER:
        asset = selection[category]
        if asset is None:
            continue
        if category == Category.PATTERN and not has_base:
            continue
        layers.append(asset.resource_ref)
    return layers
