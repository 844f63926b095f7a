"""Dice customization API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.schemas import (
    AssetInfo,
    AssetsResponse,
    CategoryAssets,
    ConfigResponse,
    CounterResponse,
    ErrorResponse,
    LayersResponse,
    SaveConfigRequest,
    SelectRequest,
    SelectResponse,
    ShareInfo,
    ShareRequest,
    UnlockInfo,
    UnlocksResponse,
)
from src.config import settings
from src.core.dice.layers import compose_layers
from src.core.dice.models import Category, DiceAsset
from src.core.dice.naming import NONE_LABELS, display_name, thumbnail_ref
from src.core.dice.selection import SelectionManager
from src.core.logging import get_logger
from src.db.models import DiceShareModel
from src.services.dice_service import DiceService

logger = get_logger(__name__)

router = APIRouter(prefix="/dice", tags=["dice"])


def get_dice_service(request: Request) -> DiceService:
    """DiceService 인스턴스 반환 (의존성 주입)"""
    service: DiceService = request.app.state.dice_service
    return service


def _level(user_level: Optional[int]) -> int:
    return settings.DEFAULT_USER_LEVEL if user_level is None else user_level


def _build_asset_info(
    service: DiceService,
    category: Category,
    asset: DiceAsset,
    base: Optional[str],
) -> AssetInfo:
    return AssetInfo(
        id=asset.asset_id,
        name=asset.name,
        display_name=display_name(asset.name),
        src=asset.resource_ref,
        thumbnail=thumbnail_ref(asset.resource_ref, settings.ASSET_URL_PREFIX),
        locked=asset.locked,
        blocked=service.is_blocked(base, category, asset),
        required_level=asset.required_level,
        level_name=asset.level_name,
        description=asset.description,
    )


def _build_config_response(
    user_id: str,
    manager: SelectionManager,
    cleared: tuple[Category, ...] = (),
    updated_at: Optional[str] = None,
) -> ConfigResponse:
    return ConfigResponse(
        user_id=user_id,
        config=manager.to_payload(),
        layers=compose_layers(manager.selection),
        disabled_categories=[c.value for c in manager.disabled_categories()],
        cleared=[c.value for c in cleared],
        updated_at=updated_at,
    )


def _build_share_info(share: DiceShareModel) -> ShareInfo:
    return ShareInfo(
        share_id=share.share_id,
        user_id=share.user_id,
        title=share.title,
        config=share.config,
        layers=share.layers or [],
        upvotes=share.upvotes,
        downvotes=share.downvotes,
        created_at=share.created_at.isoformat(),
    )


@router.get("/assets", response_model=AssetsResponse)
def list_assets(
    user_level: Optional[int] = Query(None, ge=0),
    base: Optional[str] = Query(None, description="현재 선택된 dice resource_ref"),
    service: DiceService = Depends(get_dice_service),
) -> AssetsResponse:
    """
    카테고리별 에셋 목록

    user_level 기준 잠금, base 기준 차단 여부와 표시 순서를 포함합니다.
    """
    level = _level(user_level)
    ranked = service.get_assets(level)

    categories = [
        CategoryAssets(
            category=category.value,
            none_label=NONE_LABELS.get(category),
            disabled=service.is_category_disabled(base, category),
            assets=[
                _build_asset_info(service, category, asset, base)
                for asset in ranked.get(category, [])
            ],
        )
        for category in Category
    ]
    return AssetsResponse(user_level=level, categories=categories)


@router.get("/config/{user_id}", response_model=ConfigResponse)
def get_config(
    user_id: str,
    user_level: Optional[int] = Query(None, ge=0),
    service: DiceService = Depends(get_dice_service),
) -> ConfigResponse:
    """
    저장된 설정 조회

    현재 카탈로그와 호환성 규칙으로 정리된 상태를 반환합니다.
    """
    try:
        manager = service.open_session(user_id, _level(user_level))
        _, updated_at = service.load_config(user_id)
    except Exception as e:
        logger.error("Failed to load dice config: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return _build_config_response(
        user_id,
        manager,
        cleared=manager.restored_cleared,
        updated_at=updated_at.isoformat() if updated_at else None,
    )


@router.post("/config", response_model=ConfigResponse)
def save_config(
    request: SaveConfigRequest,
    service: DiceService = Depends(get_dice_service),
) -> ConfigResponse:
    """설정 전체 저장. 규칙 위반 항목은 비워진 채로 저장됩니다."""
    try:
        manager = service.save_config(
            request.user_id, _level(request.user_level), request.config
        )
    except Exception as e:
        logger.error("Failed to save dice config: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return _build_config_response(
        request.user_id, manager, cleared=manager.restored_cleared
    )


@router.post(
    "/select",
    response_model=SelectResponse,
    responses={400: {"model": ErrorResponse}},
)
def select_asset(
    request: SelectRequest,
    service: DiceService = Depends(get_dice_service),
) -> SelectResponse:
    """
    카테고리 하나 선택

    차단/잠금/카탈로그 누락이면 accepted=false와 reason을 반환합니다.
    """
    try:
        result, manager = service.apply_selection(
            request.user_id,
            _level(request.user_level),
            request.category,
            request.resource_ref,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SelectResponse(
        accepted=result.accepted,
        category=result.category.value,
        reason=result.reason.value if result.reason else None,
        cleared=[c.value for c in result.cleared],
        config=manager.to_payload(),
        layers=compose_layers(manager.selection),
    )


@router.get("/layers/{user_id}", response_model=LayersResponse)
def get_layers(
    user_id: str,
    user_level: Optional[int] = Query(None, ge=0),
    service: DiceService = Depends(get_dice_service),
) -> LayersResponse:
    """렌더링용 레이어 순서 (아래 → 위)."""
    manager = service.open_session(user_id, _level(user_level))
    return LayersResponse(user_id=user_id, layers=compose_layers(manager.selection))


@router.post("/share", response_model=ShareInfo)
def share_dice(
    request: ShareRequest,
    service: DiceService = Depends(get_dice_service),
) -> ShareInfo:
    """현재 설정을 갤러리에 공유."""
    try:
        share = service.share_config(
            request.user_id, _level(request.user_level), request.title
        )
    except Exception as e:
        logger.error("Failed to share dice: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return _build_share_info(share)


@router.get("/shares", response_model=list[ShareInfo])
def list_shares(
    limit: int = Query(20, ge=1, le=100),
    service: DiceService = Depends(get_dice_service),
) -> list[ShareInfo]:
    return [_build_share_info(s) for s in service.list_shares(limit)]


@router.get("/counter", response_model=CounterResponse)
def get_counter(service: DiceService = Depends(get_dice_service)) -> CounterResponse:
    return CounterResponse(counter=service.current_counter())


@router.post("/counter", response_model=CounterResponse)
def next_counter(service: DiceService = Depends(get_dice_service)) -> CounterResponse:
    """카운터 증가 후 다음 주사위 이름 반환."""
    value, name = service.next_dice_name()
    return CounterResponse(counter=value, dice_name=name)


@router.get("/unlocks", response_model=UnlocksResponse)
def get_unlocks(
    old_level: int = Query(..., ge=0),
    new_level: int = Query(..., ge=0),
    service: DiceService = Depends(get_dice_service),
) -> UnlocksResponse:
    """레벨업으로 새로 해금된 에셋."""
    unlocked = [
        UnlockInfo(
            category=category.value,
            asset=key,
            level=req.level,
            level_name=req.level_name,
            description=req.description,
        )
        for category, key, req in service.newly_unlocked(old_level, new_level)
    ]
    return UnlocksResponse(old_level=old_level, new_level=new_level, unlocked=unlocked)
