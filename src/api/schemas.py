"""API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class SaveConfigRequest(BaseModel):
    """주사위 설정 전체 저장 요청"""

    user_id: str = Field(..., min_length=1, max_length=50, description="사용자 ID")
    user_level: Optional[int] = Field(None, ge=0, description="사용자 레벨")
    config: dict[str, Optional[str]] = Field(
        ..., description="category → resource_ref (null = 선택 안 함)"
    )


class SelectRequest(BaseModel):
    """카테고리 하나 선택 요청"""

    user_id: str = Field(..., min_length=1, max_length=50, description="사용자 ID")
    user_level: Optional[int] = Field(None, ge=0, description="사용자 레벨")
    category: str = Field(..., description="background, dice, pattern, ...")
    resource_ref: Optional[str] = Field(None, description="null이면 선택 해제")


class ShareRequest(BaseModel):
    """갤러리 공유 요청"""

    user_id: str = Field(..., min_length=1, max_length=50, description="사용자 ID")
    user_level: Optional[int] = Field(None, ge=0, description="사용자 레벨")
    title: Optional[str] = Field(None, max_length=100, description="공유 제목")


# === Response Schemas ===


class AssetInfo(BaseModel):
    """에셋 한 개"""

    id: str
    name: str
    display_name: str
    src: str
    thumbnail: str
    locked: bool
    blocked: bool = False
    required_level: Optional[int] = None
    level_name: str = ""
    description: str = ""


class CategoryAssets(BaseModel):
    """카테고리별 정렬된 에셋"""

    category: str
    none_label: Optional[str] = None
    disabled: bool = False
    assets: list[AssetInfo] = []


class AssetsResponse(BaseModel):
    """카탈로그 응답"""

    user_level: int
    categories: list[CategoryAssets]


class ConfigResponse(BaseModel):
    """설정 + 레이어"""

    user_id: str
    config: dict[str, Optional[str]]
    layers: list[str] = []
    disabled_categories: list[str] = []
    cleared: list[str] = []
    updated_at: Optional[str] = None


class SelectResponse(BaseModel):
    """선택 결과. 거절이어도 200."""

    accepted: bool
    category: str
    reason: Optional[str] = None
    cleared: list[str] = []
    config: dict[str, Optional[str]]
    layers: list[str] = []


class LayersResponse(BaseModel):
    user_id: str
    layers: list[str]


class ShareInfo(BaseModel):
    """공유 항목"""

    share_id: str
    user_id: str
    title: str
    config: dict[str, Optional[str]]
    layers: list[str] = []
    upvotes: int = 0
    downvotes: int = 0
    created_at: str


class CounterResponse(BaseModel):
    counter: int
    dice_name: Optional[str] = None


class UnlockInfo(BaseModel):
    category: str
    asset: str
    level: int
    level_name: str
    description: str = ""


class UnlocksResponse(BaseModel):
    old_level: int
    new_level: int
    unlocked: list[UnlockInfo] = []


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
