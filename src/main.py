"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.dice import router as dice_router
from src.api.health import router as health_router
from src.config import settings
from src.core.dice.catalog import AssetCatalog
from src.core.dice.compatibility import DEFAULT_RULES, load_rules
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, engine as db_engine
from src.db.models import Base
from src.services.dice_service import DiceService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def _load_rules():
    """규칙 파일이 없으면 내장 기본 규칙 사용."""
    path = Path(settings.COMPATIBILITY_RULES_PATH)
    if not path.exists():
        logger.warning("Rules file %s not found, using built-in rules", path)
        return DEFAULT_RULES
    return load_rules(path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    # 카탈로그 + 호환성 규칙
    logger.info("Loading dice asset catalog...")
    catalog = AssetCatalog(url_prefix=settings.ASSET_URL_PREFIX)
    catalog.load_from_json(settings.ASSET_MANIFEST_PATH)
    rules = _load_rules()

    # DiceService 초기화
    event_bus = EventBus()
    db_session = SessionLocal()
    dice_service = DiceService(
        db=db_session,
        event_bus=event_bus,
        catalog=catalog,
        rules=rules,
    )
    app.state.dice_service = dice_service
    app.state.event_bus = event_bus
    logger.info(
        "DiceService initialized (%d assets, %d rules).", catalog.count(), len(rules)
    )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Dice Forge", lifespan=lifespan)

app.include_router(health_router)
app.include_router(dice_router)
