"""SQLAlchemy declarative base and dice persistence models."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class DiceConfigModel(Base):
    """사용자별 저장된 주사위 설정 (category → resource_ref | null)"""

    __tablename__ = "dice_configs"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    config: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class DiceShareModel(Base):
    """갤러리에 공유된 주사위"""

    __tablename__ = "dice_shares"

    share_id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False, default="My Dice")
    config: Mapped[dict] = mapped_column(JSON, nullable=False)
    layers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("idx_share_user", "user_id"),)


class DiceCounterModel(Base):
    """공유 주사위 일련번호 ("Dice 000001")"""

    __tablename__ = "dice_counters"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
