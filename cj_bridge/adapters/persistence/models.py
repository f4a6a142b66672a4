"""SQLAlchemy 모델 (설정 저장소)"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from cj_bridge.shared.config import get_settings

settings = get_settings()


# 데이터베이스 모델 베이스
class Base(DeclarativeBase):
    pass


# 설정 테이블 (key -> JSON 문자열)
class Setting(Base):
    __tablename__ = "settings"

    key = Column(String, primary_key=True, index=True)
    value_json = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


def create_engine_for(database_url: str = None) -> AsyncEngine:
    """비동기 엔진 생성"""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.log_level == "DEBUG"
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """세션 팩토리 생성"""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """테이블 생성"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
