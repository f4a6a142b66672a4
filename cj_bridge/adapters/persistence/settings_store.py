"""설정 저장소 구현체 (읽기 캐시 포함)"""
from typing import Any, Dict, Optional, Tuple
import json

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from cj_bridge.adapters.persistence.models import Setting
from cj_bridge.core.exceptions import CredentialStorageError
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.core.ports.settings_port import SettingsStorePort
from cj_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class SqlSettingsStore(SettingsStorePort):
    """SQLAlchemy 기반 설정 저장소

    값은 JSON으로 직렬화해 저장한다. 동시 쓰기는 마지막 쓰기가 이긴다.
    """

    def __init__(self, session_factory: async_sessionmaker, clock: ClockPort, cache_ttl_seconds: float = 300.0):
        self.session_factory = session_factory
        self.clock = clock
        self.cache_ttl_seconds = cache_ttl_seconds
        self._cache: Dict[str, Tuple[Any, float]] = {}

    async def get(self, key: str) -> Optional[Any]:
        """설정 값 조회"""
        cached = self._cache.get(key)
        if cached and self.clock.monotonic() - cached[1] < self.cache_ttl_seconds:
            return cached[0]

        try:
            async with self.session_factory() as session:
                row = await session.get(Setting, key)
        except SQLAlchemyError as e:
            logger.error(f"설정 조회 실패: {key} - {e}")
            raise CredentialStorageError(f"설정 조회 실패: {key}") from e

        if row is None or row.value_json is None:
            return None

        try:
            value = json.loads(row.value_json)
        except ValueError as e:
            logger.error(f"설정 값 해석 실패: {key} - {e}")
            raise CredentialStorageError(f"설정 값 해석 실패: {key}") from e

        self._cache[key] = (value, self.clock.monotonic())
        return value

    async def set(self, key: str, value: Any) -> None:
        """설정 값 저장 (upsert)"""
        try:
            async with self.session_factory() as session:
                row = await session.get(Setting, key)
                if row:
                    row.value_json = json.dumps(value)
                else:
                    session.add(Setting(key=key, value_json=json.dumps(value)))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"설정 저장 실패: {key} - {e}")
            raise CredentialStorageError(f"설정 저장 실패: {key}") from e

        self.invalidate(key)

    async def delete(self, key: str) -> None:
        """설정 값 삭제"""
        try:
            async with self.session_factory() as session:
                await session.execute(delete(Setting).where(Setting.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"설정 삭제 실패: {key} - {e}")
            raise CredentialStorageError(f"설정 삭제 실패: {key}") from e

        self.invalidate(key)

    def invalidate(self, key: Optional[str] = None) -> None:
        """캐시 무효화"""
        if key:
            self._cache.pop(key, None)
        else:
            self._cache.clear()
