"""설정 저장소 / 암호화 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class SettingsStorePort(ABC):
    """키/값 설정 저장소 인터페이스 (읽기 캐시 포함)"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """설정 값 조회 (없으면 None)"""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """설정 값 저장 (upsert)"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """설정 값 삭제 (없는 키도 오류 아님)"""
        pass

    @abstractmethod
    def invalidate(self, key: Optional[str] = None) -> None:
        """캐시 무효화 (key가 없으면 전체)"""
        pass


class EncryptorPort(ABC):
    """민감 값 암호화 인터페이스"""

    @abstractmethod
    def encrypt(self, plain_text: str) -> str:
        pass

    @abstractmethod
    def decrypt(self, cipher_text: str) -> str:
        pass
