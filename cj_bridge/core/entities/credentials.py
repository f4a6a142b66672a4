"""인증 정보 / 토큰 도메인 엔티티"""
from dataclasses import dataclass
from typing import Optional
from datetime import datetime, timedelta
from enum import Enum


class TokenStatus(Enum):
    """토큰 상태 (조회 시점에 계산)"""
    NO_TOKEN = "no_token"
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"

    def needs_renewal(self) -> bool:
        return self is not TokenStatus.VALID


@dataclass(frozen=True)
class Credentials:
    """CJ API 인증 정보"""
    api_key: str
    account_email: str


@dataclass(frozen=True)
class TokenState:
    """저장된 토큰 상태

    expires_at은 항상 timezone-aware(UTC) datetime.
    """
    access_token: Optional[str]
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def status(self, now: datetime, buffer_hours: int = 1) -> TokenStatus:
        """토큰 상태 계산 (만료 buffer_hours 전부터 갱신 대상)"""
        if not self.access_token:
            return TokenStatus.NO_TOKEN
        if not self.expires_at or self.expires_at <= now:
            return TokenStatus.EXPIRED
        if self.expires_at <= now + timedelta(hours=buffer_hours):
            return TokenStatus.EXPIRING_SOON
        return TokenStatus.VALID


@dataclass(frozen=True)
class IssuedToken:
    """공급사가 발급한 토큰"""
    access_token: str
    refresh_token: Optional[str] = None
    access_token_expires_at: Optional[str] = None  # 공급사 ISO 문자열 그대로
    refresh_token_expires_at: Optional[str] = None
    open_id: Optional[str] = None
