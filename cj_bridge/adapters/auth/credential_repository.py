"""CJ 인증 정보 / 토큰 저장소"""
from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone

from cj_bridge.core.entities.credentials import Credentials, TokenState
from cj_bridge.core.ports.clock_port import ClockPort
from cj_bridge.core.ports.settings_port import EncryptorPort, SettingsStorePort
from cj_bridge.shared.logging import get_logger, mask_secret

logger = get_logger(__name__)


class CJSettingsKeys:
    """CJ 설정 키"""
    API_KEY = "cj_api_key"
    ACCOUNT_EMAIL = "cj_account_email"
    ACCESS_TOKEN = "cj_access_token"
    REFRESH_TOKEN = "cj_refresh_token"
    TOKEN_EXPIRES_AT = "cj_token_expires_at"

    ALL = (API_KEY, ACCOUNT_EMAIL, ACCESS_TOKEN, REFRESH_TOKEN, TOKEN_EXPIRES_AT)


def parse_expiry(value: str) -> datetime:
    """공급사 ISO 날짜 문자열을 UTC datetime으로 변환

    예: "2025-11-19T07:19:23+08:00", "2025-11-19T07:19:23Z"
    오프셋이 없으면 UTC로 간주한다.
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class CredentialRepository:
    """인증 정보와 토큰을 설정 저장소에 읽고 쓴다

    API 키와 토큰은 암호화, 계정 이메일과 만료 시각은 평문으로 저장.
    """

    def __init__(
        self,
        store: SettingsStorePort,
        encryptor: EncryptorPort,
        clock: ClockPort,
        default_lifetime_days: int = 15
    ):
        self.store = store
        self.encryptor = encryptor
        self.clock = clock
        self.default_lifetime_days = default_lifetime_days

    async def get_credentials(self) -> Optional[Credentials]:
        """인증 정보 조회 (미설정이면 None)"""
        api_key_encrypted = await self.store.get(CJSettingsKeys.API_KEY)
        account_email = await self.store.get(CJSettingsKeys.ACCOUNT_EMAIL)

        if not api_key_encrypted or not account_email:
            return None

        return Credentials(
            api_key=self.encryptor.decrypt(api_key_encrypted),
            account_email=account_email
        )

    async def has_credentials(self) -> bool:
        return await self.get_credentials() is not None

    async def save_credentials(self, api_key: str, account_email: str) -> None:
        """인증 정보 저장"""
        await self.store.set(CJSettingsKeys.API_KEY, self.encryptor.encrypt(api_key))
        await self.store.set(CJSettingsKeys.ACCOUNT_EMAIL, account_email)

        self.store.invalidate(CJSettingsKeys.API_KEY)
        self.store.invalidate(CJSettingsKeys.ACCOUNT_EMAIL)

        logger.info(f"CJ 인증 정보 저장 완료: {account_email} ({mask_secret(api_key)})")

    async def clear_credentials(self) -> None:
        """인증 정보와 토큰 전체 삭제 (없는 키 삭제도 성공)"""
        for key in CJSettingsKeys.ALL:
            await self.store.delete(key)

        self.store.invalidate()
        logger.info("CJ 인증 정보 및 토큰 삭제 완료")

    async def load_token_state(self) -> Optional[TokenState]:
        """저장된 토큰 상태 조회"""
        access_encrypted = await self.store.get(CJSettingsKeys.ACCESS_TOKEN)
        refresh_encrypted = await self.store.get(CJSettingsKeys.REFRESH_TOKEN)
        expires_at_raw = await self.store.get(CJSettingsKeys.TOKEN_EXPIRES_AT)

        if not access_encrypted and not refresh_encrypted:
            return None

        expires_at = None
        if expires_at_raw:
            try:
                expires_at = parse_expiry(expires_at_raw)
            except ValueError:
                # 알 수 없는 형식은 만료로 취급
                logger.warning(f"토큰 만료 시각 형식 오류: {expires_at_raw}")

        return TokenState(
            access_token=self.encryptor.decrypt(access_encrypted) if access_encrypted else None,
            refresh_token=self.encryptor.decrypt(refresh_encrypted) if refresh_encrypted else None,
            expires_at=expires_at
        )

    async def save_tokens(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_at_iso: Optional[str] = None
    ) -> TokenState:
        """토큰 저장 (이전 토큰을 덮어씀)

        만료 시각이 없으면 공급사 기본값(기본 15일)을 사용한다.
        """
        expires_at = None
        if expires_at_iso:
            try:
                expires_at = parse_expiry(expires_at_iso)
            except ValueError:
                logger.warning(f"공급사 만료 시각 형식 오류, 기본값 사용: {expires_at_iso}")
        if expires_at is None:
            expires_at = self.clock.now() + timedelta(days=self.default_lifetime_days)

        await self.store.set(CJSettingsKeys.ACCESS_TOKEN, self.encryptor.encrypt(access_token))
        await self.store.set(CJSettingsKeys.TOKEN_EXPIRES_AT, expires_at.isoformat())
        if refresh_token:
            await self.store.set(CJSettingsKeys.REFRESH_TOKEN, self.encryptor.encrypt(refresh_token))
            self.store.invalidate(CJSettingsKeys.REFRESH_TOKEN)

        self.store.invalidate(CJSettingsKeys.ACCESS_TOKEN)
        self.store.invalidate(CJSettingsKeys.TOKEN_EXPIRES_AT)

        logger.info(f"CJ 토큰 저장 완료 (만료: {expires_at.isoformat()})")

        if refresh_token is None:
            previous = await self.store.get(CJSettingsKeys.REFRESH_TOKEN)
            refresh_token = self.encryptor.decrypt(previous) if previous else None

        return TokenState(access_token=access_token, refresh_token=refresh_token, expires_at=expires_at)

    async def describe(self) -> Dict[str, Any]:
        """상태 화면용 요약 (비밀 값은 마스킹)"""
        credentials = await self.get_credentials()
        token_state = await self.load_token_state()

        return {
            "configured": credentials is not None,
            "account_email": credentials.account_email if credentials else None,
            "api_key": mask_secret(credentials.api_key) if credentials else None,
            "has_access_token": bool(token_state and token_state.access_token),
            "token_expires_at": token_state.expires_at.isoformat() if token_state and token_state.expires_at else None
        }
