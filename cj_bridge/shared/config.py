"""애플리케이션 설정"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field
import os


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 데이터베이스 (설정 저장소)
    database_url: str = Field(default="sqlite+aiosqlite:///./cj_bridge.db")

    # 로깅
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # API 설정
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=False)

    # 암호화 / 설정 캐시
    encryption_key: str = Field(default="default-dev-key-change-in-production")
    settings_cache_ttl_seconds: float = Field(default=300.0)

    # CJ Dropshipping API
    cj_api_base_url: str = Field(default="https://developers.cjdropshipping.com/api2.0/v1")
    cj_request_timeout_seconds: float = Field(default=10.0)
    cj_min_request_interval_ms: int = Field(default=200)  # 5 req/s
    cj_max_attempts: int = Field(default=3)
    cj_retry_base_delay_seconds: float = Field(default=1.0)
    cj_network_max_retries: int = Field(default=3)

    # 토큰 갱신 설정
    token_refresh_buffer_hours: int = Field(default=1)
    token_default_lifetime_days: int = Field(default=15)

    # 도메인 기본값
    cj_my_products_page_size: int = Field(default=100)
    cj_freight_origin_country: str = Field(default="CN")
    cj_freight_destinations: List[str] = Field(default_factory=lambda: ["CA", "US", "GB"])

    class Config:
        # .env 파일이 있는 경우에만 읽기
        env_file = ".env" if os.path.exists(".env") else None
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()


def get_settings() -> Settings:
    """설정 인스턴스 반환"""
    return settings
