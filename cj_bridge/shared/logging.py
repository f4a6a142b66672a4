"""구조화된 로깅 유틸리티"""
import logging
import logging.config
from typing import Optional
import sys

from cj_bridge.shared.config import get_settings


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """로거 인스턴스 반환"""
    settings = get_settings()

    if not level:
        level = settings.log_level

    log_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': settings.log_format
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'stream': sys.stdout
            }
        },
        'loggers': {
            name: {
                'handlers': ['console'],
                'level': level,
                'propagate': False
            }
        }
    }

    logging.config.dictConfig(log_config)
    return logging.getLogger(name)


def mask_secret(value: Optional[str]) -> str:
    """API 키/토큰 마스킹 (앞뒤 4자리만 노출)"""
    if not value or len(value) <= 8:
        return "****"
    return f"{value[:4]}****{value[-4:]}"


def log_api_request(logger: logging.Logger, method: str, endpoint: str, status_code: int, duration: float):
    """API 요청 로그"""
    log_data = {
        'http_method': method,
        'endpoint': endpoint,
        'status_code': status_code,
        'duration_ms': duration * 1000
    }

    logger.info(f"API Request: {method} {endpoint} - {status_code}", extra=log_data)
