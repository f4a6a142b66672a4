"""CJ 연동 예외 계층"""
from typing import Optional, Dict, Any

from fastapi import HTTPException, status


class DropshippingError(Exception):
    """드랍싸핑 연동 기본 에러

    code: 공급사 응답 코드 또는 HTTP 상태 코드 (알 수 있는 경우)
    retryable: UI에서 "다시 시도" 버튼을 노출할지 여부
    """
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        retryable: Optional[bool] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        """직렬화용 딕셔너리"""
        return {
            "message": self.message,
            "type": self.__class__.__name__,
            "code": self.code,
            "retryable": self.retryable,
            "details": self.details
        }


class NotConfiguredError(DropshippingError):
    """인증 정보/토큰 미설정"""
    pass


class AuthenticationError(DropshippingError):
    """공급사 인증 거부"""
    pass


class RateLimitError(DropshippingError):
    """호출 제한 재시도 한도 초과"""
    retryable = True


class RequestTimeoutError(DropshippingError):
    """단일 호출 제한 시간 초과"""
    retryable = True


class NetworkError(DropshippingError):
    """전송 계층 오류 (재시도 한도 초과)"""
    retryable = True


class SchemaValidationError(DropshippingError):
    """알려진 응답 형식과 일치하지 않는 응답"""

    def __init__(self, message: str, raw_payload: Any = None, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)
        self.raw_payload = raw_payload


class ProviderAPIError(DropshippingError):
    """공급사가 실패 코드를 반환"""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message,
            code=code if code is not None else status_code,
            details=details,
            retryable=status_code is not None and status_code >= 500
        )
        self.status_code = status_code


class ProductNotFoundError(DropshippingError):
    """상품 조회 결과 없음"""
    pass


class InvalidProductReferenceError(DropshippingError):
    """URL/PID/SKU 형식 오류"""
    pass


class CredentialStorageError(DropshippingError):
    """설정 저장소/복호화 오류"""
    pass


class UpstreamPartialResultError(DropshippingError):
    """공급사가 일부 결과만 반환 (예외로 던지지 않고 결과에 첨부)"""

    def __init__(self, message: str, returned: int, total: int):
        super().__init__(message, details={"returned": returned, "total": total})
        self.returned = returned
        self.total = total


def create_http_exception(error: DropshippingError) -> HTTPException:
    """드랍싸핑 에러를 HTTP 예외로 변환"""

    # 에러 타입별 상태코드 매핑
    error_type_mapping = {
        NotConfiguredError: status.HTTP_412_PRECONDITION_FAILED,
        AuthenticationError: status.HTTP_401_UNAUTHORIZED,
        RateLimitError: status.HTTP_429_TOO_MANY_REQUESTS,
        RequestTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
        NetworkError: status.HTTP_503_SERVICE_UNAVAILABLE,
        SchemaValidationError: status.HTTP_502_BAD_GATEWAY,
        ProviderAPIError: status.HTTP_502_BAD_GATEWAY,
        ProductNotFoundError: status.HTTP_404_NOT_FOUND,
        InvalidProductReferenceError: status.HTTP_400_BAD_REQUEST,
    }

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped_status in error_type_mapping.items():
        if isinstance(error, error_type):
            status_code = mapped_status
            break

    return HTTPException(status_code=status_code, detail=error.to_dict())
