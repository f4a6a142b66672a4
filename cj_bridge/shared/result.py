"""Result/Either 모나드 패턴"""
from typing import TypeVar, Generic, Union, Any
from dataclasses import dataclass

T = TypeVar('T')


@dataclass
class Success(Generic[T]):
    """성공 결과"""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def get_value(self) -> T:
        return self.value

    def get_error(self) -> None:
        return None


@dataclass
class Failure(Generic[T]):
    """실패 결과

    value에는 실패 원인이 된 원본 데이터(예: 스키마 검증에 실패한 응답)를 담는다.
    """
    error: str
    value: Any = None

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def get_value(self) -> Any:
        return self.value

    def get_error(self) -> str:
        return self.error


# Union type for type hints
Result = Union[Success[T], Failure[T]]


