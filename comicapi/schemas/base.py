from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """camelCase JSON 입출력 베이스 (snake_case 입력도 허용)"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """모든 응답에 공통으로 쓰이는 envelope"""

    status_code: int = 200
    message: str = "Success"
    data: Optional[T] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 400

    @classmethod
    def of(
        cls, data: Optional[T] = None, status_code: int = 200, message: str = "Success"
    ) -> "ApiResponse[T]":
        return cls(data=data, status_code=status_code, message=message)


def envelope(status_code: int, message: str, data=None) -> dict:
    """예외 핸들러용 dict envelope"""
    return {
        "success": 200 <= status_code < 400,
        "statusCode": status_code,
        "message": message,
        "data": data,
    }
