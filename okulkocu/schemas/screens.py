# okulkocu/schemas/screens.py
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ScreenResult(BaseModel, Generic[T]):
    """
    Bir ekranın görüntü durumu.

    error doluysa veri alınamamıştır; placeholder=True ise data demo kaydıdır
    (yalnızca OKUL_DEMO_FALLBACK açıkken).
    """
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    placeholder: bool = False

    @classmethod
    def ok(cls, data: Any) -> "ScreenResult":
        return cls(data=data)

    @classmethod
    def failed(cls, error: str, data: Any = None) -> "ScreenResult":
        return cls(success=False, error=error, data=data)


class TeacherPage(BaseModel):
    items: List[dict]
    page: int
    hasMore: bool


class MarkResult(BaseModel):
    studentId: int
    status: int
    row: dict
