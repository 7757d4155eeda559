from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence, TypeVar

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import AuthError, OkulKocuError
from okulkocu.schemas.screens import ScreenResult
from okulkocu.schemas.school import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

RECENT_ABSENCE_DAYS = 7


def newest_first(records: Sequence[R]) -> List[R]:
    # tarihi olmayan kayıtlar sona
    return sorted(records, key=lambda r: getattr(r, "tarih", None) or "", reverse=True)


def is_recent(day: Optional[str], *, today: Optional[date] = None, days: int = RECENT_ABSENCE_DAYS) -> bool:
    if not day:
        return False
    try:
        d = date.fromisoformat(day[:10])
    except ValueError:
        return False
    return 0 <= ((today or date.today()) - d).days <= days


class StudentService:
    """Veli ekranları: ödev listesi ve devamsızlık geçmişi."""

    def __init__(self, client: SchoolClient) -> None:
        self.client = client

    async def _student(self, student_id: Optional[int], class_name: Optional[str]):
        if student_id is not None:
            return student_id, class_name or ""
        info = await self.client.fetch_user_info()
        return info.OgrenciId, info.Sinif or ""

    async def homework(self, student_id: Optional[int] = None, class_name: Optional[str] = None) -> ScreenResult:
        try:
            sid, sinif = await self._student(student_id, class_name)
            if sid is None:
                return ScreenResult.failed("Öğrenci bilgisi bulunamadı", data=[])
            items = await self.client.fetch_student_homework(sid, sinif)
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("homework list failed: %s", e)
            return ScreenResult.failed("Ödevler yüklenirken bir hata oluştu", data=[])

        today = date.today()
        return ScreenResult.ok([
            {**item.model_dump(), "overdue": item.is_overdue(today)} for item in newest_first(items)
        ])

    async def absences(self, student_id: Optional[int] = None) -> ScreenResult:
        try:
            sid, _ = await self._student(student_id, None)
            if sid is None:
                return ScreenResult.failed("Öğrenci bilgisi bulunamadı", data=[])
            records = await self.client.fetch_student_attendance(sid)
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("absence list failed: %s", e)
            return ScreenResult.failed("Devamsızlık bilgileri yüklenirken bir hata oluştu", data=[])

        today = date.today()
        return ScreenResult.ok([
            {**r.model_dump(), "recent": is_recent(r.tarih, today=today)} for r in newest_first(records)
        ])
