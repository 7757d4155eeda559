from __future__ import annotations

import logging
from typing import List, Optional

from okulkocu.clients.school_client import TEACHERS_PAGE_SIZE, SchoolClient
from okulkocu.core.errors import AuthError, OkulKocuError
from okulkocu.schemas.screens import ScreenResult, TeacherPage
from okulkocu.schemas.school import StudentRecord
from okulkocu.services.dashboard_service import with_photo

logger = logging.getLogger(__name__)


def _matches(student: StudentRecord, query: str) -> bool:
    q = query.casefold()
    return any(
        q in (value or "").casefold()
        for value in (student.AdSoyad, student.OgrenciNumara, student.Sinif)
    )


class DirectoryService:
    """Öğrenci ve öğretmen listeleri; hata durumunda yeniden denenebilir hata döner."""

    def __init__(self, client: SchoolClient) -> None:
        self.client = client

    async def students(self, query: Optional[str] = None) -> ScreenResult:
        try:
            students: List[StudentRecord] = await self.client.fetch_all_students()
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("students list failed: %s", e)
            return ScreenResult.failed("Öğrenci listesi alınamadı, tekrar deneyin", data=[])

        if query and query.strip():
            students = [s for s in students if _matches(s, query.strip())]
        return ScreenResult.ok([with_photo(s.model_dump()) for s in students])

    async def teachers(self, page: int = 1, limit: int = TEACHERS_PAGE_SIZE) -> ScreenResult:
        page = max(page, 1)
        try:
            teachers = await self.client.fetch_teachers(page=page, limit=limit)
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("teachers page %d failed: %s", page, e)
            return ScreenResult.failed(
                "Öğretmen listesi alınamadı, tekrar deneyin",
                data=TeacherPage(items=[], page=page, hasMore=False),
            )

        return ScreenResult.ok(TeacherPage(
            items=[with_photo(t.model_dump()) for t in teachers],
            page=page,
            # istenenden az kayıt geldiyse son sayfadır
            hasMore=len(teachers) == limit,
        ))
