from __future__ import annotations

import logging
from typing import List

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import AuthError, OkulKocuError
from okulkocu.schemas.screens import ScreenResult
from okulkocu.schemas.school import Lesson

logger = logging.getLogger(__name__)

WEEKDAYS = ["Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma"]


def sort_schedule(lessons: List[Lesson]) -> List[Lesson]:
    def key(lesson: Lesson):
        day = WEEKDAYS.index(lesson.Gun) if lesson.Gun in WEEKDAYS else len(WEEKDAYS)
        return day, lesson.start_time

    return sorted(lessons, key=key)


class ScheduleService:
    def __init__(self, client: SchoolClient) -> None:
        self.client = client

    async def teacher_schedule(self) -> ScreenResult:
        try:
            info = await self.client.fetch_user_info()
            if info.OgretmenID is None:
                return ScreenResult.failed("Öğretmen kimliği bulunamadı", data=[])
            lessons = await self.client.fetch_teacher_schedule(info.OgretmenID)
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("teacher schedule failed: %s", e)
            return ScreenResult.failed("Ders programı yüklenirken bir hata oluştu", data=[])

        if not lessons:
            return ScreenResult.failed("Ders programı bulunamadı", data=[])
        return ScreenResult.ok([lesson.model_dump() for lesson in sort_schedule(lessons)])
