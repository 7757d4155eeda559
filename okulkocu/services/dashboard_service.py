from __future__ import annotations

import logging
from typing import Any, Dict

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.config import settings
from okulkocu.core.errors import AuthError, OkulKocuError
from okulkocu.schemas.screens import ScreenResult
from okulkocu.schemas.school import StudentRecord, UserInfo
from okulkocu.utils.photos import resolve_photo_url

logger = logging.getLogger(__name__)

# OKUL_DEMO_FALLBACK açıkken gösterilen demo kayıtları
PLACEHOLDER_PROFILES: Dict[str, Dict[str, Any]] = {
    "admin": {"AdSoyad": "Yönetici Kullanıcı", "Telefon": "05000000000", "Fotograf": "admin_1.jpg"},
    "teacher": {"AdSoyad": "Öğretmen Kullanıcı", "Brans": "Matematik", "Fotograf": "ogretmen_1.jpg"},
    "parent": {
        "Sinif": "5-A",
        "OgrenciNumara": "30",
        "AdSoyad": "Öğrenci Kullanıcı",
        "Fotograf": "default.png",
        "OgrenciId": 63,
    },
}


def with_photo(record: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(record)
    record["photoUrl"] = resolve_photo_url(record.get("Fotograf"))
    return record


class DashboardService:
    def __init__(self, client: SchoolClient, *, demo_fallback: bool | None = None) -> None:
        self.client = client
        self.demo_fallback = settings.demo_fallback if demo_fallback is None else demo_fallback

    def _fallback(self, kind: str, error: str) -> ScreenResult:
        if self.demo_fallback:
            logger.warning("%s dashboard: backend failed (%s), serving placeholder profile", kind, error)
            return ScreenResult(
                data=with_photo(PLACEHOLDER_PROFILES[kind]),
                error=error,
                placeholder=True,
            )
        return ScreenResult.failed(error)

    async def _profile(self, kind: str) -> ScreenResult:
        try:
            info: UserInfo = await self.client.fetch_user_info()
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("%s dashboard: user info failed: %s", kind, e)
            return self._fallback(kind, "Kullanıcı bilgileri alınamadı")
        return ScreenResult.ok(with_photo(info.model_dump()))

    async def admin(self) -> ScreenResult:
        return await self._profile("admin")

    async def teacher(self) -> ScreenResult:
        return await self._profile("teacher")

    async def parent(self) -> ScreenResult:
        try:
            students = await self.client.fetch_all_students()
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("parent dashboard: student fetch failed: %s", e)
            return self._fallback("parent", "Öğrenci bilgileri alınamadı")

        if not students:
            return self._fallback("parent", "Öğrenci bilgisi bulunamadı")

        first: StudentRecord = students[0]
        return ScreenResult.ok(with_photo(first.model_dump()))
