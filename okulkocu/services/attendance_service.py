from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import AuthError, OkulKocuError, ScreenForbidden, ValidationFailed
from okulkocu.core.session import Session, SessionStatus
from okulkocu.schemas.screens import ScreenResult
from okulkocu.schemas.school import AttendanceMark, AttendanceStatus, RosterQuery, RosterRow

logger = logging.getLogger(__name__)


class AttendanceSheet:
    """
    Açık bir dersin yoklama listesi.

    - Her öğrenci satırı için "gönderiliyor" bayrağı: aynı öğrenciye ikinci dokunuş reddedilir.
    - Başarılı gönderimde yalnızca o öğrencinin satırı güncellenir; hata olursa satır değişmez.
    """

    def __init__(self, client: SchoolClient, query: RosterQuery, rows: List[RosterRow]) -> None:
        self.client = client
        self.query = query
        self._rows: Dict[int, RosterRow] = {row.OgrenciId: row for row in rows}
        self._busy: set[int] = set()

    @property
    def rows(self) -> List[RosterRow]:
        return list(self._rows.values())

    def row(self, student_id: int) -> Optional[RosterRow]:
        return self._rows.get(student_id)

    def is_busy(self, student_id: int) -> bool:
        return student_id in self._busy

    async def mark(self, student_id: int, status: AttendanceStatus | int) -> RosterRow:
        status = AttendanceStatus(status)
        if student_id not in self._rows:
            raise ValidationFailed(f"Öğrenci {student_id} bu yoklama listesinde yok")
        if student_id in self._busy:
            raise ValidationFailed("Bu öğrencinin yoklaması zaten gönderiliyor")

        self._busy.add(student_id)
        try:
            await self.client.add_attendance(AttendanceMark(
                student_id=student_id,
                program_id=self.query.program_id,
                date=self.query.date,
                status=status,
            ))
            row = self._rows[student_id].model_copy(update={"durum": status})
            self._rows[student_id] = row
            logger.info("Attendance %s -> student %s (program %s)", status.name, student_id, self.query.program_id)
            return row
        finally:
            self._busy.discard(student_id)


class AttendanceService:
    def __init__(self, client: SchoolClient) -> None:
        self.client = client
        self._sheets: Dict[Tuple[int, str], AttendanceSheet] = {}

    async def classes(self) -> ScreenResult:
        try:
            classes = await self.client.fetch_classes()
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("class list failed: %s", e)
            return ScreenResult.failed("Sınıf listesi alınamadı", data=[])
        return ScreenResult.ok([c.model_dump() for c in classes])

    async def lessons(self, class_name: str, date: str) -> ScreenResult:
        try:
            lessons = await self.client.fetch_lessons(class_name, date)
        except AuthError:
            raise
        except OkulKocuError as e:
            logger.warning("lessons for %s on %s failed: %s", class_name, date, e)
            return ScreenResult.failed("Ders listesi alınamadı", data=[])
        return ScreenResult.ok([lesson.model_dump() for lesson in lessons])

    async def open_lesson(self, query: RosterQuery) -> AttendanceSheet:
        info = await self.client.fetch_user_info()
        if info.OgretmenID is None:
            raise ScreenForbidden("Bu sayfa yalnız öğretmenler içindir.")

        rows = await self.client.fetch_attendance_roster(query)
        sheet = AttendanceSheet(self.client, query, rows)
        self._sheets[(query.program_id, query.date)] = sheet
        return sheet

    def sheet(self, program_id: int, date: str) -> Optional[AttendanceSheet]:
        return self._sheets.get((program_id, date))

    def close_lesson(self, program_id: int, date: str) -> bool:
        return self._sheets.pop((program_id, date), None) is not None

    def session_changed(self, session: Session) -> None:
        """SessionState dinleyicisi: çıkışta veya yeni giriş denemesinde açık listeler düşer."""
        if session.status is SessionStatus.AUTHENTICATED:
            return
        if self._sheets:
            logger.info("Dropping %d open attendance sheet(s) on session change", len(self._sheets))
        self._sheets.clear()

    async def mark(self, *, program_id: int, date: str, student_id: int, status: AttendanceStatus | int) -> RosterRow:
        sheet = self.sheet(program_id, date)
        if sheet is None:
            raise ValidationFailed("Önce dersin yoklama listesini açın")
        return await sheet.mark(student_id, status)
