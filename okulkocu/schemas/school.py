# okulkocu/schemas/school.py
"""
Backend kayıtları için DTO'lar.

Backend alan adları (AdSoyad, Sinif, OgrenciId ...) aynen korunur; bilinmeyen
alanlar atılmaz (extra="allow"), ama tip/şekil hataları sınırda yakalanır.
"""
from __future__ import annotations

import enum
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(v: Any) -> Any:
    # backend numara/kod alanlarını bazen int bazen str gönderiyor
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class Record(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class AttendanceStatus(enum.IntEnum):
    ABSENT = 0
    PRESENT = 1
    LATE = 2

    @property
    def label(self) -> str:
        return {0: "Yok", 1: "Burada", 2: "Geç"}[int(self)]


class HomeworkScope(enum.IntEnum):
    """KayitTuru: 0 sınıfa genel, 1 öğrenciye özel"""
    CLASS = 0
    INDIVIDUAL = 1


class HomeworkStatus(enum.IntEnum):
    PENDING = 0
    DONE = 1
    LATE = 2


class UserInfo(Record):
    AdSoyad: Optional[str] = None
    OgretmenID: Optional[int] = None
    OgrenciId: Optional[int] = None
    Sinif: Optional[str] = None
    Telefon: Optional[str] = None
    Fotograf: Optional[str] = None

    @field_validator("Sinif", "Telefon", mode="before")
    @classmethod
    def _text_fields(cls, v):
        return _as_text(v)


class StudentRecord(Record):
    OgrenciId: int
    AdSoyad: str
    Sinif: Optional[str] = None
    OgrenciNumara: Optional[str] = None
    TCKimlikNo: Optional[str] = None
    Fotograf: Optional[str] = None

    @field_validator("Sinif", "OgrenciNumara", "TCKimlikNo", mode="before")
    @classmethod
    def _text_fields(cls, v):
        return _as_text(v)


class TeacherRecord(Record):
    OgretmenID: int
    AdSoyad: str
    Telefon: Optional[str] = None
    Eposta: Optional[str] = None
    Bolum: Optional[str] = None
    Fotograf: Optional[str] = None

    @field_validator("Telefon", mode="before")
    @classmethod
    def _text_fields(cls, v):
        return _as_text(v)


class ClassItem(Record):
    SinifKodu: str
    SinifAdi: str

    @field_validator("SinifKodu", "SinifAdi", mode="before")
    @classmethod
    def _text_fields(cls, v):
        return _as_text(v)


class Lesson(Record):
    """/teacher/dersler ve /schedule/getteacher satırı"""
    ProgramID: Optional[int] = None
    Gun: Optional[str] = None
    DersSaati: Optional[str] = None
    Ders: Optional[str] = None
    Sinif: Optional[str] = None
    Derslik: Optional[str] = None

    @property
    def start_time(self) -> str:
        return (self.DersSaati or "").split("-")[0].strip()


class RosterRow(Record):
    """/teacher/attendance satırı; durum henüz alınmadıysa None"""
    OgrenciId: int
    AdSoyad: Optional[str] = None
    OgrenciNumara: Optional[str] = None
    durum: Optional[AttendanceStatus] = None

    @field_validator("OgrenciNumara", mode="before")
    @classmethod
    def _text_fields(cls, v):
        return _as_text(v)

    @field_validator("durum", mode="before")
    @classmethod
    def _known_status(cls, v):
        # bilinmeyen durum: satır kalır, yoklama alınmamış sayılır
        try:
            return AttendanceStatus(int(v))
        except (TypeError, ValueError):
            return None


class AbsenceRecord(Record):
    tarih: str
    durum: Optional[int] = None
    Ders: Optional[str] = None
    DersSaati: Optional[str] = None


class HomeworkItem(Record):
    DersAdi: Optional[str] = None
    Konu: Optional[str] = None
    Aciklama: Optional[str] = None
    tarih: Optional[str] = None
    TeslimTarihi: Optional[str] = None
    durum: Optional[int] = None
    KayitTuru: Optional[int] = None

    def is_overdue(self, today: Optional[date] = None) -> bool:
        if not self.TeslimTarihi or self.durum == HomeworkStatus.DONE:
            return False
        try:
            due = date.fromisoformat(self.TeslimTarihi[:10])
        except ValueError:
            return False
        return due < (today or date.today())


class AttendanceMark(BaseModel):
    student_id: int
    program_id: int
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    status: AttendanceStatus

    def to_payload(self) -> dict[str, Any]:
        return {
            "tarih": self.date,
            "OgrenciID": self.student_id,
            "ProgramID": self.program_id,
            "durum": int(self.status),
        }


class RosterQuery(BaseModel):
    class_name: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    lesson_hour: str = Field(..., min_length=1)
    program_id: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "Sinif": self.class_name,
            "Tarih": self.date,
            "DersSaati": self.lesson_hour,
            "ProgramID": self.program_id,
        }


class HomeworkForm(BaseModel):
    subject: str
    topic: str
    description: str
    due_date: str
    class_name: str = ""
    student_number: str = ""
    teacher_id: Optional[int] = None
    points: str = ""

    @property
    def scope(self) -> HomeworkScope:
        # sınıf girildiyse sınıfa genel, yoksa öğrenciye özel
        return HomeworkScope.CLASS if self.class_name.strip() else HomeworkScope.INDIVIDUAL

    def missing_fields(self) -> list[str]:
        required = {
            "subject": "Ders adı",
            "topic": "Konu",
            "description": "Açıklama",
            "due_date": "Teslim tarihi",
        }
        return [label for name, label in required.items() if not getattr(self, name).strip()]

    def to_form(self) -> dict[str, str]:
        data = {
            "DersAdi": self.subject.strip(),
            "Konu": self.topic.strip(),
            "Aciklama": self.description.strip(),
            "TeslimTarihi": self.due_date.strip(),
            "puan": self.points,
            "durum": "",
            "OgrenciNumara": self.student_number.strip(),
            "KayitTuru": str(int(self.scope)),
            "Sinif": self.class_name.strip(),
        }
        if self.teacher_id is not None:
            data["OgretmenID"] = str(self.teacher_id)
        return data
