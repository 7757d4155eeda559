from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from okulkocu.core.session import Role, Session

LOGIN_SCREEN = "Login"


@dataclass(frozen=True)
class MenuItem:
    name: str
    label: str
    screen: str


# rol -> yan menü
MENUS: Dict[Role, Tuple[MenuItem, ...]] = {
    Role.ADMIN: (
        MenuItem("Dashboard", "🏠 Ana Sayfa", "AdminDashboard"),
        MenuItem("TeachersList", "👩‍🏫 Öğretmenler", "TeachersList"),
        MenuItem("StudentsList", "👨‍🎓 Öğrenciler", "StudentsList"),
        MenuItem("Users", "👥 Kullanıcı Yönetimi", "AdminDashboard"),
        MenuItem("Schools", "🏫 Okul Yönetimi", "AdminDashboard"),
        MenuItem("Attendance", "✅ Yoklama", "AttendanceStart"),
        MenuItem("Reports", "📊 Raporlar", "AdminDashboard"),
    ),
    Role.TEACHER: (
        MenuItem("Profile", "🏠 Profil", "TeacherDashboard"),
        MenuItem("Schedule", "📅 Ders Programı", "TeacherSchedule"),
        MenuItem("TeachersList", "👩‍🏫 Öğretmenler", "TeachersList"),
        MenuItem("StudentsList", "👨‍🎓 Öğrenciler", "StudentsList"),
        MenuItem("Classes", "📚 Derslerim", "TeacherDashboard"),
        MenuItem("Attendance", "✅ Yoklama", "AttendanceStart"),
        MenuItem("HomeworkAssignment", "📝 Ödev Ver", "HomeworkAssignment"),
        MenuItem("Messages", "💬 Mesajlar", "TeacherDashboard"),
    ),
    Role.PARENT: (
        MenuItem("Student", "🏠 Öğrenci Bilgileri", "ParentDashboard"),
        MenuItem("Homework", "📚 Ödevlerim", "StudentHomeworkList"),
        MenuItem("Absences", "📊 Devamsızlık Geçmişi", "StudentAbsences"),
        MenuItem("Messages", "💬 Mesajlar", "ParentDashboard"),
    ),
}

# rol -> erişilebilir ekranlar (menü hedefleri + alt ekranlar)
ROUTES: Dict[Role, frozenset[str]] = {
    Role.ADMIN: frozenset({"AdminDashboard", "TeachersList", "StudentsList", "AttendanceStart"}),
    Role.TEACHER: frozenset({
        "TeacherDashboard", "TeacherSchedule", "TeachersList", "StudentsList",
        "AttendanceStart", "AttendanceLesson", "HomeworkAssignment",
    }),
    Role.PARENT: frozenset({"ParentDashboard", "StudentHomeworkList", "StudentAbsences"}),
}


def menu_for(role: Optional[Role]) -> List[MenuItem]:
    if role is None:
        return []
    return list(MENUS.get(role, ()))


def screens_for(role: Optional[Role]) -> frozenset[str]:
    if role is None:
        return frozenset()
    return ROUTES.get(role, frozenset())


def can_open(session: Session, screen: str) -> bool:
    if not session.is_authenticated:
        return screen == LOGIN_SCREEN
    return screen in screens_for(session.role)


def roles_for(screen: str) -> List[Role]:
    return [role for role in MENUS if screen in screens_for(role)]
