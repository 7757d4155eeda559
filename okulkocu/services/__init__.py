# okulkocu/services/__init__.py
"""Ekran servisleri"""

from .attendance_service import AttendanceService, AttendanceSheet
from .auth_service import AuthService
from .dashboard_service import DashboardService
from .directory_service import DirectoryService
from .homework_service import HomeworkService
from .schedule_service import ScheduleService
from .student_service import StudentService

__all__ = [
    "AttendanceService",
    "AttendanceSheet",
    "AuthService",
    "DashboardService",
    "DirectoryService",
    "HomeworkService",
    "ScheduleService",
    "StudentService",
]
