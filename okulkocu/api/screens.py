# okulkocu/api/screens.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel, Field

from okulkocu.api.deps import (
    get_attendance_service,
    get_dashboard_service,
    get_directory_service,
    get_homework_service,
    get_schedule_service,
    get_student_service,
    require_screen,
)
from okulkocu.clients.school_client import TEACHERS_PAGE_SIZE
from okulkocu.schemas.screens import MarkResult, ScreenResult
from okulkocu.schemas.school import AttendanceStatus, HomeworkForm, RosterQuery
from okulkocu.services import (
    AttendanceService,
    DashboardService,
    DirectoryService,
    HomeworkService,
    ScheduleService,
    StudentService,
)

router = APIRouter(prefix="/api/screens", tags=["screens"])


class MarkRequest(BaseModel):
    programId: int
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    studentId: int
    status: AttendanceStatus


@router.get("/admin-dashboard", dependencies=[Depends(require_screen("AdminDashboard"))])
async def admin_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    return await service.admin()


@router.get("/teacher-dashboard", dependencies=[Depends(require_screen("TeacherDashboard"))])
async def teacher_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    return await service.teacher()


@router.get("/parent-dashboard", dependencies=[Depends(require_screen("ParentDashboard"))])
async def parent_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    return await service.parent()


@router.get("/students", dependencies=[Depends(require_screen("StudentsList"))])
async def students(
    q: Optional[str] = Query(default=None),
    service: DirectoryService = Depends(get_directory_service),
):
    return await service.students(q)


@router.get("/teachers", dependencies=[Depends(require_screen("TeachersList"))])
async def teachers(
    page: int = Query(1, ge=1),
    limit: int = Query(TEACHERS_PAGE_SIZE, ge=1, le=100),
    service: DirectoryService = Depends(get_directory_service),
):
    return await service.teachers(page=page, limit=limit)


@router.get("/teacher-schedule", dependencies=[Depends(require_screen("TeacherSchedule"))])
async def teacher_schedule(service: ScheduleService = Depends(get_schedule_service)):
    return await service.teacher_schedule()


@router.get("/attendance/classes", dependencies=[Depends(require_screen("AttendanceStart"))])
async def attendance_classes(service: AttendanceService = Depends(get_attendance_service)):
    return await service.classes()


@router.get("/attendance/lessons", dependencies=[Depends(require_screen("AttendanceStart"))])
async def attendance_lessons(
    class_name: str = Query(..., alias="class", min_length=1),
    date: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    service: AttendanceService = Depends(get_attendance_service),
):
    return await service.lessons(class_name, date)


@router.post("/attendance/lesson", dependencies=[Depends(require_screen("AttendanceLesson"))])
async def attendance_lesson(
    query: RosterQuery,
    service: AttendanceService = Depends(get_attendance_service),
):
    sheet = await service.open_lesson(query)
    return ScreenResult.ok([row.model_dump() for row in sheet.rows])


@router.delete("/attendance/lesson", dependencies=[Depends(require_screen("AttendanceLesson"))])
async def close_attendance_lesson(
    program_id: int = Query(..., alias="programId"),
    date: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    service: AttendanceService = Depends(get_attendance_service),
):
    return {"success": True, "closed": service.close_lesson(program_id, date)}


@router.post("/attendance/mark", dependencies=[Depends(require_screen("AttendanceLesson"))])
async def attendance_mark(
    payload: MarkRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    row = await service.mark(
        program_id=payload.programId,
        date=payload.date,
        student_id=payload.studentId,
        status=payload.status,
    )
    return ScreenResult.ok(MarkResult(
        studentId=payload.studentId,
        status=int(payload.status),
        row=row.model_dump(),
    ))


@router.post("/homework", dependencies=[Depends(require_screen("HomeworkAssignment"))])
async def assign_homework(
    subject: str = Form(""),
    topic: str = Form(""),
    description: str = Form(""),
    due_date: str = Form(""),
    class_name: str = Form(""),
    student_number: str = Form(""),
    points: str = Form(""),
    photo: Optional[UploadFile] = File(default=None),
    service: HomeworkService = Depends(get_homework_service),
):
    form = HomeworkForm(
        subject=subject,
        topic=topic,
        description=description,
        due_date=due_date,
        class_name=class_name,
        student_number=student_number,
        points=points,
    )
    kw = {}
    if photo is not None:
        kw = {
            "photo": await photo.read(),
            "photo_name": photo.filename or "homework_photo.jpg",
            "photo_type": photo.content_type or "image/jpeg",
        }
    result = await service.assign(form, **kw)
    return ScreenResult.ok(result)


@router.get("/student/homework", dependencies=[Depends(require_screen("StudentHomeworkList"))])
async def student_homework(
    student_id: Optional[int] = Query(default=None, alias="studentId"),
    class_name: Optional[str] = Query(default=None, alias="class"),
    service: StudentService = Depends(get_student_service),
):
    return await service.homework(student_id, class_name)


@router.get("/student/absences", dependencies=[Depends(require_screen("StudentAbsences"))])
async def student_absences(
    student_id: Optional[int] = Query(default=None, alias="studentId"),
    service: StudentService = Depends(get_student_service),
):
    return await service.absences(student_id)
