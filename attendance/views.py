import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from exams.models import Exam
from exams.serializers import ExamSerializer
from faculty.models import FacultyAllocation
from notifications.tasks import dispatch_emails, email_signature
from rooms.models import Room
from rooms.serializers import RoomSerializer
from seating.dates import InvalidDateError, day_bounds, parse_calendar_day
from seating.models import SeatAllocation
from sharedapp.utils import is_numeric_id
from sharedapp.views import invalid_exam_id
from student.models import Student
from student.serializers import StudentSerializer
from .models import Attendance
from .serializers import (
    AttendanceSerializer,
    ExamSlotSerializer,
    MarkAttendanceSerializer,
    ReportMalpracticeSerializer,
)

logger = logging.getLogger(__name__)

AFTERNOON_STARTS_AT = 14


def current_session():
    return "FN" if timezone.localtime().hour < AFTERNOON_STARTS_AT else "AN"


def student_emails(student):
    """The student's own address followed by the college mailbox for the reg no."""
    emails = []
    if student.email:
        emails.append(student.email)
    if student.reg_no:
        college_email = f"{student.reg_no}@{settings.COLLEGE_EMAIL_DOMAIN}".lower()
        if college_email not in emails:
            emails.append(college_email)
    return emails


def bad_request(message, details=None):
    body = {"success": False, "error_code": "INVALID_DATA", "message": message}
    if details is not None:
        body["details"] = details
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def not_found(message, **extra):
    return Response({"success": False, "message": message, **extra}, status=status.HTTP_404_NOT_FOUND)


class AttendanceViewSet(viewsets.GenericViewSet):
    queryset = Attendance.objects.select_related("student", "exam", "room")
    serializer_class = AttendanceSerializer

    def get_permissions(self):
        if self.action in ["notify_absentees", "notify_malpractice"]:
            return [permissions.IsAdminUser()]
        return [permissions.IsAuthenticated()]

    def slot_records(self, day, time):
        start, end = day_bounds(day)
        return self.get_queryset().filter(exam_date__gte=start, exam_date__lt=end, exam_time=time)

    @action(detail=False, methods=["get"], url_path=r"invigilator/(?P<faculty_id>[^/.]+)")
    def invigilator(self, request, faculty_id=None):
        try:
            day = parse_calendar_day(request.query_params["date"]) \
                if request.query_params.get("date") else timezone.localdate()
        except InvalidDateError as e:
            return bad_request(f"Invalid date format - {e.value}")
        time = (request.query_params.get("time") or current_session()).strip().upper()

        duties = list(
            FacultyAllocation.objects.filter(faculty_id=faculty_id).select_related("exam", "room")
        )
        matching = [d for d in duties if d.exam.calendar_day == day and d.exam.time == time]
        if not matching:
            logger.info(f"No duty for faculty {faculty_id} on {day} {time}; {len(duties)} allocations on record")
            return not_found(
                "No room allocation found for this faculty on the specified date and time",
                date=day.isoformat(),
                time=time,
                facultyId=faculty_id,
                availableAllocations=[
                    {
                        "subject": d.exam.subject,
                        "date": d.exam.calendar_day.isoformat(),
                        "time": d.exam.time,
                        "room": d.room.room_no,
                    }
                    for d in duties
                ],
            )

        duty = matching[0]
        seats = SeatAllocation.objects.filter(exam=duty.exam, room=duty.room) \
            .select_related("student").order_by("seat_index")
        records = {
            record.student_id: record
            for record in Attendance.objects.filter(exam=duty.exam, room=duty.room, invigilator_id=faculty_id)
        }

        students = []
        for seat in seats:
            record = records.get(seat.student_id)
            students.append({
                "id": seat.pk,
                "student": StudentSerializer(seat.student).data,
                "seat_number": seat.seat_number,
                "attendance": {
                    "status": record.status if record else "present",
                    "malpractice_reported": record.malpractice_reported if record else False,
                    "malpractice_description": record.malpractice_description if record else "",
                },
            })

        return Response({
            "success": True,
            "facultyInfo": {
                "facultyId": duty.faculty_id,
                "facultyName": duty.faculty_name,
                "role": duty.role,
            },
            "examInfo": ExamSerializer(duty.exam).data,
            "roomInfo": RoomSerializer(duty.room).data,
            "students": students,
            "summary": {
                "totalStudents": len(students),
                "presentCount": sum(1 for s in students if s["attendance"]["status"] == "present"),
                "absentCount": sum(1 for s in students if s["attendance"]["status"] == "absent"),
                "malpracticeCount": sum(1 for s in students if s["attendance"]["malpractice_reported"]),
            },
            "currentDate": day.isoformat(),
            "currentTime": time,
        })

    @action(detail=False, methods=["post"], url_path="mark-attendance")
    def mark_attendance(self, request):
        serializer = MarkAttendanceSerializer(data=request.data)
        if not serializer.is_valid():
            return bad_request("All fields are required", serializer.errors)
        data = serializer.validated_data

        exam = Exam.objects.filter(pk=data["examId"]).first()
        if exam is None:
            return not_found("Exam not found")
        student = Student.objects.filter(pk=data["studentId"]).first()
        if student is None:
            return not_found("Student not found")
        if not Room.objects.filter(pk=data["roomId"]).exists():
            return not_found("Room not found")

        attendance, created = Attendance.objects.update_or_create(
            student=student,
            exam=exam,
            defaults={
                "room_id": data["roomId"],
                "invigilator_id": data["facultyId"],
                "invigilator_name": data["facultyName"],
                "status": data["status"],
                "exam_date": exam.date,
                "exam_time": exam.time,
                "marked_at": timezone.now(),
            },
        )
        logger.info(f"Attendance {'recorded' if created else 'updated'}: {student.reg_no} {data['status']} for exam {exam.pk}")
        return Response({
            "success": True,
            "message": "Attendance marked successfully",
            "attendance": AttendanceSerializer(attendance).data,
        })

    @action(detail=False, methods=["post"], url_path="report-malpractice")
    def report_malpractice(self, request):
        serializer = ReportMalpracticeSerializer(data=request.data)
        if not serializer.is_valid():
            return bad_request("All fields are required", serializer.errors)
        data = serializer.validated_data

        exam = Exam.objects.filter(pk=data["examId"]).first()
        if exam is None:
            return not_found("Exam not found")
        student = Student.objects.filter(pk=data["studentId"]).first()
        if student is None:
            return not_found("Student not found")

        attendance = Attendance.objects.filter(student=student, exam=exam).first()
        if attendance is None:
            room_id = data.get("roomId")
            if room_id is None:
                seat = SeatAllocation.objects.filter(student=student, exam=exam).first()
                room_id = seat.room_id if seat else None
            if room_id is None:
                return bad_request("roomId is required when the student has no seat for this exam")
            attendance = Attendance(
                student=student,
                exam=exam,
                room_id=room_id,
                status="present",
                exam_date=exam.date,
                exam_time=exam.time,
            )

        attendance.invigilator_id = data["facultyId"]
        attendance.invigilator_name = data["facultyName"]
        attendance.malpractice_reported = True
        attendance.malpractice_description = data["description"]
        attendance.malpractice_reported_at = timezone.now()
        attendance.save()

        logger.warning(f"Malpractice reported for {student.reg_no} in exam {exam.pk} by {data['facultyId']}")
        return Response({
            "success": True,
            "message": "Malpractice reported successfully",
            "attendance": AttendanceSerializer(attendance).data,
        })

    @action(detail=False, methods=["get"], url_path=r"report/(?P<faculty_id>[^/.]+)")
    def report(self, request, faculty_id=None):
        queryset = self.get_queryset().filter(invigilator_id=faculty_id)
        exam_id = request.query_params.get("examId")
        if exam_id:
            if not is_numeric_id(exam_id):
                return invalid_exam_id(exam_id)
            queryset = queryset.filter(exam_id=exam_id)

        date = request.query_params.get("date")
        time = request.query_params.get("time")
        if date and time:
            try:
                day = parse_calendar_day(date)
            except InvalidDateError:
                return bad_request(f"Invalid date format - {date}")
            start, end = day_bounds(day)
            queryset = queryset.filter(exam_date__gte=start, exam_date__lt=end, exam_time=time.upper())

        serializer = self.get_serializer(queryset, many=True)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": "Attendance report fetched successfully",
        })

    @action(detail=False, methods=["post"], url_path="counts")
    def counts(self, request):
        serializer = ExamSlotSerializer(data=request.data)
        if not serializer.is_valid():
            return bad_request("Valid exam date and time required", serializer.errors)

        records = self.slot_records(serializer.validated_data["examDate"], serializer.validated_data["examTime"])
        absentees = list(records.filter(status="absent"))
        malpractice = list(records.filter(malpractice_reported=True))
        return Response({
            "success": True,
            "absentees": len(absentees),
            "malpractice": len(malpractice),
            "absenteeList": [
                {"name": a.student.name, "regNo": a.student.reg_no, "email": a.student.email}
                for a in absentees
            ],
            "malpracticeList": [
                {
                    "name": m.student.name,
                    "regNo": m.student.reg_no,
                    "email": m.student.email,
                    "reason": m.malpractice_description or "Not specified",
                }
                for m in malpractice
            ],
        })

    @action(detail=False, methods=["post"], url_path="notify-absentees")
    def notify_absentees(self, request):
        serializer = ExamSlotSerializer(data=request.data)
        if not serializer.is_valid():
            return bad_request("Valid exam date and time required", serializer.errors)
        day = serializer.validated_data["examDate"]
        time = serializer.validated_data["examTime"]

        signatures = []
        for record in self.slot_records(day, time).filter(status="absent"):
            emails = student_emails(record.student)
            if not emails:
                continue
            signatures.append(email_signature(
                "absentee.html",
                {"name": record.student.name, "date": day.isoformat(), "time": time},
                subject="Absentee Notification",
                recipients=emails,
            ))

        if not signatures:
            return Response({"success": True, "queued": 0, "message": "No absentees to notify"})
        queued = dispatch_emails(signatures)
        return Response({"success": True, "queued": queued, "message": "Absentee emails queued successfully"})

    @action(detail=False, methods=["post"], url_path="notify-malpractice")
    def notify_malpractice(self, request):
        serializer = ExamSlotSerializer(data=request.data)
        if not serializer.is_valid():
            return bad_request("Valid exam date and time required", serializer.errors)
        day = serializer.validated_data["examDate"]
        time = serializer.validated_data["examTime"]

        signatures = []
        for record in self.slot_records(day, time).filter(malpractice_reported=True):
            emails = student_emails(record.student)
            if not emails:
                continue
            signatures.append(email_signature(
                "malpractice.html",
                {
                    "name": record.student.name,
                    "date": day.isoformat(),
                    "time": time,
                    "reason": record.malpractice_description or "Not specified",
                },
                subject="Malpractice Notification",
                recipients=emails,
            ))

        if not signatures:
            return Response({"success": True, "queued": 0, "message": "No malpractice records to notify"})
        queued = dispatch_emails(signatures)
        return Response({"success": True, "queued": queued, "message": "Malpractice emails queued successfully"})
