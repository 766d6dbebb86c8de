import logging
from datetime import datetime
from unittest import mock

import pytz
from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from attendance.models import Attendance
from attendance.views import current_session, student_emails
from faculty.models import FacultyAllocation
from seating.test_allocation_logic import make_exam, make_room, make_students
from seating.utils import allocate_seats

logging.disable(logging.CRITICAL)

User = get_user_model()


class AttendanceApiTests(APITestCase):
    def setUp(self):
        self.invigilator = User.objects.create_user(username="meena", password="pass", is_staff=True)
        self.client.force_authenticate(self.invigilator)
        self.room = make_room("R101", 10)
        self.exam = make_exam()
        self.students = make_students(3)
        allocate_seats(self.exam.pk, "classroom")
        FacultyAllocation.objects.create(
            faculty_name="Dr. Meena", faculty_id="F100", email="meena@example.com",
            exam=self.exam, room=self.room,
        )

    def mark(self, student, status_value):
        return self.client.post(
            "/api/attendance/mark-attendance/",
            {
                "studentId": student.pk,
                "examId": self.exam.pk,
                "roomId": self.room.pk,
                "status": status_value,
                "facultyId": "F100",
                "facultyName": "Dr. Meena",
            },
            format="json",
        )

    def test_invigilator_roster_defaults_to_present(self):
        self.mark(self.students[1], "absent")

        response = self.client.get("/api/attendance/invigilator/F100/", {"date": "2024-05-06", "time": "FN"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["roomInfo"]["room_no"], "R101")
        self.assertEqual([s["seat_number"] for s in response.data["students"]], ["A1", "A2", "A3"])
        self.assertEqual(response.data["summary"], {
            "totalStudents": 3,
            "presentCount": 2,
            "absentCount": 1,
            "malpracticeCount": 0,
        })

    def test_invigilator_without_duty_lists_allocations(self):
        response = self.client.get("/api/attendance/invigilator/F100/", {"date": "2024-05-06", "time": "AN"})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["availableAllocations"][0]["room"], "R101")

    def test_mark_attendance_upserts(self):
        self.mark(self.students[0], "absent")
        response = self.mark(self.students[0], "present")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record = Attendance.objects.get(student=self.students[0], exam=self.exam)
        self.assertEqual(record.status, "present")
        self.assertEqual(record.exam_time, "FN")
        self.assertEqual(Attendance.objects.count(), 1)

    def test_mark_attendance_validates_status(self):
        response = self.mark(self.students[0], "late")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_report_malpractice_without_prior_record(self):
        response = self.client.post(
            "/api/attendance/report-malpractice/",
            {
                "studentId": self.students[2].pk,
                "examId": self.exam.pk,
                "description": "Carrying notes",
                "facultyId": "F100",
                "facultyName": "Dr. Meena",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record = Attendance.objects.get(student=self.students[2])
        self.assertTrue(record.malpractice_reported)
        self.assertEqual(record.room, self.room)
        self.assertEqual(record.status, "present")
        self.assertIsNotNone(record.malpractice_reported_at)

    def test_report_for_faculty(self):
        self.mark(self.students[0], "absent")
        self.mark(self.students[1], "present")

        response = self.client.get("/api/attendance/report/F100/", {"date": "2024-05-06", "time": "FN"})

        self.assertEqual(len(response.data["data"]), 2)
        response = self.client.get("/api/attendance/report/F999/")
        self.assertEqual(response.data["data"], [])

    def test_report_rejects_non_numeric_exam_id(self):
        response = self.client.get("/api/attendance/report/F100/", {"examId": "abc"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "INVALID_EXAM_ID")

    def test_counts_for_slot(self):
        self.mark(self.students[0], "absent")
        self.client.post(
            "/api/attendance/report-malpractice/",
            {
                "studentId": self.students[1].pk,
                "examId": self.exam.pk,
                "roomId": self.room.pk,
                "description": "Copying",
                "facultyId": "F100",
                "facultyName": "Dr. Meena",
            },
            format="json",
        )

        response = self.client.post(
            "/api/attendance/counts/", {"examDate": "2024-05-06", "examTime": "FN"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["absentees"], 1)
        self.assertEqual(response.data["absenteeList"][0]["regNo"], "21cs001")
        self.assertEqual(response.data["malpractice"], 1)
        self.assertEqual(response.data["malpracticeList"][0]["reason"], "Copying")

    def test_counts_requires_valid_slot(self):
        response = self.client.post("/api/attendance/counts/", {"examDate": "2024-05-06"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(COLLEGE_EMAIL_DOMAIN="college.test")
    @mock.patch("attendance.views.dispatch_emails", side_effect=lambda signatures: len(signatures))
    def test_notify_absentees(self, dispatch):
        self.mark(self.students[0], "absent")

        response = self.client.post(
            "/api/attendance/notify-absentees/", {"examDate": "2024-05-06", "examTime": "FN"}, format="json"
        )

        self.assertEqual(response.data["queued"], 1)
        signature = dispatch.call_args[0][0][0]
        self.assertEqual(signature.kwargs["recipient_list"], ["21cs001@example.com", "21cs001@college.test"])

    def test_notify_malpractice_with_nothing_reported(self):
        response = self.client.post(
            "/api/attendance/notify-malpractice/", {"examDate": "2024-05-06", "examTime": "FN"}, format="json"
        )
        self.assertEqual(response.data["queued"], 0)


class AttendanceHelperTests(APITestCase):
    @override_settings(COLLEGE_EMAIL_DOMAIN="college.test")
    def test_student_emails_without_personal_address(self):
        student = make_students(1)[0]
        student.email = ""
        self.assertEqual(student_emails(student), ["21cs001@college.test"])

    @override_settings(TIME_ZONE="Asia/Kolkata")
    def test_current_session_switches_at_two_pm(self):
        kolkata = pytz.timezone("Asia/Kolkata")
        with mock.patch("attendance.views.timezone.now", return_value=kolkata.localize(datetime(2024, 5, 6, 13, 59))):
            self.assertEqual(current_session(), "FN")
        with mock.patch("attendance.views.timezone.now", return_value=kolkata.localize(datetime(2024, 5, 6, 14, 0))):
            self.assertEqual(current_session(), "AN")
