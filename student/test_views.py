import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from student.models import Student

logging.disable(logging.CRITICAL)

User = get_user_model()


class StudentApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pass", is_staff=True)
        self.client.force_authenticate(self.admin)

    def test_bulk_upserts_by_reg_no(self):
        Student.objects.create(name="Old Name", reg_no="21cs001", department="CSE", semester="3")

        response = self.client.post(
            "/api/students/bulk/",
            [
                {"name": "Asha", "regNo": "21CS001", "department": "cse", "semester": 3,
                 "email": "ASHA@example.com", "examDate": 45418, "subjectCode": "ma101"},
                {"name": "Ravi", "regNo": "21cs002", "department": "cse", "semester": 3.0,
                 "examDate": "06-05-2024", "subjectCode": "ma101"},
                {"name": "Ravi again", "regNo": "21cs002", "department": "cse", "semester": 3},
                {"name": "No dept", "regNo": "21cs003", "semester": 3},
                {"name": "Bad mail", "regNo": "21cs004", "department": "cse", "semester": 3, "email": "nope"},
            ],
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        summary = response.data["summary"]
        self.assertEqual(summary["totalReceived"], 5)
        self.assertEqual(summary["validRecords"], 3)
        self.assertEqual(summary["uniqueRecords"], 2)
        self.assertEqual(summary["inserted"], 1)
        self.assertEqual(summary["updated"], 1)
        self.assertEqual(summary["processingErrors"], 2)
        self.assertEqual(summary["departmentDistribution"], {"CSE": 2})

        asha = Student.objects.get(reg_no="21cs001")
        self.assertEqual(asha.name, "Asha")
        self.assertEqual(asha.email, "asha@example.com")
        self.assertEqual(asha.exam_date.date().isoformat(), "2024-05-06")
        ravi = Student.objects.get(reg_no="21cs002")
        self.assertEqual(ravi.semester, "3")
        self.assertEqual(ravi.name, "Ravi")

    def test_bulk_requires_array(self):
        response = self.client.post("/api/students/bulk/", {"name": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_rejects_duplicate_reg_no_case_insensitively(self):
        Student.objects.create(name="Asha", reg_no="21cs001", department="CSE", semester="3")

        response = self.client.post(
            "/api/students/",
            {"name": "Other", "reg_no": "21CS001", "department": "CSE", "semester": "3"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reg_no", response.data)

    def test_stats_by_department_and_semester(self):
        Student.objects.create(name="A", reg_no="1", department="CSE", semester="3")
        Student.objects.create(name="B", reg_no="2", department="CSE", semester="5")
        Student.objects.create(name="C", reg_no="3", department="ECE", semester="3")
        Student.objects.create(name="D", reg_no="4", department="ECE", semester="3", is_active=False)

        response = self.client.get("/api/students/stats/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"], {
            "CSE": {"total": 2, "semesters": {"3": 1, "5": 1}},
            "ECE": {"total": 1, "semesters": {"3": 1}},
        })

    def test_by_dept_sem(self):
        Student.objects.create(name="A", reg_no="2", department="CSE", semester="3")
        Student.objects.create(name="B", reg_no="1", department="CSE", semester="3")
        Student.objects.create(name="C", reg_no="3", department="CSE", semester="5")

        response = self.client.get("/api/students/by-dept-sem/", {"department": "cse", "semester": 3})

        self.assertEqual([s["reg_no"] for s in response.data["data"]], ["1", "2"])

    def test_delete_removes_student(self):
        student = Student.objects.create(name="A", reg_no="1", department="CSE", semester="3")

        response = self.client.delete(f"/api/students/{student.pk}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Student.objects.filter(pk=student.pk).exists())
