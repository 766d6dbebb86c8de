import logging
from collections import Counter, defaultdict

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from seating.dates import calendar_day_or_none, utc_midnight
from sharedapp.utils import clean_str, pick
from sharedapp.views import BaseViewSet
from .models import Student
from .serializers import StudentSerializer

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "reg_no", "department", "semester")


def normalize_student_row(row):
    exam_day = calendar_day_or_none(pick(row, "exam_date", "examDate"))
    return {
        "name": clean_str(pick(row, "name")),
        "reg_no": clean_str(pick(row, "reg_no", "regNo"), case="lower"),
        "department": clean_str(pick(row, "department"), case="upper"),
        "semester": clean_str(pick(row, "semester")),
        "email": clean_str(pick(row, "email"), case="lower"),
        "exam_date": utc_midnight(exam_day) if exam_day else None,
        "subject": clean_str(pick(row, "subject")),
        "subject_code": clean_str(pick(row, "subject_code", "subjectCode"), case="upper"),
        "type": clean_str(pick(row, "type", default="regular"), case="lower"),
        "is_active": True,
    }


def department_distribution(students):
    return dict(Counter(student.department or "Unknown" for student in students))


class StudentViewSet(BaseViewSet):
    queryset = Student.objects.active().order_by("department", "semester", "reg_no")
    serializer_class = StudentSerializer
    resource_name = "Student"
    public_actions = ["list", "retrieve", "stats", "by_dept_sem"]
    filterset_fields = ["department", "semester", "subject_code", "type"]
    search_fields = ["name", "reg_no", "email"]

    def get_queryset(self):
        if self.action in ["list", "retrieve", "stats", "by_dept_sem"]:
            return Student.objects.active().order_by("department", "semester", "reg_no")
        return Student.objects.all().order_by("department", "semester", "reg_no")

    @action(detail=False, methods=["POST"], url_path="bulk")
    def bulk(self, request):
        rows = request.data
        if not isinstance(rows, list) or not rows:
            return Response(
                {"success": False, "message": "Input must be a non-empty array"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        processed = []
        errors = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                errors.append({"index": index, "error": "Invalid row", "data": row})
                continue
            student = normalize_student_row(row)
            if any(not student[f] for f in REQUIRED_FIELDS):
                errors.append({"index": index, "error": "Missing required fields", "data": row})
                continue
            if student["email"] and "@" not in student["email"]:
                errors.append({"index": index, "error": "Invalid email format", "data": row})
                continue
            if student["type"] not in dict(Student.TYPE_CHOICES):
                student["type"] = "regular"
            processed.append(student)

        unique = {}
        for student in processed:
            unique.setdefault(student["reg_no"], student)

        existing = {s.reg_no: s for s in Student.objects.filter(reg_no__in=unique.keys())}
        inserted = updated = 0
        with transaction.atomic():
            for reg_no, values in unique.items():
                instance = existing.get(reg_no)
                if instance is None:
                    Student.objects.create(**values)
                    inserted += 1
                    continue
                for field, value in values.items():
                    setattr(instance, field, value)
                instance.save()
                updated += 1

        final_students = list(Student.objects.active())
        distribution = department_distribution(final_students)
        logger.info(f"Bulk student upload: inserted {inserted}, updated {updated}, errors {len(errors)}")
        logger.debug(f"Department distribution: {distribution}")

        return Response(
            {
                "success": True,
                "message": "Bulk upload completed",
                "summary": {
                    "totalReceived": len(rows),
                    "validRecords": len(processed),
                    "uniqueRecords": len(unique),
                    "inserted": inserted,
                    "updated": updated,
                    "processingErrors": len(errors),
                    "finalTotalStudents": len(final_students),
                    "departmentDistribution": distribution,
                },
                "errors": {"processing": errors},
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["GET"], url_path="stats")
    def stats(self, request):
        stats = defaultdict(lambda: {"total": 0, "semesters": defaultdict(int)})
        for student in self.get_queryset():
            entry = stats[student.department or "Unknown"]
            entry["total"] += 1
            entry["semesters"][student.semester or "Unknown"] += 1

        data = {
            dept: {"total": entry["total"], "semesters": dict(entry["semesters"])}
            for dept, entry in stats.items()
        }
        return Response({"success": True, "data": data, "message": "Department statistics fetched successfully"})

    @action(detail=False, methods=["GET"], url_path="by-dept-sem")
    def by_dept_sem(self, request):
        queryset = Student.objects.active()
        department = request.query_params.get("department")
        semester = request.query_params.get("semester")
        if department:
            queryset = queryset.filter(department=department.strip().upper())
        if semester:
            queryset = queryset.filter(semester=str(semester).strip())

        serializer = self.get_serializer(queryset.order_by("reg_no"), many=True)
        return Response({"success": True, "data": serializer.data, "message": "Students fetched successfully"})
