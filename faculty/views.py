import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from exams.models import Exam
from notifications.tasks import dispatch_emails, email_signature
from sharedapp.utils import clean_str, is_numeric_id, pick
from sharedapp.views import BaseViewSet, invalid_exam_id
from .models import FacultyAllocation
from .serializers import FacultyAllocationSerializer

logger = logging.getLogger(__name__)


def normalize_faculty_row(row):
    return {
        "faculty_name": clean_str(pick(row, "faculty_name", "facultyName")),
        "faculty_id": clean_str(pick(row, "faculty_id", "facultyId")),
        "designation": clean_str(pick(row, "designation", default="faculty"), case="lower"),
        "role": clean_str(pick(row, "role", default="invigilator"), case="lower"),
        "email": clean_str(pick(row, "email")),
        "exam": pick(row, "exam", "examId"),
        "room": pick(row, "room", "roomId"),
    }


def has_slot_conflict(faculty_id, exam):
    """True when the faculty already has duty in the exam's (day, session) slot."""
    exam_day = exam.calendar_day
    duties = FacultyAllocation.objects.filter(faculty_id=faculty_id).select_related("exam")
    return any(
        duty.exam.calendar_day == exam_day and duty.exam.time == exam.time
        for duty in duties
    )


class FacultyAllocationViewSet(BaseViewSet):
    queryset = FacultyAllocation.objects.select_related("exam", "room")
    serializer_class = FacultyAllocationSerializer
    resource_name = "Faculty allocation"
    filterset_fields = ["faculty_id", "role", "designation"]
    search_fields = ["faculty_name", "faculty_id", "email"]

    def get_queryset(self):
        queryset = FacultyAllocation.objects.select_related("exam", "room")
        exam_id = self.request.query_params.get("examId")
        if is_numeric_id(exam_id):
            queryset = queryset.filter(exam_id=exam_id)
        return queryset.order_by("exam__date", "exam__time", "faculty_name")

    def list(self, request, *args, **kwargs):
        exam_id = request.query_params.get("examId")
        if exam_id and not is_numeric_id(exam_id):
            return invalid_exam_id(exam_id)
        return super().list(request, *args, **kwargs)

    @action(detail=False, methods=["POST"], url_path="bulk")
    def bulk(self, request):
        rows = request.data
        if not isinstance(rows, list) or not rows:
            return Response(
                {"success": False, "message": "Input must be a non-empty array"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        created = []
        errors = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                errors.append({"index": index, "error": "Invalid row"})
                continue
            values = normalize_faculty_row(row)
            failure = {"facultyName": values["faculty_name"], "facultyId": values["faculty_id"]}

            exam = Exam.objects.filter(pk=values["exam"]).first() if is_numeric_id(values["exam"]) else None
            if exam is None:
                errors.append({**failure, "error": f"Exam not found for ID: {values['exam']}"})
                continue
            if values["faculty_id"] and has_slot_conflict(values["faculty_id"], exam):
                errors.append({
                    **failure,
                    "error": f"Already allocated on {exam.calendar_day.isoformat()} {exam.time}",
                })
                continue

            serializer = self.get_serializer(data=values)
            if not serializer.is_valid():
                errors.append({**failure, "error": serializer.errors})
                continue
            with transaction.atomic():
                serializer.save()
            created.append(serializer.data)

        logger.info(f"Bulk faculty allocation: {len(created)} created, {len(errors)} failed")
        message = f"Created {len(created)} allocations"
        if errors:
            message += f", {len(errors)} failed"
        return Response(
            {
                "success": created,
                "errors": errors,
                "successCount": len(created),
                "errorCount": len(errors),
                "message": message,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["POST"], url_path="clear")
    def clear(self, request):
        exam_ids = request.data.get("examIds")
        if not isinstance(exam_ids, list) or not exam_ids:
            return Response(
                {"success": False, "message": "examIds array is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        invalid = [exam_id for exam_id in exam_ids if not is_numeric_id(exam_id)]
        if invalid:
            return invalid_exam_id(invalid)

        deleted, _ = FacultyAllocation.objects.filter(exam_id__in=exam_ids).delete()
        logger.info(f"Cleared {deleted} faculty allocations for exams {exam_ids}")
        return Response({
            "success": True,
            "deletedCount": deleted,
            "message": f"Cleared {deleted} allocations",
        })

    @action(detail=False, methods=["POST"], url_path="notify")
    def notify(self, request):
        exam_id = request.data.get("examId")
        if not exam_id:
            return Response(
                {"success": False, "message": "examId is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not is_numeric_id(exam_id):
            return invalid_exam_id(exam_id)

        allocations = list(self.get_queryset().filter(exam_id=exam_id))
        if not allocations:
            return Response(
                {"success": False, "message": "No faculty allocations found for this exam"},
                status=status.HTTP_404_NOT_FOUND,
            )

        signatures = []
        queued = []
        failed = []
        for allocation in allocations:
            if not allocation.email:
                failed.append({"facultyId": allocation.faculty_id, "error": "Email not found"})
                continue
            signatures.append(email_signature(
                "faculty_duty.html",
                {
                    "name": allocation.faculty_name,
                    "designation": allocation.get_designation_display(),
                    "role": allocation.get_role_display(),
                    "room_no": allocation.room.room_no,
                    "date": allocation.exam.calendar_day.isoformat(),
                    "time": allocation.exam.time,
                },
                subject="Exam Duty Notification",
                recipients=[allocation.email],
            ))
            queued.append({"facultyId": allocation.faculty_id, "status": "queued"})

        dispatch_emails(signatures)
        return Response({
            "success": queued,
            "failed": failed,
            "message": f"Emails queued: {len(queued)}, failed: {len(failed)}",
        })
