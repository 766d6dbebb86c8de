import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from seating.dates import InvalidDateError, parse_calendar_day, utc_midnight
from sharedapp.utils import clean_str, pick
from sharedapp.views import BaseViewSet
from .models import Exam
from .serializers import ExamSerializer

logger = logging.getLogger(__name__)

SEMESTERS = [str(n) for n in range(1, 9)]
SLOT_FIELDS = ("date", "time", "subject_code", "department", "semester")


class BulkRowError(Exception):
    pass


def normalize_exam_row(row, index):
    """Validate and normalise one uploaded exam row."""
    if not isinstance(row, dict):
        raise BulkRowError(f"Row {index + 1}: Invalid row")
    values = {
        "date": pick(row, "date"),
        "time": clean_str(pick(row, "time"), case="upper"),
        "subject": clean_str(pick(row, "subject")),
        "subject_code": clean_str(pick(row, "subject_code", "subjectCode"), case="upper"),
        "department": clean_str(pick(row, "department"), case="upper"),
        "semester": clean_str(pick(row, "semester")),
    }
    if any(value in (None, "") for value in values.values()):
        raise BulkRowError(f"Row {index + 1}: Missing required fields")

    try:
        values["date"] = utc_midnight(parse_calendar_day(values["date"]))
    except InvalidDateError:
        raise BulkRowError(f"Row {index + 1}: Invalid date format - {row.get('date')}")

    if values["time"] not in ("FN", "AN"):
        raise BulkRowError(f"Row {index + 1}: Time must be either 'FN' or 'AN'")
    if values["semester"] not in SEMESTERS:
        raise BulkRowError(f"Row {index + 1}: Invalid semester - must be between 1-8")

    exam_type = clean_str(pick(row, "type"), case="lower")
    values["type"] = exam_type if exam_type in ("regular", "supply") else "regular"
    values["is_active"] = True
    return values


class ExamViewSet(BaseViewSet):
    queryset = Exam.objects.active().order_by("date", "time")
    serializer_class = ExamSerializer
    resource_name = "Exam schedule"
    soft_delete = True
    filterset_fields = ["time", "department", "semester", "subject_code", "type"]
    search_fields = ["subject", "subject_code"]

    def get_queryset(self):
        if self.action in ["list", "retrieve"]:
            return Exam.objects.active().order_by("date", "time")
        return Exam.objects.all().order_by("date", "time")

    @action(detail=False, methods=["POST"], url_path="bulk")
    def bulk(self, request):
        rows = request.data
        if not isinstance(rows, list):
            return Response(
                {"success": False, "message": "Input should be an array of exam schedules"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            processed = [normalize_exam_row(row, index) for index, row in enumerate(rows)]
        except BulkRowError as e:
            logger.warning(f"Bulk exam upload rejected: {e}")
            return Response({"success": False, "message": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        existing = {}
        for values in processed:
            key = tuple(values[f] for f in SLOT_FIELDS)
            if key in existing:
                continue
            existing[key] = Exam.objects.filter(**{f: values[f] for f in SLOT_FIELDS}).first()

        inserted, reactivated, updated = [], [], 0
        handled = set()
        with transaction.atomic():
            for values in processed:
                key = tuple(values[f] for f in SLOT_FIELDS)
                if key in handled:
                    continue
                handled.add(key)

                exam = existing.get(key)
                if exam is None:
                    inserted.append(Exam.objects.create(**values))
                    continue

                was_active = exam.is_active
                for field, value in values.items():
                    setattr(exam, field, value)
                exam.save()
                if was_active:
                    updated += 1
                else:
                    reactivated.append(exam)

        logger.info(
            f"Bulk exam upload: {len(inserted)} inserted, {len(reactivated)} reactivated, {updated} updated"
        )
        return Response(
            {
                "success": True,
                "message": f"Processed {len(rows)} exam schedules",
                "details": {
                    "inserted": len(inserted),
                    "reactivated": len(reactivated),
                    "updated": updated,
                    "skipped": len(rows) - len(inserted) - len(reactivated) - updated,
                },
                "data": ExamSerializer(inserted + reactivated, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )
