import logging

from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from exams.models import Exam
from exams.serializers import ExamSerializer
from notifications.tasks import dispatch_emails, email_signature
from rooms.serializers import RoomSerializer
from sharedapp.utils import is_numeric_id
from sharedapp.views import invalid_exam_id
from .exceptions import AllocationError, AllocationValidationError, ExamNotFound
from .models import SeatAllocation
from .serializers import (
    AllocateSeatsSerializer,
    ExamIdSerializer,
    SeatAllocationDetailSerializer,
    SlotQuerySerializer,
)
from .utils import allocate_seats, get_room_availability

logger = logging.getLogger(__name__)


def error_response(error):
    return Response(error.as_response_data(), status=error.status_code)


def validation_failed(serializer, message):
    return Response(
        {
            "success": False,
            "error_code": "MISSING_FIELDS",
            "message": message,
            "details": serializer.errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class SeatingViewSet(viewsets.GenericViewSet):
    queryset = SeatAllocation.objects.all()
    serializer_class = SeatAllocationDetailSerializer

    def get_permissions(self):
        if self.action in ["allocations", "room_availability"]:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    @action(detail=False, methods=["post"], url_path="allocate-seats")
    def allocate_seats(self, request):
        serializer = AllocateSeatsSerializer(data=request.data)
        if not serializer.is_valid():
            error = AllocationValidationError(details={
                "received": {
                    "examId": request.data.get("examId"),
                    "roomType": request.data.get("roomType"),
                },
                "errors": serializer.errors,
            })
            return error_response(error)

        exam_id = serializer.validated_data["examId"]
        room_type = serializer.validated_data["roomType"].lower()
        try:
            result = allocate_seats(exam_id, room_type)
        except AllocationError as e:
            logger.warning(f"Seat allocation rejected for exam {exam_id}: {e.error_code} {e.message}")
            return error_response(e)

        return Response(
            {
                "success": True,
                "message": f"Successfully allocated {result.stats['seatsAllocated']} seats "
                           f"in {result.stats['roomsUsed']} rooms",
                "allocations": SeatAllocationDetailSerializer(result.allocations, many=True).data,
                "stats": result.stats,
                "examDetails": result.exam_details,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="allocations")
    def allocations(self, request):
        queryset = SeatAllocation.objects.select_related("student", "exam", "room")
        exam_id = request.query_params.get("examId")
        if exam_id:
            if not is_numeric_id(exam_id):
                return invalid_exam_id(exam_id)
            queryset = queryset.filter(exam_id=exam_id)
        queryset = queryset.order_by("room__room_no", "seat_index")
        serializer = SeatAllocationDetailSerializer(queryset, many=True)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": "Seat allocations fetched successfully",
        })

    @action(detail=False, methods=["delete"], url_path=r"allocations/(?P<allocation_id>\d+)")
    def delete_allocation(self, request, allocation_id=None):
        allocation = SeatAllocation.objects.filter(pk=allocation_id).first()
        if allocation is None:
            return Response(
                {
                    "success": False,
                    "error_code": "ALLOCATION_NOT_FOUND",
                    "message": "Allocation not found",
                },
                status=status.HTTP_404_NOT_FOUND,
            )
        allocation.delete()
        logger.info(f"Deleted seat allocation {allocation_id}")
        return Response({"success": True, "message": "Allocation deleted successfully"})

    @action(detail=False, methods=["delete"], url_path=r"allocations/exam/(?P<exam_id>\d+)")
    def clear_exam(self, request, exam_id=None):
        exam = get_object_or_404(Exam, pk=exam_id)
        deleted = SeatAllocation.objects.delete_all_by_exam(exam)
        logger.info(f"Cleared {deleted} allocations for exam {exam_id}")
        return Response({
            "success": True,
            "deletedCount": deleted,
            "message": f"Deleted {deleted} allocations",
        })

    @action(detail=False, methods=["get"], url_path="room-availability")
    def room_availability(self, request):
        serializer = SlotQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return validation_failed(serializer, "Valid date and time (FN/AN) are required")

        day = serializer.validated_data["date"]
        time = serializer.validated_data["time"]
        slot = get_room_availability(day, time)
        return Response({
            "success": True,
            "date": day.isoformat(),
            "time": time,
            "totalRooms": len(slot["rooms"]),
            "availableCount": len(slot["available"]),
            "occupiedCount": len(slot["occupied"]),
            "availableCapacity": sum(room.capacity for room in slot["available"]),
            "totalCapacity": sum(room.capacity for room in slot["rooms"]),
            "available": RoomSerializer(slot["available"], many=True).data,
            "occupied": RoomSerializer(slot["occupied"], many=True).data,
            "conflictingExams": ExamSerializer(slot["exams"], many=True).data,
        })

    @action(detail=False, methods=["post"], url_path="notify-students")
    def notify_students(self, request):
        serializer = ExamIdSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_failed(serializer, "examId is required")

        exam_id = serializer.validated_data["examId"]
        exam = Exam.objects.filter(pk=exam_id).first() if is_numeric_id(exam_id) else None
        if exam is None:
            return error_response(ExamNotFound())

        allocations = SeatAllocation.objects.find_by_exam(exam)
        signatures = []
        skipped = []
        for allocation in allocations:
            student = allocation.student
            if not student.email:
                skipped.append(student.reg_no)
                continue
            signatures.append(email_signature(
                "student_exam.html",
                {
                    "name": student.name,
                    "subject": exam.subject,
                    "date": exam.calendar_day.isoformat(),
                    "time": exam.time,
                    "room_no": allocation.room.room_no,
                    "seat_number": allocation.seat_number,
                },
                subject=f"Exam Seat Allotment - {exam.subject}",
                recipients=[student.email],
            ))

        queued = dispatch_emails(signatures)
        logger.info(f"Exam notifications for exam {exam.pk}: {queued} queued, {len(skipped)} skipped")
        return Response({
            "success": True,
            "queued": queued,
            "skipped": skipped,
            "message": f"{queued} notification emails queued",
        })
