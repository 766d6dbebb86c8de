import logging

from django.db import IntegrityError, models, transaction
from django.utils import timezone

from exams.models import Exam
from rooms.models import Room
from sharedapp.models import TimeStampedModel
from student.models import Student

from .exceptions import DuplicateSeat, DuplicateStudentAssignment

logger = logging.getLogger(__name__)

SEAT_CONSTRAINT = 'unique_seat_per_exam_room'
STUDENT_CONSTRAINT = 'unique_student_per_exam'


class SeatAllocationManager(models.Manager):
    """
    Persistence contract used by the allocator: whole-exam delete, batch
    insert that rejects duplicates, and ordered reads.
    """

    def find_by_exam(self, exam):
        return (
            self.filter(exam=exam)
            .select_related('student', 'exam', 'room')
            .order_by('room__room_no', 'seat_index')
        )

    def delete_all_by_exam(self, exam):
        deleted, per_model = self.filter(exam=exam).delete()
        return per_model.get(self.model._meta.label, 0)

    def insert_many(self, allocations):
        allocations = list(allocations)
        seats = set()
        students = set()
        for allocation in allocations:
            seat_key = (allocation.exam_id, allocation.room_id, allocation.seat_number)
            if seat_key in seats:
                raise DuplicateSeat(details={
                    "exam": allocation.exam_id,
                    "room": allocation.room_id,
                    "seatNumber": allocation.seat_number,
                })
            seats.add(seat_key)

            student_key = (allocation.student_id, allocation.exam_id)
            if student_key in students:
                raise DuplicateStudentAssignment(details={
                    "exam": allocation.exam_id,
                    "student": allocation.student_id,
                })
            students.add(student_key)

        try:
            with transaction.atomic():
                return self.bulk_create(allocations)
        except IntegrityError as e:
            logger.error(f"Seat allocation insert rejected by the database: {e}")
            if SEAT_CONSTRAINT in str(e) or 'seat_number' in str(e):
                raise DuplicateSeat(details={"error": str(e)}) from e
            raise DuplicateStudentAssignment(details={"error": str(e)}) from e


class SeatAllocation(TimeStampedModel):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='seat_allocations')
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='seat_allocations')
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='seat_allocations')
    seat_number = models.CharField(max_length=10)
    seat_index = models.PositiveIntegerField(default=0)
    allocation_date = models.DateTimeField(default=timezone.now)

    objects = SeatAllocationManager()

    class Meta:
        ordering = ['exam', 'room__room_no', 'seat_index']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'room', 'seat_number'], name=SEAT_CONSTRAINT),
            models.UniqueConstraint(fields=['student', 'exam'], name=STUDENT_CONSTRAINT),
        ]

    def __str__(self):
        return f"{self.student.reg_no} - {self.room.room_no}/{self.seat_number}"
