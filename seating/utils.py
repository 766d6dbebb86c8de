# Standard Library
from dataclasses import dataclass, field
import logging
import math

# Django
from django.db import DatabaseError, transaction

# Local Models
from exams.models import Exam
from rooms.models import Room
from student.models import Student
from .dates import (
    ACCEPTABLE_FORMATS,
    InvalidDateError,
    calendar_day_or_none,
    day_bounds,
    parse_calendar_day,
)
from .exceptions import (
    AllRoomsOccupied,
    ExamNotFound,
    InsufficientCapacity,
    MissingRoomType,
    NoEligibleStudents,
    StoreUnavailable,
)
from .models import SeatAllocation

logger = logging.getLogger(__name__)

SEATS_PER_ROW = 10


@dataclass
class EligibleStudents:
    students: list
    total_found: int


@dataclass
class SeatAssignment:
    student: object
    room: object
    seat_index: int

    @property
    def seat_number(self):
        return seat_label(self.seat_index)


@dataclass
class SeatPlan:
    assignments: list = field(default_factory=list)
    rooms_used: int = 0
    total_capacity: int = 0

    @property
    def seats_allocated(self):
        return len(self.assignments)

    @property
    def remaining_capacity(self):
        return self.total_capacity - self.seats_allocated


@dataclass
class AllocationResult:
    exam: object
    allocations: list
    stats: dict
    exam_details: dict
    cleared: int = 0


def seat_label(index):
    """
    Seat index within a room -> row letter + column, ten seats per row.
    0 -> A1, 9 -> A10, 10 -> B1, 23 -> C4
    """
    row = chr(ord("A") + index // SEATS_PER_ROW)
    return f"{row}{index % SEATS_PER_ROW + 1}"


def exam_calendar_day(exam):
    try:
        return parse_calendar_day(exam.date)
    except InvalidDateError:
        logger.error(f"Invalid exam date format: {exam.date}")
        raise ExamNotFound(
            "Invalid exam date format",
            details={
                "examId": exam.pk,
                "receivedDate": str(exam.date),
                "acceptableFormats": ACCEPTABLE_FORMATS,
            },
        )


def get_slot_exams(day, time, exclude_exam=None):
    """Active exams held in the (calendar day, session) slot."""
    start, end = day_bounds(day)
    exams = Exam.objects.filter(date__gte=start, date__lt=end, time=time, is_active=True)
    if exclude_exam is not None:
        exams = exams.exclude(pk=exclude_exam.pk)
    return exams


def get_occupied_room_ids(exams):
    return set(
        SeatAllocation.objects.filter(exam__in=exams).values_list("room_id", flat=True).distinct()
    )


def describe_exams(exams):
    return [
        {
            "id": exam.pk,
            "subject": exam.subject,
            "subjectCode": exam.subject_code,
            "department": exam.department,
            "semester": exam.semester,
        }
        for exam in exams
    ]


def get_eligible_students(exam, exam_day=None):
    """
    Students who must sit ``exam``: same department and semester, active,
    subject code match (or case-insensitive subject substring when the exam
    has no code) and an exam date on the exam's calendar day.

    Returns the unique students ordered by registration number.
    """
    if exam_day is None:
        exam_day = exam_calendar_day(exam)

    query = {
        "department": exam.department,
        "semester": exam.semester,
        "is_active": True,
    }
    if exam.subject_code:
        query["subject_code"] = exam.subject_code
    elif exam.subject:
        query["subject__icontains"] = exam.subject

    logger.info(f"Student query: {query}")
    candidates = list(Student.objects.filter(**query).order_by("reg_no"))
    logger.info(f"Found {len(candidates)} potential students before date filtering")

    matched = []
    for student in candidates:
        student_day = calendar_day_or_none(student.exam_date)
        if student_day is None:
            logger.warning(f"Student {student.reg_no} has invalid/missing exam date: {student.exam_date}")
            continue
        if student_day == exam_day:
            matched.append(student)

    logger.info(f"After date filtering: {len(matched)} eligible students")

    if not matched:
        raise NoEligibleStudents(details={
            "exam": {
                "subject": exam.subject,
                "subjectCode": exam.subject_code,
                "department": exam.department,
                "semester": exam.semester,
                "date": exam_day.isoformat(),
            },
            "query": {key: str(value) for key, value in query.items()},
            "potentialStudents": len(candidates),
            "afterDateFilter": 0,
            "filteredOut": len(candidates),
        })

    # never drops a row while reg_no is unique; candidates are already in reg_no order
    unique_students = []
    seen_reg_nos = set()
    for student in matched:
        if student.reg_no in seen_reg_nos:
            continue
        seen_reg_nos.add(student.reg_no)
        unique_students.append(student)

    logger.info(f"Unique students after deduplication: {len(unique_students)}")
    return EligibleStudents(students=unique_students, total_found=len(matched))


def get_available_rooms(exam, room_type, exam_day=None):
    """
    Active rooms of ``room_type`` not holding seats for another exam in the
    same slot, smallest capacity first.
    """
    if exam_day is None:
        exam_day = exam_calendar_day(exam)

    all_rooms = list(
        Room.objects.filter(is_active=True, room_type=room_type).order_by("capacity", "room_no")
    )
    logger.info(f"Found {len(all_rooms)} {room_type} rooms")

    if not all_rooms:
        raise MissingRoomType(
            f"No {room_type} rooms available",
            details={
                "roomType": room_type,
                "suggestion": "Try a different room type or add more rooms",
            },
        )

    conflicting_exams = list(get_slot_exams(exam_day, exam.time, exclude_exam=exam))
    occupied_room_ids = get_occupied_room_ids(conflicting_exams)
    available_rooms = [room for room in all_rooms if room.pk not in occupied_room_ids]

    logger.info(f"Available rooms after conflict check: {len(available_rooms)}")

    if not available_rooms:
        raise AllRoomsOccupied(
            f"No available {room_type} rooms for {exam_day.isoformat()} at {exam.time}",
            details={
                "conflictingExams": describe_exams(conflicting_exams),
                "suggestion": "Consider changing exam time or using different room types",
            },
        )
    return available_rooms


def plan_seats(students, rooms):
    """
    Deterministic first-fit: fill each room from seat 0 in the order given,
    moving on only when the room is full. Every room restarts at seat A1.
    """
    total_capacity = sum(room.capacity for room in rooms)
    if len(students) > total_capacity:
        shortfall = len(students) - total_capacity
        largest = max([room.capacity for room in rooms] + [1])
        rooms_needed = math.ceil(shortfall / largest)
        raise InsufficientCapacity(
            "Insufficient room capacity",
            details={
                "students": len(students),
                "availableCapacity": total_capacity,
                "requiredAdditional": shortfall,
                "roomsNeeded": rooms_needed,
            },
            shortfall=shortfall,
            rooms_needed=rooms_needed,
        )

    plan = SeatPlan(total_capacity=total_capacity)
    student_index = 0
    for room in rooms:
        if student_index >= len(students):
            break
        seats = min(room.capacity, len(students) - student_index)
        if seats <= 0:
            continue
        for seat_index in range(seats):
            plan.assignments.append(SeatAssignment(students[student_index], room, seat_index))
            student_index += 1
        plan.rooms_used += 1
    return plan


def allocate_seats(exam_id, room_type):
    """
    Allocate seats for one exam in rooms of ``room_type``.

    The exam row is locked for the duration so two requests for the same exam
    cannot interleave; old allocations are cleared and the new plan written in
    the same transaction, so a failure leaves the previous plan in place.
    """
    logger.info(f"Seat allocation started - exam: {exam_id}, room type: {room_type}")
    try:
        with transaction.atomic():
            try:
                exam = Exam.objects.select_for_update().filter(pk=exam_id).first()
            except (TypeError, ValueError):
                exam = None
            if exam is None:
                logger.error(f"Exam not found with ID: {exam_id}")
                raise ExamNotFound(details={
                    "examId": exam_id,
                    "suggestion": "Verify the exam ID exists and is active",
                })

            exam_day = exam_calendar_day(exam)
            eligible = get_eligible_students(exam, exam_day)
            rooms = get_available_rooms(exam, room_type, exam_day)
            plan = plan_seats(eligible.students, rooms)

            cleared = SeatAllocation.objects.delete_all_by_exam(exam)
            logger.info(f"Cleared {cleared} existing allocations")

            SeatAllocation.objects.insert_many(
                SeatAllocation(
                    student=assignment.student,
                    exam=exam,
                    room=assignment.room,
                    seat_number=assignment.seat_number,
                    seat_index=assignment.seat_index,
                )
                for assignment in plan.assignments
            )
            saved = list(SeatAllocation.objects.find_by_exam(exam))
    except DatabaseError as e:
        logger.exception(f"Seat allocation failed for exam {exam_id}")
        raise StoreUnavailable(details={"error": str(e)}) from e

    logger.info(f"Seat allocation completed - {len(saved)} seats in {plan.rooms_used} rooms")
    return AllocationResult(
        exam=exam,
        allocations=saved,
        cleared=cleared,
        stats={
            "totalStudents": eligible.total_found,
            "uniqueStudents": len(eligible.students),
            "roomsUsed": plan.rooms_used,
            "seatsAllocated": len(saved),
            "remainingCapacity": plan.total_capacity - len(saved),
        },
        exam_details={
            "subject": exam.subject,
            "subjectCode": exam.subject_code,
            "date": exam_day.isoformat(),
            "time": exam.time,
        },
    )


def get_room_availability(day, time):
    """Split active rooms into available / occupied for a slot."""
    slot_exams = list(get_slot_exams(day, time))
    occupied_room_ids = get_occupied_room_ids(slot_exams)
    all_rooms = list(Room.objects.filter(is_active=True).order_by("room_no"))

    available = [room for room in all_rooms if room.pk not in occupied_room_ids]
    occupied = [room for room in all_rooms if room.pk in occupied_room_ids]
    return {
        "rooms": all_rooms,
        "available": available,
        "occupied": occupied,
        "exams": slot_exams,
    }
