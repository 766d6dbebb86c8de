from rest_framework import status


class AllocationError(Exception):
    """Base class for every failure the seat allocator reports to callers."""

    error_code = "ALLOCATION_FAILED"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Seat allocation failed"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def as_response_data(self):
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class AllocationValidationError(AllocationError):
    error_code = "MISSING_FIELDS"
    default_message = "Both examId and roomType are required"


class ExamNotFound(AllocationError):
    """Unknown exam id, or an exam whose date cannot be parsed."""

    error_code = "EXAM_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Exam not found"


class NoEligibleStudents(AllocationError):
    error_code = "NO_ELIGIBLE_STUDENTS"
    default_message = "No eligible students found matching the criteria"


class MissingRoomType(AllocationError):
    error_code = "ROOM_TYPE_UNAVAILABLE"


class AllRoomsOccupied(AllocationError):
    error_code = "ALL_ROOMS_OCCUPIED"


class InsufficientCapacity(AllocationError):
    error_code = "INSUFFICIENT_CAPACITY"

    def __init__(self, message=None, details=None, shortfall=0, rooms_needed=0):
        super().__init__(message, details)
        self.shortfall = shortfall
        self.rooms_needed = rooms_needed


class DuplicateSeat(AllocationError):
    error_code = "DUPLICATE_SEAT"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Two students were assigned the same seat"


class DuplicateStudentAssignment(AllocationError):
    error_code = "DUPLICATE_STUDENT_ASSIGNMENT"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "A student was assigned more than one seat for the exam"


class StoreUnavailable(AllocationError):
    error_code = "STORE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Internal server error during seat allocation"
