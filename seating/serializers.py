from rest_framework import serializers

from exams.serializers import ExamSerializer
from rooms.serializers import RoomSerializer
from student.serializers import StudentSerializer
from .dates import InvalidDateError, parse_calendar_day
from .models import SeatAllocation


class SeatAllocationDetailSerializer(serializers.ModelSerializer):
    student = StudentSerializer(read_only=True)
    exam = ExamSerializer(read_only=True)
    room = RoomSerializer(read_only=True)

    class Meta:
        model = SeatAllocation
        fields = ['id', 'student', 'exam', 'room', 'seat_number', 'seat_index', 'allocation_date']


class AllocateSeatsSerializer(serializers.Serializer):
    examId = serializers.CharField(trim_whitespace=True)
    roomType = serializers.CharField(trim_whitespace=True)


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.CharField()
    time = serializers.ChoiceField(choices=['FN', 'AN'])

    def to_internal_value(self, data):
        data = {key: data.get(key) for key in ('date', 'time') if data.get(key) is not None}
        if data.get('time'):
            data['time'] = str(data['time']).strip().upper()
        return super().to_internal_value(data)

    def validate_date(self, value):
        try:
            return parse_calendar_day(value)
        except InvalidDateError:
            raise serializers.ValidationError(f"Invalid date format - {value}")


class ExamIdSerializer(serializers.Serializer):
    examId = serializers.CharField()
