from rest_framework import serializers

from exams.serializers import ExamSerializer
from rooms.serializers import RoomSerializer
from seating.dates import InvalidDateError, parse_calendar_day
from student.serializers import StudentSerializer
from .models import Attendance


class AttendanceSerializer(serializers.ModelSerializer):
    student = StudentSerializer(read_only=True)
    exam = ExamSerializer(read_only=True)
    room = RoomSerializer(read_only=True)
    exam_date = serializers.SerializerMethodField()

    class Meta:
        model = Attendance
        fields = [
            'id', 'student', 'exam', 'room', 'invigilator_id', 'invigilator_name',
            'status', 'malpractice_reported', 'malpractice_description',
            'malpractice_reported_at', 'marked_at', 'exam_date', 'exam_time',
        ]

    def get_exam_date(self, obj):
        return parse_calendar_day(obj.exam_date).isoformat()


class MarkAttendanceSerializer(serializers.Serializer):
    studentId = serializers.IntegerField()
    examId = serializers.IntegerField()
    roomId = serializers.IntegerField()
    status = serializers.ChoiceField(choices=['present', 'absent'])
    facultyId = serializers.CharField()
    facultyName = serializers.CharField()


class ReportMalpracticeSerializer(serializers.Serializer):
    studentId = serializers.IntegerField()
    examId = serializers.IntegerField()
    roomId = serializers.IntegerField(required=False)
    description = serializers.CharField()
    facultyId = serializers.CharField()
    facultyName = serializers.CharField()


class ExamSlotSerializer(serializers.Serializer):
    examDate = serializers.CharField()
    examTime = serializers.ChoiceField(choices=['FN', 'AN'])

    def to_internal_value(self, data):
        data = {key: data.get(key) for key in ('examDate', 'examTime') if data.get(key) is not None}
        if data.get('examTime'):
            data['examTime'] = str(data['examTime']).strip().upper()
        return super().to_internal_value(data)

    def validate_examDate(self, value):
        try:
            return parse_calendar_day(value)
        except InvalidDateError:
            raise serializers.ValidationError(f"Invalid date format - {value}")
