from rest_framework import serializers
from rest_framework.validators import UniqueTogetherValidator

from exams.serializers import ExamSerializer
from rooms.serializers import RoomSerializer
from .models import FacultyAllocation


class FacultyAllocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = FacultyAllocation
        fields = [
            'id', 'faculty_name', 'faculty_id', 'designation', 'role',
            'email', 'exam', 'room', 'allocation_date',
        ]
        read_only_fields = ['allocation_date']
        validators = [
            UniqueTogetherValidator(
                queryset=FacultyAllocation.objects.all(),
                fields=['faculty_id', 'exam'],
                message='This faculty member is already allocated for this exam',
            ),
        ]

    def to_internal_value(self, data):
        data = data.copy()
        for key in ('faculty_name', 'faculty_id', 'email'):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        if isinstance(data.get('designation'), str):
            data['designation'] = data['designation'].strip().lower()
        if isinstance(data.get('role'), str):
            data['role'] = data['role'].strip().lower()
        return super().to_internal_value(data)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['exam'] = ExamSerializer(instance.exam).data
        data['room'] = RoomSerializer(instance.room).data
        return data
