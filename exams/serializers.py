from rest_framework import serializers
from rest_framework.validators import UniqueTogetherValidator

from sharedapp.fields import CalendarDayField
from .models import Exam


class ExamSerializer(serializers.ModelSerializer):
    date = CalendarDayField()

    class Meta:
        model = Exam
        fields = '__all__'
        validators = [
            UniqueTogetherValidator(
                queryset=Exam.objects.all(),
                fields=['date', 'time', 'subject_code', 'department', 'semester'],
                message='Exam schedule already exists for this time slot',
            ),
        ]

    def to_internal_value(self, data):
        data = data.copy()
        for key in ('time', 'subject_code', 'department'):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip().upper()
        if data.get('semester') is not None:
            data['semester'] = str(data['semester']).strip()
        return super().to_internal_value(data)
