from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from sharedapp.fields import CalendarDayField
from .models import Student


class StudentSerializer(serializers.ModelSerializer):
    exam_date = CalendarDayField(required=False, allow_null=True)

    class Meta:
        model = Student
        fields = '__all__'
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'reg_no': {
                'validators': [
                    UniqueValidator(
                        queryset=Student.objects.all(),
                        message='Student with this reg_no already exists',
                        lookup='iexact',
                    ),
                ],
            },
        }

    def to_internal_value(self, data):
        data = data.copy()
        for key, case in (('reg_no', 'lower'), ('email', 'lower'), ('department', 'upper'), ('subject_code', 'upper')):
            if isinstance(data.get(key), str):
                value = data[key].strip()
                data[key] = value.lower() if case == 'lower' else value.upper()
        if data.get('semester') is not None:
            data['semester'] = str(data['semester']).strip()
        return super().to_internal_value(data)
