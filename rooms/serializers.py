from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from rooms.models import Room


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = '__all__'
        extra_kwargs = {
            'room_no': {
                'validators': [
                    UniqueValidator(queryset=Room.objects.all(), message='Room number already exists'),
                ],
            },
        }

    def to_internal_value(self, data):
        data = data.copy()
        if isinstance(data.get('room_type'), str):
            data['room_type'] = data['room_type'].strip().lower()
        if isinstance(data.get('room_no'), str):
            data['room_no'] = data['room_no'].strip()
        return super().to_internal_value(data)


class BulkRoomSerializer(serializers.Serializer):
    room_no = serializers.CharField()
    floor_no = serializers.IntegerField()
    block = serializers.CharField()
    capacity = serializers.IntegerField(min_value=1)
    room_type = serializers.ChoiceField(choices=Room.ROOM_TYPE_CHOICES)
