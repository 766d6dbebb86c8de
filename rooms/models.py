from django.core.validators import MinValueValidator
from django.db import models

from sharedapp.models import ActiveQuerySet, TimeStampedModel


class Room(TimeStampedModel):
    ROOM_TYPE_CHOICES = [
        ('classroom', 'Classroom'),
        ('lab', 'Lab'),
        ('drawinghall', 'Drawing Hall'),
    ]

    room_no = models.CharField(max_length=50, unique=True)
    floor_no = models.IntegerField()
    block = models.CharField(max_length=50)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    room_type = models.CharField(max_length=20, choices=ROOM_TYPE_CHOICES)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['room_no']
        indexes = [
            models.Index(fields=['room_type', 'is_active']),
        ]

    def __str__(self):
        return f"{self.room_no} ({self.capacity} seats)"
