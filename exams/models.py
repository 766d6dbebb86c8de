from django.db import models

from seating.dates import parse_calendar_day, utc_midnight
from sharedapp.models import ActiveQuerySet, TimeStampedModel


class Exam(TimeStampedModel):
    TIME_CHOICES = [
        ('FN', 'Forenoon'),
        ('AN', 'Afternoon'),
    ]
    TYPE_CHOICES = [
        ('regular', 'Regular'),
        ('supply', 'Supply'),
    ]

    date = models.DateTimeField()
    time = models.CharField(max_length=2, choices=TIME_CHOICES)
    subject = models.CharField(max_length=200)
    subject_code = models.CharField(max_length=30)
    department = models.CharField(max_length=50)
    semester = models.CharField(max_length=5)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='regular')
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['date', 'time']
        constraints = [
            models.UniqueConstraint(
                fields=['date', 'time', 'subject_code', 'department', 'semester'],
                name='unique_exam_slot',
            ),
        ]

    def __str__(self):
        return f"{self.subject_code} - {self.calendar_day} {self.time}"

    @property
    def calendar_day(self):
        return parse_calendar_day(self.date)

    def save(self, *args, **kwargs):
        # exams are stored at midnight UTC of their calendar day
        self.date = utc_midnight(parse_calendar_day(self.date))
        self.time = (self.time or '').strip().upper()
        self.subject = (self.subject or '').strip()
        self.subject_code = (self.subject_code or '').strip().upper()
        self.department = (self.department or '').strip().upper()
        self.semester = str(self.semester or '').strip()
        super().save(*args, **kwargs)
