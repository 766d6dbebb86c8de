from django.db import models

from seating.dates import calendar_day_or_none, utc_midnight
from sharedapp.models import ActiveQuerySet, TimeStampedModel


class Student(TimeStampedModel):
    TYPE_CHOICES = [
        ('regular', 'Regular'),
        ('supply', 'Supply'),
        ('improvement', 'Improvement'),
    ]

    name = models.CharField(max_length=150)
    reg_no = models.CharField(max_length=30, unique=True)
    department = models.CharField(max_length=50)
    semester = models.CharField(max_length=5)
    email = models.EmailField(blank=True)
    exam_date = models.DateTimeField(null=True, blank=True)
    subject = models.CharField(max_length=200, blank=True)
    subject_code = models.CharField(max_length=30, blank=True)
    type = models.CharField(max_length=12, choices=TYPE_CHOICES, default='regular')
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['department', 'semester', 'reg_no']
        indexes = [
            models.Index(fields=['department', 'semester']),
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return f"{self.reg_no} - {self.name}"

    def save(self, *args, **kwargs):
        self.reg_no = (self.reg_no or '').strip().lower()
        self.department = (self.department or '').strip().upper()
        self.semester = str(self.semester or '').strip()
        self.email = (self.email or '').strip().lower()
        self.subject = (self.subject or '').strip()
        self.subject_code = (self.subject_code or '').strip().upper()
        if self.exam_date is not None:
            day = calendar_day_or_none(self.exam_date)
            self.exam_date = utc_midnight(day) if day else None
        super().save(*args, **kwargs)
