from django.db import models
from django.utils import timezone

from exams.models import Exam
from rooms.models import Room
from seating.dates import parse_calendar_day, utc_midnight
from sharedapp.models import TimeStampedModel
from student.models import Student


class Attendance(TimeStampedModel):
    STATUS_CHOICES = [
        ('present', 'Present'),
        ('absent', 'Absent'),
    ]

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='attendance')
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='attendance')
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='attendance')
    invigilator_id = models.CharField(max_length=50)
    invigilator_name = models.CharField(max_length=150)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='present')
    malpractice_reported = models.BooleanField(default=False)
    malpractice_description = models.TextField(blank=True, default='')
    malpractice_reported_at = models.DateTimeField(null=True, blank=True)
    marked_at = models.DateTimeField(default=timezone.now)
    exam_date = models.DateTimeField()
    exam_time = models.CharField(max_length=2, choices=Exam.TIME_CHOICES)

    class Meta:
        ordering = ['-exam_date', 'exam_time', 'student__reg_no']
        constraints = [
            models.UniqueConstraint(fields=['student', 'exam'], name='unique_attendance_per_exam'),
        ]
        indexes = [
            models.Index(fields=['exam_date', 'exam_time', 'status']),
            models.Index(fields=['invigilator_id']),
        ]

    def __str__(self):
        return f"{self.student.reg_no} - {self.exam} ({self.status})"

    def save(self, *args, **kwargs):
        self.exam_date = utc_midnight(parse_calendar_day(self.exam_date))
        super().save(*args, **kwargs)
