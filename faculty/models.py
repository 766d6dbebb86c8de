from django.db import models

from exams.models import Exam
from rooms.models import Room
from sharedapp.models import TimeStampedModel


class FacultyAllocation(TimeStampedModel):
    DESIGNATION_CHOICES = [
        ('faculty', 'Faculty'),
        ('lab technician', 'Lab Technician'),
    ]
    ROLE_CHOICES = [
        ('invigilator', 'Invigilator'),
        ('chief_invigilator', 'Chief Invigilator'),
        ('supervisor', 'Supervisor'),
    ]

    faculty_name = models.CharField(max_length=150)
    faculty_id = models.CharField(max_length=50)
    designation = models.CharField(max_length=20, choices=DESIGNATION_CHOICES, default='faculty')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='invigilator')
    email = models.EmailField()
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='faculty_allocations')
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='faculty_allocations')
    allocation_date = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['exam__date', 'exam__time', 'faculty_name']
        constraints = [
            models.UniqueConstraint(fields=['faculty_id', 'exam'], name='unique_faculty_per_exam'),
        ]

    def __str__(self):
        return f"{self.faculty_name} ({self.role}) - {self.exam}"

    def save(self, *args, **kwargs):
        self.faculty_name = (self.faculty_name or '').strip()
        self.faculty_id = (self.faculty_id or '').strip()
        self.designation = (self.designation or 'faculty').strip().lower()
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)
