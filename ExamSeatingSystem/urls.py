from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from sharedapp.views import health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/health/", health, name="health"),
    path("api/rooms/", include("rooms.urls")),
    path("api/exam-schedules/", include("exams.urls")),
    path("api/students/", include("student.urls")),
    path("api/seating/", include("seating.urls")),
    path("api/faculty-allocations/", include("faculty.urls")),
    path("api/attendance/", include("attendance.urls")),
]
