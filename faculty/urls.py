from rest_framework.routers import DefaultRouter
from django.urls import path, include
from .views import FacultyAllocationViewSet

router = DefaultRouter()
router.register(r'', FacultyAllocationViewSet, basename='faculty-allocation')

urlpatterns = [
    path('', include(router.urls)),
]
