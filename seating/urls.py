from rest_framework.routers import DefaultRouter
from django.urls import path, include
from .views import SeatingViewSet

router = DefaultRouter()
router.register(r'', SeatingViewSet, basename='seating')

urlpatterns = [
    path('', include(router.urls)),
]
