from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.response import Response


class BaseViewSet(viewsets.ModelViewSet):
    """
    Base ViewSet to format responses consistently.

    Set ``soft_delete = True`` on resources that are deactivated through their
    ``is_active`` flag instead of being removed.
    """

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    resource_name = None
    soft_delete = False
    public_actions = ["list", "retrieve"]

    def _resource_name(self):
        if self.resource_name:
            return self.resource_name
        return self.get_queryset().model._meta.verbose_name.title()

    def get_permissions(self):
        if self.action in self.public_actions:
            return [permissions.IsAuthenticated()]
        return [permissions.IsAdminUser()]

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response({"success": True, "data": serializer.data})

        serializer = self.get_serializer(queryset, many=True)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": f"{self._resource_name()}s fetched successfully",
        })

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": f"{self._resource_name()} fetched successfully",
        })

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        headers = self.get_success_headers(serializer.data)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": f"{self._resource_name()} created successfully",
        }, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response({
            "success": True,
            "data": serializer.data,
            "message": f"{self._resource_name()} updated successfully",
        })

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response({
            "success": True,
            "message": f"{self._resource_name()} deleted successfully",
        }, status=status.HTTP_204_NO_CONTENT)

    def perform_destroy(self, instance):
        if self.soft_delete:
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
        else:
            instance.delete()


def invalid_exam_id(value):
    return Response(
        {
            "success": False,
            "error_code": "INVALID_EXAM_ID",
            "message": "examId must be a numeric id",
            "details": {"examId": value},
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def health(request):
    return Response({
        "status": "OK",
        "message": "Exam Seating Management System API is running",
        "timestamp": timezone.now().isoformat(),
    })
