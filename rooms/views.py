import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from sharedapp.utils import clean_str, pick
from sharedapp.views import BaseViewSet
from .models import Room
from .serializers import BulkRoomSerializer, RoomSerializer

logger = logging.getLogger(__name__)


class RoomViewSet(BaseViewSet):
    queryset = Room.objects.active().order_by("room_no")
    serializer_class = RoomSerializer
    resource_name = "Room"
    soft_delete = True
    filterset_fields = ["room_type", "block", "floor_no"]
    search_fields = ["room_no", "block"]

    def get_queryset(self):
        # soft deleted rooms stay reachable for update/reactivation
        if self.action in ["list", "retrieve"]:
            return Room.objects.active().order_by("room_no")
        return Room.objects.all().order_by("room_no")

    @action(detail=False, methods=["POST"], url_path="bulk")
    def bulk(self, request):
        rows = request.data
        if not isinstance(rows, list) or not rows:
            return Response(
                {"success": False, "message": "Input must be a non-empty array of rooms"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        formatted = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                return Response(
                    {"success": False, "message": f"Row {index + 1}: Invalid room data in uploaded file"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            serializer = BulkRoomSerializer(data={
                "room_no": clean_str(pick(row, "room_no", "roomNo")),
                "floor_no": pick(row, "floor_no", "floorNo"),
                "block": clean_str(pick(row, "block")),
                "capacity": pick(row, "capacity"),
                "room_type": clean_str(pick(row, "room_type", "roomType"), case="lower"),
            })
            if not serializer.is_valid():
                return Response(
                    {
                        "success": False,
                        "message": f"Row {index + 1}: Invalid room data in uploaded file",
                        "errors": serializer.errors,
                    },
                    status=status.HTTP_400_BAD_REQUEST,
                )
            formatted.append(serializer.validated_data)

        room_nos = [room["room_no"] for room in formatted]
        existing = set(Room.objects.filter(room_no__in=room_nos).values_list("room_no", flat=True))

        new_rooms = []
        seen = set(existing)
        for room in formatted:
            if room["room_no"] in seen:
                continue
            seen.add(room["room_no"])
            new_rooms.append(Room(is_active=True, **room))

        with transaction.atomic():
            saved = Room.objects.bulk_create(new_rooms)

        logger.info(f"Bulk room upload: {len(saved)} created, {len(formatted) - len(saved)} skipped")
        return Response(
            {
                "success": True,
                "message": f"{len(saved)} new rooms created successfully",
                "skipped": len(formatted) - len(saved),
                "duplicates": sorted(existing),
                "data": RoomSerializer(saved, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )
