import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from rooms.models import Room

logging.disable(logging.CRITICAL)

User = get_user_model()


class RoomApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="pass", is_staff=True)
        self.client.force_authenticate(self.admin)

    def test_create_room(self):
        response = self.client.post(
            "/api/rooms/",
            {"room_no": "R101", "floor_no": 1, "block": "A", "capacity": 30, "room_type": "Lab"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["room_type"], "lab")

    def test_duplicate_room_number_rejected(self):
        Room.objects.create(room_no="R101", floor_no=1, block="A", capacity=30, room_type="classroom")

        response = self.client.post(
            "/api/rooms/",
            {"room_no": "R101", "floor_no": 2, "block": "B", "capacity": 10, "room_type": "classroom"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("room_no", response.data)

    def test_capacity_must_be_positive(self):
        response = self.client.post(
            "/api/rooms/",
            {"room_no": "R101", "floor_no": 1, "block": "A", "capacity": 0, "room_type": "classroom"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_deactivates_room(self):
        room = Room.objects.create(room_no="R101", floor_no=1, block="A", capacity=30, room_type="classroom")

        response = self.client.delete(f"/api/rooms/{room.pk}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        room.refresh_from_db()
        self.assertFalse(room.is_active)
        listing = self.client.get("/api/rooms/")
        self.assertEqual(listing.data["data"], [])

    def test_bulk_skips_existing_and_repeated_rooms(self):
        Room.objects.create(room_no="R101", floor_no=1, block="A", capacity=30, room_type="classroom")

        response = self.client.post(
            "/api/rooms/bulk/",
            [
                {"roomNo": "R101", "floorNo": 1, "block": "A", "capacity": 30, "roomType": "classroom"},
                {"roomNo": "R102", "floorNo": 1, "block": "A", "capacity": 20, "roomType": "LAB"},
                {"room_no": "R102", "floor_no": 1, "block": "A", "capacity": 20, "room_type": "lab"},
            ],
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["skipped"], 2)
        self.assertEqual(response.data["duplicates"], ["R101"])
        self.assertEqual(Room.objects.get(room_no="R102").room_type, "lab")

    def test_bulk_rejects_invalid_row(self):
        response = self.client.post(
            "/api/rooms/bulk/",
            [{"roomNo": "R101", "floorNo": 1, "block": "A", "capacity": 30, "roomType": "hall"}],
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data["message"].startswith("Row 1"))
        self.assertFalse(Room.objects.exists())

    def test_bulk_rejects_non_object_row(self):
        response = self.client.post(
            "/api/rooms/bulk/",
            [{"roomNo": "R101", "floorNo": 1, "block": "A", "capacity": 30, "roomType": "classroom"}, "R102"],
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Row 2: Invalid room data in uploaded file")
        self.assertFalse(Room.objects.exists())

    def test_list_requires_authentication(self):
        self.client.force_authenticate(None)
        response = self.client.get("/api/rooms/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
