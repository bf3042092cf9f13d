"""
tests/test_hotel_service.py

Hotel administration.
"""

from __future__ import annotations

import uuid

import pytest

from app.services.hotel_service import HotelEmailConflictError, HotelService
from db.repositories.errors import HotelNotFoundError


@pytest.fixture()
def service(session_factory) -> HotelService:
    return HotelService(session_factory=session_factory)


class TestHotelService:
    def test_create_normalizes_email(self, service) -> None:
        hotel = service.create_hotel(name="  Harbour View ", email=" GM@HarbourView.Example ", total_available_rooms=120)

        assert hotel.name == "Harbour View"
        assert hotel.email == "gm@harbourview.example"
        assert hotel.is_active is True
        assert service.get_by_email("gm@HARBOURVIEW.example").id == hotel.id

    def test_email_must_be_unique(self, service) -> None:
        service.create_hotel(name="A", email="desk@example.com")

        with pytest.raises(HotelEmailConflictError):
            service.create_hotel(name="B", email="Desk@Example.com")

    def test_update_fields(self, service) -> None:
        hotel = service.create_hotel(name="A", email="a@example.com", total_available_rooms=50)

        updated = service.update_hotel(hotel.id, name="A Prime", total_available_rooms=55)

        assert updated.name == "A Prime"
        assert updated.total_available_rooms == 55
        assert updated.email == "a@example.com"

    def test_update_rejects_taken_email(self, service) -> None:
        service.create_hotel(name="A", email="a@example.com")
        second = service.create_hotel(name="B", email="b@example.com")

        with pytest.raises(HotelEmailConflictError):
            service.update_hotel(second.id, email="A@example.com")
        assert service.update_hotel(second.id, email="B@Example.com").email == "b@example.com"

    def test_activation_controls_listing(self, service) -> None:
        first = service.create_hotel(name="Alpha", email="alpha@example.com")
        service.create_hotel(name="Beta", email="beta@example.com")

        service.deactivate(first.id)

        assert [hotel.name for hotel in service.list_hotels()] == ["Alpha", "Beta"]
        assert [hotel.name for hotel in service.list_active()] == ["Beta"]
        assert service.activate(first.id).is_active is True
        assert len(service.list_active()) == 2

    def test_unknown_hotel(self, service) -> None:
        with pytest.raises(HotelNotFoundError):
            service.get_hotel(uuid.uuid4())
        with pytest.raises(HotelNotFoundError):
            service.deactivate(uuid.uuid4())
