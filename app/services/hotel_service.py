"""
app/services/hotel_service.py

Hotel administration: registration, edits and activation state.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.repositories.hotel_repository import HotelRepository, normalize_email
from db.models.hotel import Hotel
from db.repositories.errors import HotelNotFoundError

logger = logging.getLogger(__name__)


class HotelEmailConflictError(ValueError):
    """
    Raised when another hotel already routes mail from the same address.
    """


class HotelService:
    def __init__(self, *, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    def create_hotel(
        self,
        *,
        name: str,
        email: str,
        total_available_rooms: int = 0,
        is_active: bool = True,
    ) -> Hotel:
        try:
            with self._session_factory() as session:
                with session.begin():
                    repository = HotelRepository(session)
                    if repository.get_by_email(email) is not None:
                        raise HotelEmailConflictError(f"A hotel with email {normalize_email(email)} exists")
                    hotel = repository.create(
                        name=name,
                        email=email,
                        total_available_rooms=total_available_rooms,
                        is_active=is_active,
                    )
                session.refresh(hotel)
                session.expunge(hotel)
        except IntegrityError as exc:
            raise HotelEmailConflictError(f"A hotel with email {normalize_email(email)} exists") from exc

        logger.info("Hotel created id=%s email=%s", hotel.id, hotel.email)
        return hotel

    def update_hotel(
        self,
        hotel_id: uuid.UUID,
        *,
        name: str | None = None,
        email: str | None = None,
        total_available_rooms: int | None = None,
    ) -> Hotel:
        """
        Apply the given fields; a changed room count only affects snapshots
        registered afterwards.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    repository = HotelRepository(session)
                    hotel = self._require(repository, hotel_id)
                    if name is not None:
                        hotel.name = name.strip()
                    if email is not None:
                        normalized = normalize_email(email)
                        other = repository.get_by_email(normalized)
                        if other is not None and other.id != hotel_id:
                            raise HotelEmailConflictError(f"A hotel with email {normalized} exists")
                        hotel.email = normalized
                    if total_available_rooms is not None:
                        hotel.total_available_rooms = total_available_rooms
                session.refresh(hotel)
                session.expunge(hotel)
        except IntegrityError as exc:
            raise HotelEmailConflictError(f"Email already in use: {email}") from exc
        return hotel

    def set_active(self, hotel_id: uuid.UUID, is_active: bool) -> Hotel:
        with self._session_factory() as session:
            with session.begin():
                hotel = self._require(HotelRepository(session), hotel_id)
                hotel.is_active = is_active
            session.refresh(hotel)
            session.expunge(hotel)
        logger.info("Hotel id=%s active=%s", hotel_id, is_active)
        return hotel

    def activate(self, hotel_id: uuid.UUID) -> Hotel:
        return self.set_active(hotel_id, True)

    def deactivate(self, hotel_id: uuid.UUID) -> Hotel:
        return self.set_active(hotel_id, False)

    def list_hotels(self, *, active_only: bool = False) -> list[Hotel]:
        with self._session_factory() as session:
            hotels = HotelRepository(session).list_hotels(active_only=active_only)
            session.expunge_all()
        return hotels

    def list_active(self) -> list[Hotel]:
        return self.list_hotels(active_only=True)

    def get_hotel(self, hotel_id: uuid.UUID) -> Hotel:
        with self._session_factory() as session:
            hotel = self._require(HotelRepository(session), hotel_id)
            session.expunge(hotel)
        return hotel

    def get_by_email(self, email: str) -> Hotel | None:
        with self._session_factory() as session:
            hotel = HotelRepository(session).get_by_email(email)
            if hotel is not None:
                session.expunge(hotel)
        return hotel

    @staticmethod
    def _require(repository: HotelRepository, hotel_id: uuid.UUID) -> Hotel:
        hotel = repository.get(hotel_id)
        if hotel is None:
            raise HotelNotFoundError(f"Hotel {hotel_id} not found")
        return hotel


@lru_cache(maxsize=1)
def get_hotel_service() -> HotelService:
    return HotelService()
