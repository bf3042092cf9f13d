"""
app/repositories/hotel_repository.py

Persistence helpers for hotels.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.hotel import Hotel


def normalize_email(email: str) -> str:
    return email.strip().lower()


class HotelRepository:
    """
    Repository for hotel lookups and registration.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, hotel_id: uuid.UUID) -> Hotel | None:
        return self._session.get(Hotel, hotel_id)

    def get_by_email(self, email: str) -> Hotel | None:
        """
        Resolve a hotel by its routing address, case-insensitively.
        """

        stmt = select(Hotel).where(Hotel.email == normalize_email(email))
        return self._session.execute(stmt).scalars().first()

    def list_hotels(self, *, active_only: bool = False) -> list[Hotel]:
        stmt = select(Hotel)
        if active_only:
            stmt = stmt.where(Hotel.is_active.is_(True))
        stmt = stmt.order_by(Hotel.name.asc())
        return list(self._session.execute(stmt).scalars().all())

    def create(
        self,
        *,
        name: str,
        email: str,
        total_available_rooms: int = 0,
        is_active: bool = True,
    ) -> Hotel:
        hotel = Hotel(
            name=name.strip(),
            email=normalize_email(email),
            total_available_rooms=total_available_rooms,
            is_active=is_active,
        )
        self._session.add(hotel)
        self._session.flush()
        return hotel
