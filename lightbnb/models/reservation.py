"""
Reservation model linking a guest to a property stay.
"""

from sqlalchemy import Date, Integer, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from lightbnb.database import Base
from datetime import date


class Reservation(Base):
    """A guest's booking of a property, starting on start_date."""

    __tablename__ = "reservations"

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    guest_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, guest_id={self.guest_id}, start_date={self.start_date})>"


# Guest listing is filtered by guest and ordered by start date
guest_start_date_index = Index(
    "idx_reservations_guest_start_date",
    Reservation.guest_id,
    Reservation.start_date
)
