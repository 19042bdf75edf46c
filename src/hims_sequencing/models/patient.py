"""Patient records and the visit tokens issued to them."""
import datetime

from sqlalchemy import JSON, BigInteger, Date, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hims_sequencing.db.session import Base
from hims_sequencing.db.time import utcnow


class Patient(Base):
    """A registered patient.

    ``mr_number`` is the display string allocated at registration; it is
    never regenerated.
    """

    __tablename__ = "patient"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mr_number: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    age_unit: Mapped[str] = mapped_column(Text, nullable=False, default="Years")
    gender: Mapped[str] = mapped_column(Text, nullable=False)
    contact: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    blood_group: Mapped[str] = mapped_column(Text, nullable=False)
    # Subset of {"OPD", "IPD"}.
    patient_type: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    cnic: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(Text, nullable=True)
    guardian_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    guardian_relation: Mapped[str | None] = mapped_column(Text, nullable=True)
    guardian_contact: Mapped[str | None] = mapped_column(Text, nullable=True)
    insurance_provider: Mapped[str | None] = mapped_column(Text, nullable=True)
    insurance_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    allergies: Mapped[str | None] = mapped_column(Text, nullable=True)
    chronic_diseases: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    registration_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    last_visit: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    tokens: Mapped[list["VisitToken"]] = relationship(
        back_populates="patient",
        order_by="VisitToken.id",
    )


class VisitToken(Base):
    """Queue ticket issued at registration or check-in."""

    __tablename__ = "visit_token"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("patient.id", ondelete="CASCADE"), nullable=False
    )
    token_number: Mapped[str] = mapped_column(Text, nullable=False)
    # Raw counter; only used to order the queue.
    token_raw: Mapped[int] = mapped_column(BigInteger, nullable=False)
    issued_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    patient: Mapped[Patient] = relationship(back_populates="tokens")
