from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint, UniqueConstraint
from app.common.mixins import BaseMixin


class NumberingRange(Base, BaseMixin):
    """Configured number range for one document type"""
    __tablename__ = "numbering_ranges"

    # Plain string so the allocator can look a range up by sequence name
    document_type = Column(String(20), nullable=False)
    prefix = Column(String(10), nullable=False, default="")
    start_number = Column(Integer, nullable=False)
    end_number = Column(Integer, nullable=False)
    current_number = Column(Integer, nullable=False)  # next number to be issued
    allow_manual_entry = Column(Boolean, nullable=False, default=False)
    allow_outside_range = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("document_type", name="uq_numbering_ranges_document_type"),
        CheckConstraint("start_number <= end_number", name="ck_numbering_ranges_bounds"),
    )

    @property
    def is_exhausted(self) -> bool:
        return self.current_number > self.end_number

    @property
    def remaining(self) -> int:
        return max(self.end_number - self.current_number + 1, 0)


class SequenceCounter(Base):
    """
    Unbounded legacy counter per sequence name.
    Only ever changed through the atomic upsert in numbering.sequence.
    """
    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("value >= 0", name="ck_sequence_counters_value"),
    )
