"""
Document number allocation.

Numbers come from the NumberingRange configured for a document type. When no
range exists, or the range is exhausted and overflow is allowed, they come from
the legacy SequenceCounter instead. Both paths are a single conditional
UPDATE/UPSERT ... RETURNING statement, so concurrent callers can never receive
the same value. Allocation joins the caller's transaction: if the document
insert is rolled back, so is the number.
"""
import logging
from typing import Optional

from sqlalchemy import update, case, exists
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.common.exceptions import RangeExhausted, ManualNumberNotAllowed
from app.core.config import settings
from app.modules.numbering.models import NumberingRange, SequenceCounter

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def get_next_sequence_value(db: Session, sequence_name: str, floor: int = 0) -> int:
    """
    Increment the legacy counter for ``sequence_name`` and return the new value.

    The counter is created on first use. ``floor`` lifts the counter to at least
    that value before incrementing, which keeps overflow numbers above the end
    of an exhausted range.
    """
    dialect = db.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Sequence counters are not supported on the {dialect} dialect")

    stmt = insert(SequenceCounter).values(name=sequence_name, value=floor + 1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SequenceCounter.name],
        set_={
            "value": case(
                (SequenceCounter.value < floor, floor + 1),
                else_=SequenceCounter.value + 1,
            )
        },
    ).returning(SequenceCounter.value)

    return db.execute(stmt).scalar_one()


def allocate(db: Session, sequence_name: str) -> int:
    """
    Issue the next number for ``sequence_name``.

    Raises RangeExhausted when the configured range is used up and does not
    allow numbers outside of it.
    """
    stmt = (
        update(NumberingRange)
        .where(
            NumberingRange.document_type == sequence_name,
            NumberingRange.current_number <= NumberingRange.end_number,
        )
        .values(current_number=NumberingRange.current_number + 1)
        .returning(NumberingRange.current_number)
    )
    advanced_to = db.execute(stmt).scalar_one_or_none()
    if advanced_to is not None:
        value = advanced_to - 1
        logger.debug(f"Allocated {sequence_name} #{value} from configured range")
        return value

    numbering_range = db.query(NumberingRange).filter(
        NumberingRange.document_type == sequence_name
    ).first()

    if numbering_range is None:
        value = get_next_sequence_value(db, sequence_name)
        logger.debug(f"Allocated {sequence_name} #{value} from legacy counter")
        return value

    if numbering_range.allow_outside_range:
        value = get_next_sequence_value(db, sequence_name, floor=numbering_range.end_number)
        logger.info(
            f"{sequence_name} range {numbering_range.start_number}-{numbering_range.end_number} "
            f"exhausted, issued #{value} outside the range"
        )
        return value

    logger.warning(f"Refusing to allocate {sequence_name}: range exhausted")
    raise RangeExhausted(sequence_name)


def peek(db: Session, sequence_name: str) -> Optional[int]:
    """Number the next allocation would return, or None if it would fail."""
    numbering_range = db.query(NumberingRange).filter(
        NumberingRange.document_type == sequence_name
    ).first()

    counter = db.get(SequenceCounter, sequence_name)
    counter_value = counter.value if counter else 0

    if numbering_range is None:
        return counter_value + 1
    if not numbering_range.is_exhausted:
        return numbering_range.current_number
    if numbering_range.allow_outside_range:
        return max(counter_value, numbering_range.end_number) + 1
    return None


def format_number(prefix: Optional[str], value: int) -> str:
    return f"{prefix or ''}{value:0{settings.NUMBER_PADDING}d}"


def assign_number(db: Session, sequence_name: str, number_column, manual_number: Optional[int] = None) -> int:
    """
    Pick the number for a new document.

    A manual number is accepted as-is when the document type permits manual
    entry; the unique constraint on ``number_column`` catches collisions at
    insert time. Allocated numbers that a manual entry already took are skipped.
    """
    if manual_number is not None:
        numbering_range = db.query(NumberingRange).filter(
            NumberingRange.document_type == sequence_name
        ).first()
        if numbering_range is not None and not numbering_range.allow_manual_entry:
            raise ManualNumberNotAllowed(sequence_name)
        logger.info(f"Using manual {sequence_name} number {manual_number}")
        return manual_number

    while True:
        value = allocate(db, sequence_name)
        taken = db.query(exists().where(number_column == value)).scalar()
        if not taken:
            return value
        logger.warning(f"{sequence_name} #{value} already used by a manual entry, skipping")
