from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from app.common.exceptions import InvalidRange, NotFound
from app.modules.numbering.models import NumberingRange
from app.modules.numbering.schemas import (
    DocumentType, NumberingRangeUpsert, CurrentNumberUpdate, NextNumberOut
)
from app.modules.numbering.sequence import allocate, peek, format_number

logger = logging.getLogger(__name__)


class NumberingService:
    def __init__(self, db: Session):
        self.db = db

    def list_ranges(self) -> List[NumberingRange]:
        return self.db.query(NumberingRange).order_by(NumberingRange.document_type).all()

    def get_range(self, document_type: DocumentType) -> NumberingRange:
        numbering_range = self.db.query(NumberingRange).filter(
            NumberingRange.document_type == document_type.value
        ).first()
        if not numbering_range:
            raise NotFound(f"No numbering configuration for {document_type.value}")
        return numbering_range

    def upsert_range(self, data: NumberingRangeUpsert) -> NumberingRange:
        """
        Create or replace the range for a document type.

        The current number survives an edit unless it falls outside the new
        bounds. Moving it back to the start can hand out numbers that earlier
        documents already used, so that case is logged as a warning.
        """
        if data.start_number > data.end_number:
            raise InvalidRange()

        try:
            numbering_range = self.db.query(NumberingRange).filter(
                NumberingRange.document_type == data.document_type.value
            ).first()

            if numbering_range:
                numbering_range.prefix = data.prefix
                numbering_range.start_number = data.start_number
                numbering_range.end_number = data.end_number
                numbering_range.allow_manual_entry = data.allow_manual_entry
                numbering_range.allow_outside_range = data.allow_outside_range

                current = numbering_range.current_number
                if current < data.start_number:
                    numbering_range.current_number = data.start_number
                    logger.info(
                        f"{data.document_type.value} current number {current} below new start, "
                        f"moved to {data.start_number}"
                    )
                elif current > data.end_number and not data.allow_outside_range:
                    numbering_range.current_number = data.start_number
                    logger.warning(
                        f"{data.document_type.value} current number {current} is past the new end "
                        f"{data.end_number}; restarting at {data.start_number}, numbers may be reused"
                    )
            else:
                numbering_range = NumberingRange(
                    document_type=data.document_type.value,
                    prefix=data.prefix,
                    start_number=data.start_number,
                    end_number=data.end_number,
                    current_number=data.start_number,
                    allow_manual_entry=data.allow_manual_entry,
                    allow_outside_range=data.allow_outside_range
                )
                self.db.add(numbering_range)
                logger.info(
                    f"Created {data.document_type.value} range "
                    f"{data.start_number}-{data.end_number}"
                )

            self.db.commit()
            self.db.refresh(numbering_range)
            return numbering_range

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving numbering range: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error saving numbering configuration: {str(e)}"
            )

    def set_current_number(self, data: CurrentNumberUpdate) -> NumberingRange:
        """Operator override of the next number to issue"""
        numbering_range = self.get_range(data.document_type)
        if data.current_number < numbering_range.start_number:
            raise InvalidRange(
                f"Current number must be at least the range start ({numbering_range.start_number})"
            )

        logger.warning(
            f"{data.document_type.value} current number changed "
            f"{numbering_range.current_number} -> {data.current_number}"
        )
        numbering_range.current_number = data.current_number
        self.db.commit()
        self.db.refresh(numbering_range)
        return numbering_range

    def next_number(self, document_type: DocumentType) -> NextNumberOut:
        """Consume the next number, e.g. to pre-print a document"""
        try:
            value = allocate(self.db, document_type.value)
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise

        return NextNumberOut(
            document_type=document_type,
            number=value,
            formatted=format_number(self._prefix(document_type), value)
        )

    def peek_number(self, document_type: DocumentType) -> NextNumberOut:
        value = peek(self.db, document_type.value)
        if value is None:
            return NextNumberOut(document_type=document_type, exhausted=True)
        return NextNumberOut(
            document_type=document_type,
            number=value,
            formatted=format_number(self._prefix(document_type), value)
        )

    def _prefix(self, document_type: DocumentType) -> str:
        numbering_range = self.db.query(NumberingRange).filter(
            NumberingRange.document_type == document_type.value
        ).first()
        return numbering_range.prefix if numbering_range else ""
