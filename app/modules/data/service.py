"""
Whole-ledger maintenance: reset, JSON backup, restore and demo data.

Tables are processed in foreign key order (reverse order for deletes), so
the operations need no knowledge of individual modules beyond their models
being registered on Base.
"""
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy import select, Enum as SAEnum
from sqlalchemy.orm import Session
from datetime import date, datetime
from decimal import Decimal
from typing import Dict
import uuid
import logging

from app.common.exceptions import LedgerError
from app.database.database import Base
from app.modules.data.schemas import BackupPayload, DataOperationResult, BACKUP_FORMAT_VERSION
from app.modules.data.seed_data import MOCK_CUSTOMERS, MOCK_VEHICLES
from app.modules.masters.models import Customer, Vehicle

# Registers every ledger table on Base.metadata
import app.modules.numbering.models  # noqa: F401
import app.modules.lorry_receipts.models  # noqa: F401
import app.modules.invoices.models  # noqa: F401
import app.modules.payments.models  # noqa: F401
import app.modules.truck_hiring_notes.models  # noqa: F401

logger = logging.getLogger(__name__)


def _coerce(column, value):
    """Turn a JSON value from a backup back into the column's Python type"""
    if value is None:
        return None
    if isinstance(column.type, SAEnum) and column.type.enum_class is not None:
        return column.type.enum_class(value)
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value

    if python_type is uuid.UUID:
        return uuid.UUID(str(value))
    if python_type is Decimal:
        return Decimal(str(value))
    if python_type is datetime:
        return datetime.fromisoformat(value)
    if python_type is date:
        return date.fromisoformat(value)
    return value


class DataService:
    def __init__(self, db: Session):
        self.db = db

    @property
    def tables(self):
        return Base.metadata.sorted_tables

    def _delete_all(self) -> Dict[str, int]:
        counts = {}
        for table in reversed(self.tables):
            counts[table.name] = self.db.execute(table.delete()).rowcount
        return counts

    def reset(self) -> DataOperationResult:
        """Delete every document, master record, numbering range and counter"""
        try:
            counts = self._delete_all()
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error resetting data: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to reset data: {str(e)}"
            )

        logger.warning(f"All data reset ({sum(counts.values())} rows deleted)")
        return DataOperationResult(message="All data has been reset successfully.", counts=counts)

    def backup(self) -> BackupPayload:
        tables = {}
        for table in self.tables:
            rows = self.db.execute(select(table)).mappings().all()
            tables[table.name] = [
                jsonable_encoder(dict(row), custom_encoder={Decimal: str})
                for row in rows
            ]
        logger.info(f"Exported backup of {len(tables)} tables")
        return BackupPayload(tables=tables)

    def restore(self, payload: BackupPayload) -> DataOperationResult:
        """Replace all state with the contents of a backup. Nothing is merged."""
        if payload.version != BACKUP_FORMAT_VERSION:
            raise LedgerError(f"Unsupported backup version {payload.version}")

        known = {table.name for table in self.tables}
        unknown = sorted(set(payload.tables) - known)
        if unknown:
            raise LedgerError(f"Unknown table(s) in backup: {', '.join(unknown)}")

        counts = {}
        try:
            self._delete_all()
            for table in self.tables:
                rows = [
                    {
                        column.name: _coerce(column, row[column.name])
                        for column in table.columns
                        if column.name in row
                    }
                    for row in payload.tables.get(table.name, [])
                ]
                if rows:
                    self.db.execute(table.insert(), rows)
                counts[table.name] = len(rows)
            self.db.commit()

        except (ValueError, KeyError, TypeError) as e:
            self.db.rollback()
            raise LedgerError(f"Invalid backup data: {str(e)}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error restoring backup: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to restore data: {str(e)}"
            )

        logger.warning(f"Data restored from backup ({sum(counts.values())} rows)")
        return DataOperationResult(message="Data restored successfully.", counts=counts)

    def load_mock(self) -> DataOperationResult:
        """Reset, then load demo customers and vehicles"""
        self.reset()
        try:
            self.db.add_all([Customer(**c) for c in MOCK_CUSTOMERS])
            self.db.add_all([Vehicle(**v) for v in MOCK_VEHICLES])
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error loading mock data: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to load mock data: {str(e)}"
            )

        logger.info(f"Loaded {len(MOCK_CUSTOMERS)} mock customers and {len(MOCK_VEHICLES)} vehicles")
        return DataOperationResult(
            message="Successfully loaded mock customers and vehicles. Other data is reset.",
            counts={"customers": len(MOCK_CUSTOMERS), "vehicles": len(MOCK_VEHICLES)}
        )
