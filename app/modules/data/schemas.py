from pydantic import BaseModel, Field
from typing import Any, Dict, List
from datetime import datetime

BACKUP_FORMAT_VERSION = 1


class BackupPayload(BaseModel):
    """Full export of the ledger, one list of rows per table"""
    version: int = BACKUP_FORMAT_VERSION
    exported_at: datetime = Field(default_factory=datetime.utcnow)
    tables: Dict[str, List[Dict[str, Any]]]


class DataOperationResult(BaseModel):
    message: str
    counts: Dict[str, int] = Field(default_factory=dict)
