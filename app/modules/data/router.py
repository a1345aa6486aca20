from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.data.service import DataService
from app.modules.data.schemas import BackupPayload, DataOperationResult

router = APIRouter(prefix="/data", tags=["Data"])


@router.post("/reset", response_model=DataOperationResult)
def reset_data(db: Session = Depends(get_db)):
    """Delete all data, including numbering ranges and counters"""
    return DataService(db).reset()


@router.get("/backup", response_model=BackupPayload)
def backup_data(db: Session = Depends(get_db)):
    return DataService(db).backup()


@router.post("/restore", response_model=DataOperationResult)
def restore_data(payload: BackupPayload, db: Session = Depends(get_db)):
    """Replace all data with a backup produced by GET /data/backup"""
    return DataService(db).restore(payload)


@router.post("/load-mock", response_model=DataOperationResult)
def load_mock_data(db: Session = Depends(get_db)):
    return DataService(db).load_mock()
