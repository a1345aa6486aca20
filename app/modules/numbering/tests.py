"""
Tests for document numbering

Covers:
- Range allocation, exhaustion and overflow to the legacy counter
- Range configuration rules (validation, reset on reconfiguration)
- Manual numbers and skipping numbers already taken
- Concurrent allocation without gaps or duplicates
- HTTP endpoints
"""

import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.common.exceptions import RangeExhausted, InvalidRange, ManualNumberNotAllowed
from app.database.database import Base
from app.modules.lorry_receipts.models import LorryReceipt
from app.modules.numbering.models import NumberingRange, SequenceCounter
from app.modules.numbering.schemas import DocumentType, NumberingRangeUpsert, CurrentNumberUpdate
from app.modules.numbering.sequence import allocate, assign_number, format_number, peek, get_next_sequence_value
from app.modules.numbering.service import NumberingService


def configure(db, document_type=DocumentType.LR, start=1, end=1000, **kwargs):
    return NumberingService(db).upsert_range(NumberingRangeUpsert(
        document_type=document_type, start_number=start, end_number=end, **kwargs
    ))


# ===== ALLOCATION =====

class TestAllocate:
    """Tests for allocate()"""

    def test_legacy_counter_without_range(self, db_session):
        """With no range configured numbers come from the legacy counter, starting at 1"""
        assert allocate(db_session, "lr") == 1
        assert allocate(db_session, "lr") == 2
        db_session.commit()
        assert db_session.get(SequenceCounter, "lr").value == 2

    def test_counters_are_independent(self, db_session):
        assert allocate(db_session, "lr") == 1
        assert allocate(db_session, "invoice") == 1
        assert allocate(db_session, "lr") == 2

    def test_range_issues_current_and_advances(self, db_session):
        configure(db_session, start=100, end=200)
        assert allocate(db_session, "lr") == 100
        assert allocate(db_session, "lr") == 101
        db_session.commit()

        numbering_range = db_session.query(NumberingRange).filter_by(document_type="lr").one()
        db_session.refresh(numbering_range)
        assert numbering_range.current_number == 102

    def test_range_exhausted(self, db_session):
        configure(db_session, start=1, end=2)
        assert allocate(db_session, "lr") == 1
        assert allocate(db_session, "lr") == 2
        with pytest.raises(RangeExhausted) as exc_info:
            allocate(db_session, "lr")
        assert exc_info.value.status_code == 400
        assert "lr range exhausted" in exc_info.value.detail

    def test_overflow_uses_legacy_counter(self, db_session):
        """Past the end, the legacy counter continues after the range and the range stays put"""
        configure(db_session, start=1, end=2, allow_outside_range=True)
        assert allocate(db_session, "lr") == 1
        assert allocate(db_session, "lr") == 2
        assert allocate(db_session, "lr") == 3
        assert allocate(db_session, "lr") == 4
        db_session.commit()

        numbering_range = db_session.query(NumberingRange).filter_by(document_type="lr").one()
        db_session.refresh(numbering_range)
        assert numbering_range.current_number == 3

    def test_overflow_never_reissues_range_numbers(self, db_session):
        """A legacy counter left over from before the range is lifted past the range end"""
        get_next_sequence_value(db_session, "lr")
        configure(db_session, start=1, end=5, allow_outside_range=True)
        issued = [allocate(db_session, "lr") for _ in range(7)]
        assert issued == [1, 2, 3, 4, 5, 6, 7]

    def test_allocation_rolls_back_with_transaction(self, db_session):
        configure(db_session, start=1, end=10)
        allocate(db_session, "lr")
        db_session.rollback()
        assert allocate(db_session, "lr") == 1


class TestPeekAndFormat:

    def test_peek_does_not_consume(self, db_session):
        configure(db_session, start=7, end=9)
        assert peek(db_session, "lr") == 7
        assert peek(db_session, "lr") == 7
        assert allocate(db_session, "lr") == 7

    def test_peek_without_range(self, db_session):
        assert peek(db_session, "thn") == 1
        allocate(db_session, "thn")
        assert peek(db_session, "thn") == 2

    def test_peek_exhausted(self, db_session):
        configure(db_session, start=1, end=1)
        allocate(db_session, "lr")
        assert peek(db_session, "lr") is None

    def test_format_number_pads(self):
        assert format_number("LR", 42) == "LR000042"
        assert format_number(None, 7) == "000007"
        assert format_number("INV-", 1234567) == "INV-1234567"


# ===== CONFIGURATION =====

class TestRangeConfiguration:
    """Tests for NumberingService.upsert_range and friends"""

    def test_create_starts_at_start(self, db_session):
        numbering_range = configure(db_session, start=50, end=60, prefix="LR")
        assert numbering_range.current_number == 50
        assert numbering_range.remaining == 11
        assert not numbering_range.is_exhausted

    def test_start_after_end_rejected(self, db_session):
        with pytest.raises(InvalidRange):
            configure(db_session, start=10, end=5)

    def test_edit_preserves_current(self, db_session):
        configure(db_session, start=1, end=100)
        for _ in range(5):
            allocate(db_session, "lr")
        db_session.commit()

        numbering_range = configure(db_session, start=1, end=500, prefix="L")
        assert numbering_range.current_number == 6
        assert numbering_range.prefix == "L"

    def test_edit_moves_current_up_to_new_start(self, db_session):
        configure(db_session, start=1, end=100)
        numbering_range = configure(db_session, start=50, end=100)
        assert numbering_range.current_number == 50

    def test_edit_past_end_resets_to_start(self, db_session):
        configure(db_session, start=1, end=100)
        NumberingService(db_session).set_current_number(
            CurrentNumberUpdate(document_type=DocumentType.LR, current_number=80)
        )
        numbering_range = configure(db_session, start=1, end=50)
        assert numbering_range.current_number == 1

    def test_edit_past_end_kept_when_overflow_allowed(self, db_session):
        configure(db_session, start=1, end=100)
        NumberingService(db_session).set_current_number(
            CurrentNumberUpdate(document_type=DocumentType.LR, current_number=80)
        )
        numbering_range = configure(db_session, start=1, end=50, allow_outside_range=True)
        assert numbering_range.current_number == 80

    def test_set_current_below_start_rejected(self, db_session):
        configure(db_session, start=10, end=100)
        with pytest.raises(InvalidRange):
            NumberingService(db_session).set_current_number(
                CurrentNumberUpdate(document_type=DocumentType.LR, current_number=5)
            )


# ===== MANUAL NUMBERS =====

class TestAssignNumber:

    def test_manual_number_refused_when_disabled(self, db_session):
        configure(db_session, allow_manual_entry=False)
        with pytest.raises(ManualNumberNotAllowed):
            assign_number(db_session, "lr", LorryReceipt.lr_number, manual_number=500)

    def test_manual_number_accepted_when_enabled(self, db_session):
        configure(db_session, allow_manual_entry=True)
        assert assign_number(db_session, "lr", LorryReceipt.lr_number, manual_number=500) == 500
        # The range is not consumed by a manual number
        assert allocate(db_session, "lr") == 1

    def test_manual_number_accepted_without_range(self, db_session):
        assert assign_number(db_session, "lr", LorryReceipt.lr_number, manual_number=9) == 9

    def test_allocation_skips_manually_taken_numbers(self, db_session, sample_customer, sample_vehicle):
        configure(db_session, allow_manual_entry=True)
        db_session.add(LorryReceipt(
            lr_number=1,
            consignor_id=sample_customer.id,
            consignee_id=sample_customer.id,
            vehicle_id=sample_vehicle.id,
            from_place="Chennai",
            to_place="Mumbai"
        ))
        db_session.commit()

        assert assign_number(db_session, "lr", LorryReceipt.lr_number) == 2


# ===== CONCURRENCY =====

class TestConcurrentAllocation:

    def test_no_gaps_or_duplicates(self, tmp_path):
        """Many writers on range [1, 1000] get distinct, contiguous numbers"""
        engine = create_engine(
            f"sqlite:///{tmp_path / 'numbering.db'}",
            connect_args={"check_same_thread": False, "timeout": 30}
        )
        Base.metadata.create_all(bind=engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        setup = SessionLocal()
        configure(setup, start=1, end=1000)
        setup.close()

        threads_count, per_thread = 8, 25
        issued, errors = [], []
        lock = threading.Lock()

        def worker():
            session = SessionLocal()
            try:
                for _ in range(per_thread):
                    value = allocate(session, "lr")
                    session.commit()
                    with lock:
                        issued.append(value)
            except Exception as e:  # collected and asserted below
                errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        engine.dispose()

        assert errors == []
        total = threads_count * per_thread
        assert sorted(issued) == list(range(1, total + 1))


# ===== ENDPOINTS =====

class TestNumberingEndpoints:

    def test_configure_and_read(self, client):
        response = client.post("/numbering/configs", json={
            "document_type": "invoice", "prefix": "INV", "start_number": 1, "end_number": 3
        })
        assert response.status_code == 200
        assert response.json()["current_number"] == 1

        response = client.get("/numbering/configs/invoice")
        assert response.status_code == 200
        assert response.json()["remaining"] == 3

        response = client.get("/numbering/configs")
        assert [c["document_type"] for c in response.json()] == ["invoice"]

    def test_missing_config_is_404(self, client):
        assert client.get("/numbering/configs/thn").status_code == 404

    def test_invalid_range_is_400(self, client):
        response = client.post("/numbering/configs", json={
            "document_type": "lr", "start_number": 10, "end_number": 1
        })
        assert response.status_code == 400

    def test_next_and_peek(self, client):
        client.post("/numbering/configs", json={
            "document_type": "lr", "prefix": "LR", "start_number": 1, "end_number": 1
        })
        assert client.get("/numbering/peek/lr").json()["formatted"] == "LR000001"
        assert client.get("/numbering/next/lr").json()["number"] == 1

        peeked = client.get("/numbering/peek/lr").json()
        assert peeked["exhausted"] is True
        assert peeked["number"] is None

        response = client.get("/numbering/next/lr")
        assert response.status_code == 400
        assert "range exhausted" in response.json()["detail"]

    def test_update_current(self, client):
        client.post("/numbering/configs", json={"document_type": "thn", "start_number": 1, "end_number": 100})
        response = client.post("/numbering/update-current", json={"document_type": "thn", "current_number": 40})
        assert response.status_code == 200
        assert client.get("/numbering/next/thn").json()["number"] == 40
