"""
Document numbering: configurable ranges per document type with an unbounded
legacy counter as fallback.

Tables:
- numbering_ranges: one range per document type (lr, invoice, thn)
- sequence_counters: legacy counters keyed by sequence name
"""

from .models import NumberingRange, SequenceCounter
from .sequence import allocate, assign_number, format_number, get_next_sequence_value
from .service import NumberingService

__all__ = [
    "NumberingRange", "SequenceCounter",
    "allocate", "assign_number", "format_number", "get_next_sequence_value",
    "NumberingService",
]
