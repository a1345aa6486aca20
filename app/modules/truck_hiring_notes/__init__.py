"""
Truck hiring notes for third-party trucks.

Tables:
- truck_hiring_notes: numbered from the THN range, paid amount, balance and
  status kept in step with payments
"""

from .models import TruckHiringNote

__all__ = ["TruckHiringNote"]
