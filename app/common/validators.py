"""
Validators for Indian business identifiers
"""
import re
from typing import Optional


GSTIN_PATTERN = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$')
VEHICLE_NUMBER_PATTERN = re.compile(r'^[A-Z]{2}[0-9]{1,2}[A-Z]{0,3}[0-9]{1,4}$')


def validate_gstin(gstin: str) -> bool:
    """
    Check the GSTIN layout: state code, PAN, entity number, 'Z', check char.
    Example: 33ITWPS2062F1Z7
    """
    if not gstin:
        return False
    return bool(GSTIN_PATTERN.match(gstin.strip().upper()))


def validate_indian_phone(phone: str) -> bool:
    """
    Mobile numbers: 10 digits starting with 6-9, optionally prefixed by +91 or 91.
    """
    cleaned = re.sub(r'[\s\-\(\)]', '', phone)
    return bool(re.match(r'^(\+91|91)?[6-9][0-9]{9}$', cleaned))


def normalize_vehicle_number(number: str) -> str:
    """Strip separators and upper-case: 'tn 20 ax 1234' -> 'TN20AX1234'"""
    return re.sub(r'[\s\-]', '', number).upper()


def validate_vehicle_number(number: str) -> bool:
    return bool(VEHICLE_NUMBER_PATTERN.match(normalize_vehicle_number(number)))


def format_vehicle_number(number: str) -> Optional[str]:
    """
    Format a registration number as 'TN 20 AX 1234'.
    Returns None when the number is not a valid registration.
    """
    if not validate_vehicle_number(number):
        return None
    cleaned = normalize_vehicle_number(number)
    match = re.match(r'^([A-Z]{2})([0-9]{1,2})([A-Z]{0,3})([0-9]{1,4})$', cleaned)
    parts = [p for p in match.groups() if p]
    return " ".join(parts)
