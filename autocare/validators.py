"""
Field-level checks shared by the request schemas.
"""
import re
from datetime import date
from typing import Annotated, Optional

from pydantic import AfterValidator

from autocare.config import get_settings

VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")
MIN_MODEL_YEAR = 1900

_UNSAFE_TEXT = re.compile(r"[<>]")


def ensure_safe_text(value: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace and reject markup characters."""
    if value is None:
        return None
    value = value.strip()
    if _UNSAFE_TEXT.search(value):
        raise ValueError("contains potentially unsafe characters")
    return value


def ensure_not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def normalize_vin(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().upper()
    if not VIN_PATTERN.match(value):
        raise ValueError("VIN must be exactly 17 characters and contain only valid characters (no I, O, Q)")
    return value


def max_model_year(today: Optional[date] = None) -> int:
    return (today or date.today()).year + get_settings().max_future_model_years


def ensure_model_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if value < MIN_MODEL_YEAR:
        raise ValueError(f"Year must be {MIN_MODEL_YEAR} or later")
    limit = max_model_year()
    if value > limit:
        raise ValueError(f"Year cannot be later than {limit}")
    return value


def ensure_not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("Date of birth cannot be in the future")
    return value


SafeText = Annotated[str, AfterValidator(ensure_safe_text)]
# Stripped first, so whitespace-only input is rejected rather than stored empty
NonBlankText = Annotated[SafeText, AfterValidator(ensure_not_blank)]
Vin = Annotated[str, AfterValidator(normalize_vin)]
ModelYear = Annotated[int, AfterValidator(ensure_model_year)]
PastOrPresentDate = Annotated[date, AfterValidator(ensure_not_in_future)]
