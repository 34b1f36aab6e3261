# app/schemas.py
"""
Input models for drivers and weekly entries.

Handlers receive raw JSON dicts and call `parse(Model, payload)`; any failure
becomes ValidationFailed with messages keyed by the public camelCase names
(`licenseNumber`, `weekStart`, ...), which is what the forms bind to.
"""
from __future__ import annotations

import datetime as dt
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .errors import ValidationFailed
from .utils.dates import parse_iso_date

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15
LICENSE_MIN_LEN = 3
NAME_MIN_LEN = 2

# column limits: Numeric(12, 2) earnings, 32-bit trips
EARNINGS_LIMIT = Decimal("1e10")
TRIPS_MAX = 2**31 - 1

# spellings accepted from older clients -> canonical key
FIELD_ALIASES = {
    "licenceNumber": "licenseNumber",
    "licenseNo": "licenseNumber",
    "startDate": "joinDate",
}

REQUIRED_MESSAGES = {
    "name": "Enter full name",
    "phone": "Phone is required",
    "driverId": "Driver is required",
    "weekStart": "Pick the week start date",
    "earnings": "Enter a valid amount",
    "trips": "Enter a whole number",
}

_url_adapter = TypeAdapter(HttpUrl)


def normalize_phone(raw) -> str:
    # "+91 90000-00001" -> "9000000001"
    digits = re.sub(r"\D", "", str(raw or ""))
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    return digits


def _blank_to_none(v):
    if v is None:
        return None
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ---------- shared validators ----------

def _check_name(v):
    name = str(v or "").strip()
    if len(name) < NAME_MIN_LEN:
        raise PydanticCustomError("name", "Enter full name")
    return name


def _check_phone(v):
    if v is None or not str(v).strip():
        raise PydanticCustomError("phone", "Phone is required")
    digits = normalize_phone(v)
    if len(digits) < PHONE_MIN_DIGITS:
        raise PydanticCustomError("phone", "Enter a valid phone (10+ digits)")
    if len(digits) > PHONE_MAX_DIGITS:
        raise PydanticCustomError("phone", "Phone too long")
    return digits


def _check_license(v):
    lic = _blank_to_none(v)
    if lic is None:
        return None
    lic = str(lic).upper()
    if len(lic) < LICENSE_MIN_LEN:
        raise PydanticCustomError(
            "license", "Licence number must be at least 3 characters (or leave it blank)"
        )
    return lic


def _check_date(v, message: str):
    v = _blank_to_none(v)
    if v is None:
        return None
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    try:
        return parse_iso_date(str(v))
    except ValueError:
        raise PydanticCustomError("date", message)


def _check_url(v):
    v = _blank_to_none(v)
    if v is None:
        return None
    try:
        _url_adapter.validate_python(str(v))
    except ValidationError:
        raise PydanticCustomError("url", "Enter a valid URL")
    return str(v)


def _check_earnings(v):
    if isinstance(v, bool) or v is None:
        raise PydanticCustomError("earnings", "Enter a valid amount")
    if isinstance(v, str):
        v = v.strip()
    if isinstance(v, float) and not math.isfinite(v):
        raise PydanticCustomError("earnings", "Enter a valid amount")
    try:
        amount = Decimal(str(v))
    except (InvalidOperation, ValueError):
        raise PydanticCustomError("earnings", "Enter a valid amount")
    if not amount.is_finite():
        raise PydanticCustomError("earnings", "Enter a valid amount")
    if amount < 0:
        raise PydanticCustomError("earnings", "Earnings cannot be negative")
    if amount >= EARNINGS_LIMIT:
        raise PydanticCustomError("earnings", "Amount too large")
    return amount


def _check_trips(v):
    if isinstance(v, bool) or v is None:
        raise PydanticCustomError("trips", "Enter a whole number")
    if isinstance(v, str):
        v = v.strip()
        try:
            v = Decimal(v)
        except InvalidOperation:
            raise PydanticCustomError("trips", "Enter a whole number")
        if not v.is_finite():
            raise PydanticCustomError("trips", "Enter a whole number")
    if isinstance(v, float) and not math.isfinite(v):
        raise PydanticCustomError("trips", "Enter a whole number")
    if isinstance(v, (float, Decimal)):
        if v != int(v):
            raise PydanticCustomError("trips", "Enter a whole number")
        v = int(v)
    if not isinstance(v, int):
        raise PydanticCustomError("trips", "Enter a whole number")
    if v < 0:
        raise PydanticCustomError("trips", "Trips cannot be negative")
    if v > TRIPS_MAX:
        raise PydanticCustomError("trips", "Too many trips")
    return v


class _Input(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------- drivers ----------

class DriverCreate(_Input):
    name: str
    phone: str
    license_number: Optional[str] = None
    join_date: Optional[dt.date] = None
    profile_image_url: Optional[str] = None
    hidden: bool = False

    check_name = field_validator("name", mode="before")(_check_name)
    check_phone = field_validator("phone", mode="before")(_check_phone)
    check_license = field_validator("license_number", mode="before")(_check_license)
    check_url = field_validator("profile_image_url", mode="before")(_check_url)

    @field_validator("join_date", mode="before")
    @classmethod
    def check_join_date(cls, v):
        return _check_date(v, "Select a valid date")


class DriverUpdate(_Input):
    name: Optional[str] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None
    join_date: Optional[dt.date] = None
    profile_image_url: Optional[str] = None
    hidden: Optional[bool] = None

    check_name = field_validator("name", mode="before")(_check_name)
    check_phone = field_validator("phone", mode="before")(_check_phone)
    check_license = field_validator("license_number", mode="before")(_check_license)
    check_url = field_validator("profile_image_url", mode="before")(_check_url)

    @field_validator("join_date", mode="before")
    @classmethod
    def check_join_date(cls, v):
        return _check_date(v, "Select a valid date")


class ToggleHidden(_Input):
    hidden: bool


# ---------- weekly entries ----------

class WeeklyEntryCreate(_Input):
    driver_id: str
    week_start: dt.date
    earnings: Decimal
    trips: int
    notes: Optional[str] = None

    @field_validator("driver_id", mode="before")
    @classmethod
    def check_driver(cls, v):
        v = _blank_to_none(v)
        if v is None:
            raise PydanticCustomError("driver", "Driver is required")
        return str(v)

    @field_validator("week_start", mode="before")
    @classmethod
    def check_week_start(cls, v):
        d = _check_date(v, "Use YYYY-MM-DD")
        if d is None:
            raise PydanticCustomError("date", "Pick the week start date")
        return d

    check_earnings = field_validator("earnings", mode="before")(_check_earnings)
    check_trips = field_validator("trips", mode="before")(_check_trips)
    check_notes = field_validator("notes", mode="before")(_blank_to_none)


class WeeklyEntryUpdate(_Input):
    week_start: Optional[dt.date] = None
    earnings: Optional[Decimal] = None
    trips: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("week_start", mode="before")
    @classmethod
    def check_week_start(cls, v):
        d = _check_date(v, "Use YYYY-MM-DD")
        if d is None:
            raise PydanticCustomError("date", "Pick the week start date")
        return d

    check_earnings = field_validator("earnings", mode="before")(_check_earnings)
    check_trips = field_validator("trips", mode="before")(_check_trips)
    check_notes = field_validator("notes", mode="before")(_blank_to_none)


# ---------- entry point ----------

M = TypeVar("M", bound=BaseModel)


def flatten_errors(exc: ValidationError) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "_form"
        if err.get("type") == "missing":
            msg = REQUIRED_MESSAGES.get(field, "Required")
        else:
            msg = err.get("msg") or "Invalid value"
        out.setdefault(field, []).append(msg)
    return out


def canonical_payload(payload: dict[str, Any]) -> dict[str, Any]:
    data = dict(payload)
    for alias, key in FIELD_ALIASES.items():
        if alias in data:
            value = data.pop(alias)
            data.setdefault(key, value)
    return data


def parse(model: type[M], payload: Any) -> M:
    if not isinstance(payload, dict):
        raise ValidationFailed({}, ["Expected a JSON object"])
    try:
        return model.model_validate(canonical_payload(payload))
    except ValidationError as e:
        raise ValidationFailed(flatten_errors(e))
