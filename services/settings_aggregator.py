"""
Settings aggregation and validation.

Raw form payloads are lenient: blank or unparseable fields fall back to
documented defaults so nothing is ever stored empty. Values that parse
but break a rule (negative money, end before start, unknown timezone)
are rejected with a SettingsValidationError listing every problem.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from core.errors import SettingsValidationError
from core.utils_datetime import is_valid_timezone, parse_hhmm
from domain.models import (
    ManagerSettings,
    PaymentSettings,
    ReservationSettings,
    RestaurantSettings,
    TimeSlot,
)
from services.time_slot_validator import validate_time_slot


logger = logging.getLogger(__name__)


DEFAULT_LEAD_TIME_HOURS = 2
DEFAULT_CUTOFF_TIME = "21:00"
DEFAULT_REFUND_HOURS_BEFORE = 24
DEFAULT_MAX_RESERVATIONS = 4
DEFAULT_PEAK_HOURS_START = "19:00"
DEFAULT_PEAK_HOURS_END = "21:00"
DEFAULT_SLOT_START = "18:00"
DEFAULT_SLOT_END = "18:30"
DEFAULT_TIMEZONE = "America/Los_Angeles"

TRUE_STRINGS = {"true", "1", "yes", "on"}


# ============================================================================
# Coercion helpers
# ============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_number(value: Any, default: float) -> float:
    """Blank, non-numeric or non-finite input becomes the default."""
    if _is_blank(value) or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def coerce_int(value: Any, default: int) -> int:
    """Like coerce_number, but fractional input also falls back to the default."""
    number = coerce_number(value, default)
    if not float(number).is_integer():
        return default
    return int(number)


def coerce_time(value: Any, default: str) -> str:
    """Normalize to HH:MM; blank or malformed input becomes the default."""
    if _is_blank(value):
        return default
    try:
        return parse_hhmm(value).strftime("%H:%M")
    except (TypeError, ValueError):
        return default


def coerce_bool(value: Any, default: bool) -> bool:
    """Blank input keeps the default; strings are matched against TRUE_STRINGS."""
    if _is_blank(value):
        return default
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def coerce_choice(value: Any, default: str) -> Any:
    """Blank choices take the default; anything else is left for the model to check."""
    if _is_blank(value):
        return default
    return value.strip() if isinstance(value, str) else value


def _occasions(value: Any) -> List[str]:
    if _is_blank(value):
        return []
    if isinstance(value, str):
        value = value.split(",")
    seen: List[str] = []
    for item in value:
        label = str(item).strip()
        if label and label not in seen:
            seen.append(label)
    return seen


def _issues_from(exc: ValidationError, prefix: str) -> List[Dict[str, str]]:
    issues = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        field = f"{prefix}.{location}" if location else prefix
        issues.append({"field": field, "message": error.get("msg", "invalid value")})
    return issues


# ============================================================================
# Section builders
# ============================================================================

def build_payment_settings(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce a raw payment_settings payload into model input."""
    tiers = []
    for tier in raw.get("party_size_pricing") or []:
        tiers.append({
            "minParty": coerce_int(tier.get("minParty", tier.get("min_party")), 1),
            "maxParty": coerce_int(tier.get("maxParty", tier.get("max_party")), 1),
            "amount": coerce_number(tier.get("amount"), 0.0),
        })

    return {
        "payment_type": coerce_choice(raw.get("payment_type"), "fixed"),
        "base_payment_amount": coerce_number(raw.get("base_payment_amount"), 0.0),
        "min_payment_amount": coerce_number(raw.get("min_payment_amount"), 0.0),
        "max_payment_amount": coerce_number(raw.get("max_payment_amount"), 0.0),
        "party_size_pricing": tiers,
        "peak_hours_premium": coerce_number(raw.get("peak_hours_premium"), 0.0),
        "weekend_premium": coerce_number(raw.get("weekend_premium"), 0.0),
        "peak_hours_start": coerce_time(raw.get("peak_hours_start"), DEFAULT_PEAK_HOURS_START),
        "peak_hours_end": coerce_time(raw.get("peak_hours_end"), DEFAULT_PEAK_HOURS_END),
        "refund_policy": coerce_choice(raw.get("refund_policy"), "refundable"),
        "refund_hours_before": coerce_int(raw.get("refund_hours_before"), DEFAULT_REFUND_HOURS_BEFORE),
        "charge_no_show": coerce_bool(raw.get("charge_no_show"), False),
        "no_show_charge_type": coerce_choice(raw.get("no_show_charge_type"), "amount"),
        "no_show_charge_value": coerce_number(raw.get("no_show_charge_value"), 0.0),
    }


def build_reservation_settings(raw: Mapping[str, Any], payment: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce the guest-facing reservation settings into model input."""
    return {
        "lead_time_hours": coerce_int(raw.get("lead_time_hours"), DEFAULT_LEAD_TIME_HOURS),
        "cutoff_time": coerce_time(raw.get("cutoff_time"), DEFAULT_CUTOFF_TIME),
        "auto_confirm": coerce_bool(raw.get("auto_confirm"), True),
        "allow_special_notes": coerce_bool(raw.get("allow_special_notes"), False),
        "special_occasions": _occasions(raw.get("special_occasions")),
        "require_payment": coerce_bool(raw.get("require_payment"), False),
        "payment_settings": payment,
    }


def build_manager_settings(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "timezone": coerce_choice(raw.get("timezone"), DEFAULT_TIMEZONE),
        "show_avg_party_size": coerce_bool(raw.get("show_avg_party_size"), False),
        "show_peak_hour": coerce_bool(raw.get("show_peak_hour"), False),
        "show_cancellation_rate": coerce_bool(raw.get("show_cancellation_rate"), False),
        "show_this_week": coerce_bool(raw.get("show_this_week"), False),
    }


def build_time_slot(raw: Mapping[str, Any]) -> TimeSlot:
    """
    Coerce one slot edit from the settings screen.

    Raises:
        pydantic.ValidationError: If the slot is malformed after coercion
    """
    max_covers = raw.get("max_covers", raw.get("max_reservations"))
    return TimeSlot(
        id=raw.get("id") or None,
        weekday=raw.get("weekday", raw.get("day_of_week")),
        start_time=coerce_time(raw.get("start_time"), DEFAULT_SLOT_START),
        end_time=coerce_time(raw.get("end_time"), DEFAULT_SLOT_END),
        max_covers=coerce_int(max_covers, DEFAULT_MAX_RESERVATIONS),
        is_default=coerce_bool(raw.get("is_default"), True),
        specific_date=raw.get("specific_date") or None,
        is_active=coerce_bool(raw.get("is_active"), True),
    )


def parse_time_slot(raw: Mapping[str, Any]) -> TimeSlot:
    """
    build_time_slot for a single slot form.

    Raises:
        SettingsValidationError: If the slot is malformed after coercion
    """
    try:
        return build_time_slot(raw)
    except ValidationError as exc:
        raise SettingsValidationError(_issues_from(exc, "time_slot")) from exc


def _check_slot_edits(candidates: List[TimeSlot], existing: Iterable[TimeSlot]) -> None:
    """
    Run the duplicate check across stored slots and the bundled edits.

    Each accepted edit replaces its stored version (same id) before the
    next edit is checked, so two edits in one save can conflict too.
    """
    working = list(existing)
    for candidate in candidates:
        validate_time_slot(candidate, working, exclude_id=candidate.id)
        if candidate.id is not None:
            working = [slot for slot in working if slot.id != candidate.id]
        working.append(candidate)


# ============================================================================
# Entry point
# ============================================================================

def validate_and_build(
    raw_guest_settings: Optional[Mapping[str, Any]],
    raw_payment_settings: Optional[Mapping[str, Any]],
    raw_manager_settings: Optional[Mapping[str, Any]],
    slot_edits: Optional[Iterable[Mapping[str, Any]]] = None,
    existing_slots: Iterable[TimeSlot] = (),
) -> RestaurantSettings:
    """
    Compose and validate the settings object saved on the restaurant.

    Args:
        raw_guest_settings: reservation_settings fields from the form
        raw_payment_settings: payment_settings fields; when None, a nested
            ``payment_settings`` in the guest payload is used instead
        raw_manager_settings: manager_settings fields
        slot_edits: Time slots created or edited in the same save
        existing_slots: Slots currently stored for the restaurant

    Returns:
        RestaurantSettings ready to persist, with validated slot edits
        attached as ``time_slots``

    Raises:
        SettingsValidationError: If any field breaks a rule after coercion
        DuplicateSlotError: If a slot edit repeats an existing window
    """
    raw_guest = dict(raw_guest_settings or {})
    if raw_payment_settings is None:
        raw_payment_settings = raw_guest.get("payment_settings") or {}
    raw_manager = dict(raw_manager_settings or {})

    issues: List[Dict[str, str]] = []

    payment_input = build_payment_settings(raw_payment_settings)
    try:
        payment = PaymentSettings.model_validate(payment_input)
    except ValidationError as exc:
        issues.extend(_issues_from(exc, "payment_settings"))
        payment = None

    reservation = None
    if payment is not None:
        try:
            reservation = ReservationSettings.model_validate(
                build_reservation_settings(raw_guest, payment.model_dump(by_alias=True))
            )
        except ValidationError as exc:
            issues.extend(_issues_from(exc, "reservation_settings"))

    manager = None
    try:
        manager = ManagerSettings.model_validate(build_manager_settings(raw_manager))
    except ValidationError as exc:
        issues.extend(_issues_from(exc, "manager_settings"))
    if manager is not None and not is_valid_timezone(manager.timezone):
        issues.append({
            "field": "manager_settings.timezone",
            "message": f"Unknown timezone {manager.timezone!r}",
        })

    slots: List[TimeSlot] = []
    for index, raw_slot in enumerate(slot_edits or []):
        try:
            slots.append(build_time_slot(raw_slot))
        except ValidationError as exc:
            issues.extend(_issues_from(exc, f"time_slots.{index}"))

    if issues:
        logger.info("Rejected settings payload with %d issue(s)", len(issues))
        raise SettingsValidationError(issues)

    _check_slot_edits(slots, existing_slots)

    return RestaurantSettings(
        reservation_settings=reservation,
        manager_settings=manager,
        time_slots=slots,
    )


def parse_stored_settings(stored: Optional[Mapping[str, Any]]) -> RestaurantSettings:
    """
    Read the settings blob of a restaurant record.

    Stored data goes through the same coercion as form input, so records
    written before a field existed still yield a complete object.
    """
    stored = stored or {}
    reservation_raw = stored.get("reservation_settings") or {}
    return validate_and_build(
        reservation_raw,
        reservation_raw.get("payment_settings") or {},
        stored.get("manager_settings") or {},
    )


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge ``source`` into a copy of ``target``.

    Nested dicts merge key by key; lists and scalars from ``source`` replace
    what was there. Keys only present in ``target`` survive.
    """
    output = dict(target)
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(output.get(key), Mapping):
            output[key] = deep_merge(output[key], value)
        else:
            output[key] = value
    return output
