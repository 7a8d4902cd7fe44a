"""Unit tests for settings coercion, validation and composition."""
import pytest
from datetime import time

from core.errors import DuplicateSlotError, SettingsValidationError
from domain.enums import NoShowChargeType, RefundPolicy
from services.settings_aggregator import (
    coerce_bool,
    coerce_int,
    coerce_number,
    coerce_time,
    deep_merge,
    parse_stored_settings,
    parse_time_slot,
    validate_and_build,
)


@pytest.mark.unit
class TestCoercion:
    """Test lenient field coercion."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "nan", "inf", True])
    def test_number_falls_back(self, raw):
        assert coerce_number(raw, 7.5) == 7.5

    def test_number_parses_strings(self):
        assert coerce_number("12.25", 0) == 12.25

    def test_int_rejects_fractions(self):
        assert coerce_int("2.5", 4) == 4
        assert coerce_int("3", 4) == 3
        assert coerce_int(6.0, 4) == 6

    @pytest.mark.parametrize("raw,expected", [
        ("19:30", "19:30"),
        ("7:05", "07:05"),
        ("19:30:00", "19:30"),
        ("", "21:00"),
        ("25:00", "21:00"),
        ("evening", "21:00"),
        (time(18, 15), "18:15"),
    ])
    def test_time(self, raw, expected):
        assert coerce_time(raw, "21:00") == expected

    def test_bool_strings(self):
        assert coerce_bool("true", False) is True
        assert coerce_bool("off", True) is False
        assert coerce_bool(None, True) is True

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_bool_keeps_default(self, raw):
        assert coerce_bool(raw, True) is True
        assert coerce_bool(raw, False) is False

    def test_blank_auto_confirm_stays_on(self):
        built = validate_and_build({"auto_confirm": "", "require_payment": " "}, {}, {})
        assert built.reservation_settings.auto_confirm is True
        assert built.reservation_settings.require_payment is False


@pytest.mark.unit
class TestDefaults:
    """Blank fields are never stored empty."""

    def test_blank_lead_time_defaults_to_two(self):
        built = validate_and_build({"lead_time_hours": ""}, {}, {})
        assert built.reservation_settings.lead_time_hours == 2

    def test_empty_payload_gets_documented_defaults(self):
        built = validate_and_build(None, None, None)
        reservation = built.reservation_settings
        payment = reservation.payment_settings

        assert reservation.cutoff_time == time(21, 0)
        assert reservation.auto_confirm is True
        assert reservation.require_payment is False
        assert payment.refund_hours_before == 24
        assert payment.refund_policy == RefundPolicy.REFUNDABLE
        assert payment.peak_hours_start == time(19, 0)
        assert payment.peak_hours_end == time(21, 0)
        assert payment.charge_no_show is False
        assert payment.no_show_charge_type == NoShowChargeType.AMOUNT
        assert built.manager_settings.timezone == "America/Los_Angeles"
        assert built.time_slots == []

    def test_unparseable_refund_hours_defaults(self):
        built = validate_and_build({}, {"refund_hours_before": "soon"}, {})
        assert built.reservation_settings.payment_settings.refund_hours_before == 24

    def test_slot_max_covers_defaults_to_four(self):
        slot = parse_time_slot({"weekday": 1, "start_time": "18:00", "end_time": "19:00", "max_covers": ""})
        assert slot.max_covers == 4

    def test_slot_accepts_legacy_keys(self):
        slot = parse_time_slot({"day_of_week": 6, "start_time": "20:00", "end_time": "20:30", "max_reservations": "8"})
        assert slot.weekday == 6
        assert slot.max_covers == 8

    def test_special_occasions_from_string(self):
        built = validate_and_build({"special_occasions": "Birthday, Anniversary,,Birthday"}, {}, {})
        assert built.reservation_settings.special_occasions == ["Birthday", "Anniversary"]


@pytest.mark.unit
class TestRuleViolations:
    """Values that parse but break a rule are rejected with issues."""

    def test_peak_end_before_start(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_and_build({}, {"peak_hours_start": "21:00", "peak_hours_end": "19:00"}, {})

        fields = [issue["field"] for issue in exc_info.value.issues]
        assert any(field.startswith("payment_settings") for field in fields)

    def test_negative_amount(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_and_build({}, {"base_payment_amount": "-5"}, {})
        assert exc_info.value.issues[0]["field"] == "payment_settings.base_payment_amount"

    def test_unknown_timezone(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_and_build({}, {}, {"timezone": "Mars/Olympus_Mons"})
        assert exc_info.value.issues == [{
            "field": "manager_settings.timezone",
            "message": "Unknown timezone 'Mars/Olympus_Mons'",
        }]

    @pytest.mark.parametrize("raw", [123, ["America/New_York"], {"name": "UTC"}])
    def test_non_string_timezone(self, raw):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_and_build({}, {}, {"timezone": raw})
        assert [issue["field"] for issue in exc_info.value.issues] == ["manager_settings.timezone"]

    def test_unknown_refund_policy(self):
        with pytest.raises(SettingsValidationError):
            validate_and_build({}, {"refund_policy": "sometimes"}, {})

    def test_issues_collected_across_sections(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_and_build(
                {},
                {"weekend_premium": "-1"},
                {"timezone": "Nowhere/Special"},
                slot_edits=[{"weekday": 2, "start_time": "19:00", "end_time": "18:00"}],
            )

        fields = {issue["field"].split(".")[0] for issue in exc_info.value.issues}
        assert fields == {"payment_settings", "manager_settings", "time_slots"}

    def test_invalid_slot_range(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            parse_time_slot({"weekday": 2, "start_time": "19:00", "end_time": "18:00"})
        assert exc_info.value.issues[0]["field"] == "time_slot"


@pytest.mark.unit
class TestSlotEdits:
    """Bundled slot edits go through the duplicate check."""

    def test_duplicate_of_existing(self, make_slot):
        existing = [make_slot(id="a", weekday=2)]
        with pytest.raises(DuplicateSlotError):
            validate_and_build({}, {}, {}, slot_edits=[{"weekday": 2, "start_time": "18:00", "end_time": "18:30"}],
                               existing_slots=existing)

    def test_duplicate_within_same_save(self):
        edits = [
            {"weekday": 4, "start_time": "19:00", "end_time": "19:30"},
            {"weekday": 4, "start_time": "19:00", "end_time": "19:30"},
        ]
        with pytest.raises(DuplicateSlotError):
            validate_and_build({}, {}, {}, slot_edits=edits)

    def test_edit_moving_a_slot_frees_its_window(self, make_slot):
        existing = [make_slot(id="a", weekday=2, start="18:00", end="18:30")]
        edits = [
            {"id": "a", "weekday": 2, "start_time": "20:00", "end_time": "20:30"},
            {"weekday": 2, "start_time": "18:00", "end_time": "18:30"},
        ]

        built = validate_and_build({}, {}, {}, slot_edits=edits, existing_slots=existing)

        assert [slot.start_time for slot in built.time_slots] == [time(20, 0), time(18, 0)]

    def test_overlap_accepted(self, make_slot):
        existing = [make_slot(id="a", weekday=5, start="18:00", end="19:00")]
        built = validate_and_build(
            {}, {}, {},
            slot_edits=[{"weekday": 5, "start_time": "18:30", "end_time": "19:30"}],
            existing_slots=existing,
        )
        assert len(built.time_slots) == 1


@pytest.mark.unit
class TestPersistence:

    def test_persisted_shape(self):
        built = validate_and_build(
            {"require_payment": True, "cutoff_time": "22:00"},
            {"party_size_pricing": [{"minParty": "2", "maxParty": "4", "amount": "20"}]},
            {"show_peak_hour": True},
        )
        persisted = built.to_persisted()

        reservation = persisted["reservation_settings"]
        assert reservation["cutoff_time"] == "22:00"
        assert reservation["payment_settings"]["party_size_pricing"] == [
            {"minParty": 2, "maxParty": 4, "amount": 20.0}
        ]
        assert reservation["payment_settings"]["peak_hours_start"] == "19:00"
        assert persisted["manager_settings"]["show_peak_hour"] is True
        assert "time_slots" not in persisted

    def test_stored_settings_round_trip(self):
        built = validate_and_build({"lead_time_hours": 5}, {"refund_policy": "conditional"}, {})
        parsed = parse_stored_settings(built.to_persisted())

        assert parsed.reservation_settings.lead_time_hours == 5
        assert parsed.reservation_settings.payment_settings.refund_policy == RefundPolicy.CONDITIONAL

    def test_nested_payment_settings_used_when_payment_omitted(self):
        built = validate_and_build({"payment_settings": {"weekend_premium": "7"}}, None, {})
        assert built.reservation_settings.payment_settings.weekend_premium == 7.0

    def test_deep_merge_keeps_unowned_keys(self):
        stored = {"waitlist_paused": True, "reservation_settings": {"lead_time_hours": 2, "legacy": "x"}}
        merged = deep_merge(stored, {"reservation_settings": {"lead_time_hours": 6}})

        assert merged == {"waitlist_paused": True, "reservation_settings": {"lead_time_hours": 6, "legacy": "x"}}
        assert stored["reservation_settings"]["lead_time_hours"] == 2

    def test_deep_merge_replaces_lists(self):
        merged = deep_merge({"tags": ["a", "b"]}, {"tags": ["c"]})
        assert merged == {"tags": ["c"]}
