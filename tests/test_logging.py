"""Tests for restaurant-scoped log records."""
import json
import logging

import pytest

from core.config import settings
from core.logging import RestaurantContextFilter, RestaurantJsonFormatter, log_context
from domain.models import WaitlistCreate


def make_record(**extra):
    return logging.makeLogRecord({
        "name": "services.front_of_house_store",
        "levelname": "INFO",
        "levelno": logging.INFO,
        "msg": "Seated waitlist entry",
        **extra,
    })


@pytest.fixture
def json_formatter():
    return RestaurantJsonFormatter(fmt='%(timestamp)s %(level)s %(name)s %(message)s')


@pytest.mark.unit
class TestJsonFormatter:

    def test_stamps_restaurant_context(self, json_formatter):
        record = make_record(**log_context("r-1", "assign_table", table_id="t-4"))

        line = json.loads(json_formatter.format(record))

        assert line["restaurant_id"] == "r-1"
        assert line["operation"] == "assign_table"
        assert line["table_id"] == "t-4"
        assert line["level"] == "INFO"
        assert line["app_name"] == settings.app_name
        assert line["message"] == "Seated waitlist entry"

    def test_missing_context_is_null(self, json_formatter):
        line = json.loads(json_formatter.format(make_record()))

        assert line["restaurant_id"] is None
        assert line["operation"] is None

    def test_placeholder_from_filter_is_null(self, json_formatter):
        record = make_record()
        RestaurantContextFilter().filter(record)

        line = json.loads(json_formatter.format(record))

        assert line["restaurant_id"] is None


@pytest.mark.unit
class TestContextFilter:

    def test_fills_placeholders_for_plain_format(self):
        record = make_record()

        assert RestaurantContextFilter().filter(record) is True
        formatted = logging.Formatter("[%(restaurant_id)s %(operation)s] %(message)s").format(record)
        assert formatted == "[- -] Seated waitlist entry"

    def test_keeps_supplied_context(self):
        record = make_record(**log_context("r-1", "add_table"))
        RestaurantContextFilter().filter(record)
        assert (record.restaurant_id, record.operation) == ("r-1", "add_table")


@pytest.mark.integration
class TestStoreLogContext:

    def test_assignment_log_carries_restaurant_and_table(self, store, restaurant, caplog):
        table = store.add_table("T1", 4)
        entry = store.add_to_waitlist(WaitlistCreate(name="Ann", phone="555", party_size=2))

        with caplog.at_level(logging.INFO, logger="services.front_of_house_store"):
            store.assign_table(entry.id, table.id)

        seated = [r for r in caplog.records if getattr(r, "operation", None) == "assign_table"]
        assert len(seated) == 1
        assert seated[0].restaurant_id == restaurant.id
        assert seated[0].table_id == table.id
