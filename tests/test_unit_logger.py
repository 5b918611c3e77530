import json
import logging
import time

from app.utils.logger import FIELDS_ATTR, JSONFormatter, get_logger, log_timing


def test_get_logger_nests_under_app():
    assert get_logger("app.services.period_filter").logger.name == "app.services.period_filter"
    assert get_logger("audit").logger.name == "app.audit"


def test_json_formatter_merges_fields():
    record = logging.getLogger("app.test").makeRecord(
        "app.test", logging.WARNING, __file__, 10, "Skipping shop record", None, None,
        extra={FIELDS_ATTR: {"record_id": 7, "amount": 1.5}},
    )
    entry = json.loads(JSONFormatter().format(record))
    assert entry["level"] == "WARNING"
    assert entry["message"] == "Skipping shop record"
    assert entry["record_id"] == 7
    assert entry["amount"] == 1.5


def test_log_timing_returns_elapsed_ms():
    assert log_timing("unit", time.time() - 0.05, district="PATNA") >= 50
