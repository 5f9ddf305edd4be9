import json
import logging
import sys

from app.utils.logging_config import JsonFormatter, RequestIdFilter, build_dict_config, set_request_id


def make_record(msg, *args, exc_info=None):
    record = logging.LogRecord("app.test", logging.ERROR, __file__, 1, msg, args, exc_info)
    RequestIdFilter().filter(record)
    return record


def test_json_lines_survive_quotes_and_newlines() -> None:
    set_request_id("req-42")
    record = make_record('claim "%s" said: %s', "c1", 'line one\nline "two"')

    line = JsonFormatter().format(record)

    assert "\n" not in line
    payload = json.loads(line)
    assert payload["msg"] == 'claim "c1" said: line one\nline "two"'
    assert payload["request_id"] == "req-42"
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "app.test"


def test_json_lines_carry_tracebacks() -> None:
    try:
        raise RuntimeError('backend said "no"')
    except RuntimeError:
        record = make_record("matching_failed found_item=%s", "x", exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert payload["msg"] == "matching_failed found_item=x"
    assert 'RuntimeError: backend said "no"' in payload["exc_info"]


def test_dict_config_picks_formatter() -> None:
    assert build_dict_config(json_fmt=True)["formatters"]["default"]["()"] is JsonFormatter
    assert "format" in build_dict_config(json_fmt=False)["formatters"]["default"]
