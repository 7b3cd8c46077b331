"""
Tests for abnormal value detection and month labels.
"""
import locale
from datetime import date

from clinic_api.medical_reports.analysis import find_abnormal_values, month_key


def test_plain_values_are_never_abnormal():
    assert find_abnormal_values({"hemoglobin": 9, "remark": "ok"}) == []
    assert find_abnormal_values(None) == []


def test_bounds_are_inclusive():
    results = {"a": {"value": 12, "min": 12, "max": 16}, "b": {"value": 16, "min": 12, "max": 16}}
    assert find_abnormal_values(results) == []


def test_one_sided_and_string_bounds():
    results = {
        "ldl": {"value": "190", "max": "160"},
        "vitamin_d": {"value": 15, "min": 20},
        "unparseable": {"value": "n/a", "min": 1},
        "flag": {"value": True, "max": 0},
    }
    found = {entry["test"]: entry["status"] for entry in find_abnormal_values(results)}
    assert found == {"ldl": "high", "vitamin_d": "low"}


def test_month_key_uses_english_abbreviations():
    assert month_key(date(2024, 1, 31)) == "Jan 2024"
    assert month_key(date(2023, 12, 1)) == "Dec 2023"


def test_month_key_ignores_process_locale():
    previous = locale.setlocale(locale.LC_TIME)
    for name in ("de_DE.UTF-8", "fr_FR.UTF-8", "es_ES.UTF-8"):
        try:
            locale.setlocale(locale.LC_TIME, name)
            break
        except locale.Error:
            continue
    try:
        assert month_key(date(2024, 5, 2)) == "May 2024"
        assert month_key(date(2024, 10, 2)) == "Oct 2024"
    finally:
        locale.setlocale(locale.LC_TIME, previous)
