"""
Report statistics and abnormal value detection.
"""
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from .models import MedicalReport
from .schemas import serialize_report

RECENT_REPORTS = 5

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                       "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def month_key(day) -> str:
    """Month label such as "Mar 2024", independent of the process locale."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"


def report_statistics(reports: Iterable[MedicalReport]) -> Dict[str, Any]:
    """
    Summarize an identity's reports.

    Args:
        reports: Reports to summarize, in any order

    Returns:
        Dict with total_reports, by_type, by_month ("Mon YYYY" keys) and
        the most recent reports by test date
    """
    ordered = sorted(reports, key=lambda report: (report.date, report.id), reverse=True)

    by_type = Counter(report.category.value for report in ordered)
    by_month = Counter(month_key(report.date) for report in ordered)

    return {
        "total_reports": len(ordered),
        "by_type": dict(by_type),
        "by_month": dict(by_month),
        "recent_reports": [serialize_report(report) for report in ordered[:RECENT_REPORTS]],
    }


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def find_abnormal_values(results: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    List result entries whose value falls outside their reference range.

    Only entries shaped like ``{"value": v, "min": lo, "max": hi}`` are
    checked; either bound may be missing. Plain values have no range and are
    never abnormal.

    Returns:
        One dict per abnormal entry with test, value, min, max and status ("low"/"high")
    """
    abnormalities = []
    for test, entry in (results or {}).items():
        if not isinstance(entry, dict):
            continue
        value = _to_number(entry.get("value"))
        if value is None:
            continue
        low = _to_number(entry.get("min"))
        high = _to_number(entry.get("max"))

        if low is not None and value < low:
            status = "low"
        elif high is not None and value > high:
            status = "high"
        else:
            continue

        abnormalities.append({
            "test": test,
            "value": value,
            "min": low,
            "max": high,
            "status": status,
        })
    return abnormalities
