from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytz

from pertcalc.estimation.pert import days_to_hours, hours_to_days
from pertcalc.estimation.types import PERCENTILES, EstimateInput, EstimateResult, Unit, percentile_label

REPORT_TITLE = "PERT & P90 results"
DISPLAY_FORMAT = "%d/%m/%Y %H:%M:%S"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def convert(value: float, from_unit: Unit, to_unit: Unit) -> float:
    if from_unit == to_unit:
        return value
    if from_unit == "hours" and to_unit == "days":
        return hours_to_days(value)
    if from_unit == "days" and to_unit == "hours":
        return days_to_hours(value)
    raise ValueError(f"Cannot convert {from_unit!r} -> {to_unit!r}")


def fmt_num(x: float) -> str:
    """4.0 -> "4", 4.50 -> "4.5". No exponent notation."""
    s = f"{float(x):.6f}".rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def format_value(value: Optional[float], unit: Unit) -> str:
    if value is None:
        return ""
    return f"{fmt_num(value)} {unit}"


def result_entries(result: EstimateResult) -> List[Tuple[str, Optional[float]]]:
    """(label, value) pairs in P80..P95 order. Unrequested labels carry None."""
    return [(percentile_label(p), result.values.get(percentile_label(p))) for p in PERCENTILES]


def build_report_payload(inp: EstimateInput, result: EstimateResult, timestamp: Optional[str] = None) -> Dict[str, Any]:
    return {
        "input": inp.to_dict(),
        "result": result.to_dict(),
        "timestamp": timestamp or utc_now_iso(),
    }


def build_report_text(inp: EstimateInput, result: EstimateResult, timestamp: Optional[str] = None) -> str:
    """Plain-text summary followed by the JSON payload.

    This is what the "copy" block in the UI shows.
    """
    unit = inp.unit
    lines = [
        REPORT_TITLE,
        "",
        f"Inputs: O={fmt_num(inp.O)}, M={fmt_num(inp.M)}, P={fmt_num(inp.P)} {unit} (lambda={fmt_num(inp.lam)})",
        f"PERT mean: {format_value(result.mean, unit)}",
        f"Std dev (σ): {format_value(result.sigma, unit)}",
        "",
        "Percentiles:",
    ]
    for label, value in result_entries(result):
        if value is not None:
            lines.append(f"{label}: {format_value(value, unit)}")

    payload = build_report_payload(inp, result, timestamp)
    return "\n".join(lines) + "\n\n\nJSON:\n" + json.dumps(payload, indent=2, ensure_ascii=False)


def format_timestamp(iso: str, tz_name: str = "UTC") -> str:
    """ISO timestamp -> 'dd/mm/YYYY HH:MM:SS' in tz_name.

    Naive timestamps are assumed to be UTC. Unparseable input is returned as is.
    """
    try:
        dt = datetime.fromisoformat(str(iso).replace("Z", "+00:00"))
    except ValueError:
        return str(iso)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.utc
    return dt.astimezone(tz).strftime(DISPLAY_FORMAT)
