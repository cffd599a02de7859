from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from pertcalc.estimation.types import PERCENTILES, UNITS, EstimateInput, Percentile, Unit

MIN_VALUE = 0.01
MIN_LAMBDA = 1.0

MSG_REQUIRED = "Required field."
MSG_POSITIVE = "Use positive numeric values."
MSG_LAMBDA = "Lambda must be at least 1."
MSG_ORDER = "The rule is O ≤ M ≤ P."


def parse_number(x: Any) -> float:
    """
    Accepts:
      - int/float like 4, 2.5
      - strings like "4", " 2.5 ", "2,5"
    Returns:
      float
    """
    if x is None:
        raise ValueError("Value cannot be None")
    if isinstance(x, bool):
        raise ValueError(f"Invalid number: {x!r}")
    if isinstance(x, (int, float)):
        v = float(x)
    else:
        s = str(x).strip().replace(",", ".")
        if s == "":
            raise ValueError(f"Invalid number: {x!r}")
        try:
            v = float(s)
        except Exception as e:
            raise ValueError(f"Invalid number: {x!r}") from e
    if not math.isfinite(v):
        raise ValueError(f"Invalid number: {x!r}")
    return v


def _is_blank(x: Any) -> bool:
    return x is None or (isinstance(x, str) and x.strip() == "")


@dataclass(frozen=True)
class ValidationResult:
    values: Dict[str, float] = field(default_factory=dict)
    field_errors: Dict[str, str] = field(default_factory=dict)
    form_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.field_errors and self.form_error is None

    def messages(self) -> list[str]:
        out = [f"{k}: {v}" for k, v in self.field_errors.items()]
        if self.form_error:
            out.append(self.form_error)
        return out


def _check_field(raw: Any, minimum: float, min_msg: str) -> tuple[Optional[float], Optional[str]]:
    if _is_blank(raw):
        return None, MSG_REQUIRED
    try:
        v = parse_number(raw)
    except ValueError:
        return None, MSG_POSITIVE
    if v < minimum:
        return v, min_msg
    return v, None


def validate_form(O: Any, M: Any, P: Any, lam: Any = 4) -> ValidationResult:
    """Validate the raw form values.

    Field rules: O/M/P required and >= 0.01, lambda required and >= 1.
    Cross-field rule O <= M <= P is only checked when O/M/P all parse.
    """
    values: Dict[str, float] = {}
    errors: Dict[str, str] = {}

    for name, raw in (("O", O), ("M", M), ("P", P)):
        v, err = _check_field(raw, MIN_VALUE, MSG_POSITIVE)
        if v is not None:
            values[name] = v
        if err:
            errors[name] = err

    v, err = _check_field(lam, MIN_LAMBDA, MSG_LAMBDA)
    if v is not None:
        values["lambda"] = v
    if err:
        errors["lambda"] = err

    form_error = None
    if all(k in values for k in ("O", "M", "P")):
        if values["O"] > values["M"] or values["M"] > values["P"]:
            form_error = MSG_ORDER

    return ValidationResult(values=values, field_errors=errors, form_error=form_error)


def to_input(
    result: ValidationResult,
    *,
    unit: Unit = "hours",
    percentiles: Iterable[int] = (90,),
) -> EstimateInput:
    """Build the calculator input from a passing validation result."""
    if not result.ok:
        raise ValueError(f"Cannot build input from invalid form: {result.messages()}")
    if unit not in UNITS:
        raise ValueError(f"Unknown unit: {unit!r}")

    pcts: list[Percentile] = []
    for p in percentiles:
        p = int(p)
        if p not in PERCENTILES:
            raise ValueError(f"Unsupported percentile: {p!r}")
        if p not in pcts:
            pcts.append(p)  # type: ignore[arg-type]

    return EstimateInput(
        O=result.values["O"],
        M=result.values["M"],
        P=result.values["P"],
        lam=result.values["lambda"],
        percentiles=tuple(pcts),
        unit=unit,
    )
