from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple

Percentile = Literal[80, 85, 90, 95]
PercentileLabel = Literal["P80", "P85", "P90", "P95"]
Unit = Literal["hours", "days"]

PERCENTILES: Tuple[Percentile, ...] = (80, 85, 90, 95)
UNITS: Tuple[Unit, ...] = ("hours", "days")


def percentile_label(p: Percentile) -> PercentileLabel:
    return f"P{int(p)}"  # type: ignore[return-value]


@dataclass(frozen=True)
class EstimateInput:
    O: float
    M: float
    P: float
    lam: float = 4.0
    percentiles: Tuple[Percentile, ...] = field(default_factory=tuple)
    unit: Unit = "hours"

    def to_dict(self) -> Dict[str, object]:
        return {
            "O": self.O,
            "M": self.M,
            "P": self.P,
            "lambda": self.lam,
            "percentiles": list(self.percentiles),
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, object]) -> "EstimateInput":
        unit = str(d.get("unit") or "hours")
        if unit not in UNITS:
            raise ValueError(f"Unknown unit: {unit!r}")
        raw = d.get("percentiles") or []
        if not isinstance(raw, (list, tuple)):
            raise ValueError(f"percentiles must be a list, got {type(raw).__name__}")
        pcts = []
        for p in raw:
            f = float(p)  # type: ignore[arg-type]
            # rejects inf/nan and fractional values like 90.7
            if not f.is_integer() or int(f) not in PERCENTILES:
                raise ValueError(f"Unsupported percentile: {p!r}")
            pcts.append(int(f))
        return cls(
            O=float(d["O"]),  # type: ignore[arg-type]
            M=float(d["M"]),  # type: ignore[arg-type]
            P=float(d["P"]),  # type: ignore[arg-type]
            lam=float(d.get("lambda", 4.0)),  # type: ignore[arg-type]
            percentiles=tuple(pcts),  # type: ignore[arg-type]
            unit=unit,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class EstimateResult:
    mean: float
    sigma: float
    values: Dict[str, Optional[float]]  # P80/P85/P90/P95 -> value or None

    def get(self, p: Percentile) -> Optional[float]:
        return self.values.get(percentile_label(p))

    def to_dict(self) -> Dict[str, object]:
        return {"mean": self.mean, "sigma": self.sigma, "values": dict(self.values)}

    @classmethod
    def from_dict(cls, d: Dict[str, object]) -> "EstimateResult":
        raw = d.get("values") or {}
        if not isinstance(raw, dict):
            raise ValueError("values must be a mapping")
        values: Dict[str, Optional[float]] = {}
        for p in PERCENTILES:
            label = percentile_label(p)
            v = raw.get(label)
            values[label] = None if v is None else float(v)
        return cls(mean=float(d["mean"]), sigma=float(d["sigma"]), values=values)  # type: ignore[arg-type]
