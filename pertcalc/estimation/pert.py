from __future__ import annotations

import math
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pertcalc.estimation.types import (
    PERCENTILES,
    EstimateInput,
    EstimateResult,
    Percentile,
    percentile_label,
)

HOURS_PER_DAY = 8.0
DEFAULT_LAMBDA = 4.0

# One-sided normal z-scores (P90 -> 1.2816, not the two-sided 1.645).
Z_SCORES: Mapping[int, float] = MappingProxyType(
    {
        80: 0.8416,
        85: 1.036,
        90: 1.2816,
        95: 1.6449,
    }
)


def mean_pert(O: float, M: float, P: float, lam: float = DEFAULT_LAMBDA) -> float:
    """Beta-PERT weighted mean.

    (O + lam*M + P) / (lam + 2)

    lam=4 is the classical PERT weighting. lam=0 degrades to the midpoint of O..P.
    lam=-2 has no mean: returns +/-inf (nan for a zero numerator) instead of raising.
    """
    num = O + lam * M + P
    den = lam + 2
    if den == 0:
        return math.nan if num == 0 else math.copysign(math.inf, num)
    return num / den


def sigma(O: float, P: float) -> float:
    """Standard deviation under the six-sigma range assumption.

    Negative when P < O. Ordering is the validator's job, not ours.
    """
    return (P - O) / 6


def percentile(mean: float, sigma: float, p: Percentile) -> float:
    return mean + Z_SCORES[p] * sigma


def round2(x: float) -> float:
    """Round to 2 decimals, ties towards +inf on the scaled value.

    floor(x*100 + 0.5) / 100, the same tie-break as JavaScript's Math.round:
      0.125  -> 0.13
      -0.125 -> -0.12
      1.005  -> 1.0   (1.005*100 is 100.49999... in binary)

    NaN/inf pass through untouched. Values too large to scale (|x| > ~1.8e306)
    have no fractional part and are returned as is.
    """
    scaled = x * 100 + 0.5
    if not math.isfinite(scaled):
        return x
    return math.floor(scaled) / 100


def calculate(inp: EstimateInput) -> EstimateResult:
    """Mean, sigma and the requested percentiles, all rounded to 2 decimals.

    Percentiles are derived from the unrounded mean/sigma. Labels that were not
    requested map to None.
    """
    mu = mean_pert(inp.O, inp.M, inp.P, inp.lam)
    sd = sigma(inp.O, inp.P)

    requested = set(int(p) for p in inp.percentiles)
    values: Dict[str, Optional[float]] = {}
    for p in PERCENTILES:
        values[percentile_label(p)] = round2(percentile(mu, sd, p)) if p in requested else None

    return EstimateResult(mean=round2(mu), sigma=round2(sd), values=values)


def hours_to_days(hours: float) -> float:
    return round2(hours / HOURS_PER_DAY)


def days_to_hours(days: float) -> float:
    return round2(days * HOURS_PER_DAY)
