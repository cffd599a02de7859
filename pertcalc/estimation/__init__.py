"""Estimation package.

Three-point (beta-PERT) estimates:
- Weighted mean with a tunable lambda (classical PERT uses 4)
- Sigma from the six-sigma range assumption
- One-sided percentiles (P80/P85/P90/P95) from a fixed z-score table

Everything here is pure arithmetic. Validation and persistence live elsewhere.
"""
