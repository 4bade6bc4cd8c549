"""
Prometheus metrics collection.
"""

from prometheus_client import Counter, Histogram

# ============================================================
# Sign-in Metrics
# ============================================================

sign_in_attempts_total = Counter(
    "gardien_sign_in_attempts_total",
    "Sign-in attempts by outcome",
    ["outcome"],
)

sign_in_joined_total = Counter(
    "gardien_sign_in_joined_total",
    "Sign-in calls that joined an attempt already in flight",
)

sign_in_duration_seconds = Histogram(
    "gardien_sign_in_duration_seconds",
    "Sign-in attempt duration (includes time waiting on the user)",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

# ============================================================
# Verifier Metrics
# ============================================================

verifier_requests_total = Counter(
    "gardien_verifier_requests_total",
    "Remote verifier requests",
    ["operation", "status"],
)

verifier_request_duration_seconds = Histogram(
    "gardien_verifier_request_duration_seconds",
    "Remote verifier request duration",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ============================================================
# Session Metrics
# ============================================================

session_invalidations_total = Counter(
    "gardien_session_invalidations_total",
    "Sessions cleared by the consistency monitor or sign-out",
    ["reason"],
)

session_changes_dropped_total = Counter(
    "gardien_session_changes_dropped_total",
    "Session changes dropped as stale or tombstoned",
    ["cause"],
)

# ============================================================
# Ownership Metrics
# ============================================================

ownership_verifications_total = Counter(
    "gardien_ownership_verifications_total",
    "Ownership verifications by outcome",
    ["outcome"],
)
