# dashboard_core.py: in-memory aggregations over already-fetched lists
from __future__ import annotations

import math
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from forms import get_path as _get

ALERT_WINDOW_DAYS = 30
READINESS_CHECKS = ("licenseValid", "safetyTraining", "medicallyFit", "vehicleAssigned")


def to_timestamp(value) -> Optional[pd.Timestamp]:
    """Parse an API date (ISO string / date / Timestamp) to a naive UTC Timestamp."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _now(now=None) -> pd.Timestamp:
    if now is None:
        return pd.Timestamp.now(tz="UTC").tz_localize(None)
    ts = to_timestamp(now)
    if ts is None:
        raise ValueError(f"Invalid reference time: {now!r}")
    return ts


def name_of(value, default: str = "Unknown") -> str:
    if isinstance(value, dict):
        return str(value.get("name") or value.get("_id") or default)
    return str(value) if value not in (None, "") else default


def readiness_status(tracker: Optional[dict]) -> bool:
    tracker = tracker or {}
    return all(bool(tracker.get(k)) for k in READINESS_CHECKS)


# ---------------------- histograms ----------------------

def humanize_status(value) -> str:
    return str(value).replace("_", " ")


def capitalize_label(value) -> str:
    s = str(value)
    return s[:1].upper() + s[1:]


def status_histogram(records: Iterable[dict], field: str = "status",
                     label: Callable[[object], str] = humanize_status) -> List[dict]:
    """[{label, count}] sorted by count desc, then label asc. Blank values are skipped."""
    counts: Counter = Counter()
    for rec in records or []:
        val = _get(rec, field)
        if val in (None, ""):
            continue
        counts[label(val)] += 1
    return [{"label": k, "count": c} for k, c in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


# ---------------------- expiry ----------------------

def days_remaining(expiry, now=None) -> Optional[int]:
    exp = to_timestamp(expiry)
    if exp is None:
        return None
    return int(math.ceil((exp - _now(now)) / pd.Timedelta(days=1)))


def alert_severity(days: int) -> str:
    if days <= 7:
        return "urgent"
    if days <= 15:
        return "warning"
    return "normal"


def expiry_alerts(sources: Iterable[Tuple[Iterable[dict], str, str, Callable[[dict], str]]],
                  now=None, window: int = ALERT_WINDOW_DAYS) -> List[dict]:
    """Upcoming expiries (0..window days) across several record lists, most urgent first.

    Each source is ``(records, date_field, type_label, item_fn)``. Items already past
    their expiry are not part of this view.
    """
    ref = _now(now)
    alerts = []
    for records, date_field, type_label, item_fn in sources:
        for rec in records or []:
            days = days_remaining(_get(rec, date_field), ref)
            if days is None or days < 0 or days > window:
                continue
            alerts.append({
                "type": type_label,
                "item": item_fn(rec),
                "expiryDate": to_timestamp(_get(rec, date_field)).date().isoformat(),
                "daysRemaining": days,
                "severity": alert_severity(days),
            })
    alerts.sort(key=lambda a: a["daysRemaining"])
    return alerts


def expiry_status(expiry, now=None) -> str:
    exp = to_timestamp(expiry)
    if exp is None:
        return "none"
    diff = (exp - _now(now)) / pd.Timedelta(days=1)
    if diff < 0:
        return "expired"
    if diff < ALERT_WINDOW_DAYS:
        return "expiring"
    return "valid"


def admin_expiry_alerts(residencies, govdocs, vehicles, now=None) -> List[dict]:
    return expiry_alerts([
        (residencies, "residencyExpiry", "Residency", lambda r: f"Employee {name_of(r.get('employee'))}"),
        (govdocs, "expiryDate", "Document", lambda d: d.get("title") or "Untitled"),
        (vehicles, "registrationExpiry", "Vehicle", lambda v: v.get("plateNumber") or "Unknown"),
    ], now=now)


def document_expiry_by_month(docs: Iterable[dict], now=None, months: int = 12) -> List[dict]:
    """Rolling months from the current one: active docs expiring vs. docs already marked expired."""
    ref = _now(now)
    start = ref.to_period("M")
    buckets = [start + i for i in range(months)]
    rows = {p: {"month": p.strftime("%b %Y"), "expiring": 0, "expired": 0} for p in buckets}
    for doc in docs or []:
        exp = to_timestamp(doc.get("expiryDate"))
        if exp is None:
            continue
        period = exp.to_period("M")
        if period not in rows:
            continue
        status = doc.get("status")
        if status == "active":
            rows[period]["expiring"] += 1
        elif status == "expired":
            rows[period]["expired"] += 1
    return [rows[p] for p in buckets]


def recent_activities(residencies, docs, cases, limit: int = 10) -> List[dict]:
    acts = []
    for r in residencies or []:
        acts.append(("Residency", r, f"Residency created for {name_of(r.get('employee'), 'employee')}",
                     "completed" if r.get("status") == "active" else "pending"))
    for d in docs or []:
        acts.append(("Document", d, f"Document {d.get('title') or ''} registered".replace("  ", " "),
                     "completed" if d.get("status") == "active" else "pending"))
    for c in cases or []:
        acts.append(("Legal", c, f"Legal case {c.get('caseNumber') or ''} opened".replace("  ", " "),
                     "pending" if c.get("status") == "open" else "completed"))
    out = []
    for typ, rec, desc, status in acts:
        ts = to_timestamp(rec.get("createdAt"))
        out.append({"date": ts, "description": desc, "type": typ, "status": status})
    # undated records sort last
    out.sort(key=lambda a: a["date"] if a["date"] is not None else pd.Timestamp.min, reverse=True)
    for a in out:
        a["date"] = a["date"].date().isoformat() if a["date"] is not None else ""
    return out[:limit]


# ---------------------- rollups ----------------------

def group_rollup(records: Iterable[dict], key_fn: Callable[[dict], str],
                 secondary_fn: Callable[[dict], str],
                 cost_fn: Callable[[dict], float]) -> Dict[str, dict]:
    groups: Dict[str, dict] = {}
    for rec in records or []:
        key = key_fn(rec)
        g = groups.setdefault(key, {"count": 0, "distinct": set(), "totalCost": 0.0})
        g["count"] += 1
        g["distinct"].add(secondary_fn(rec))
        g["totalCost"] += cost_fn(rec)
    return groups


def rollup_rows(groups: Dict[str, dict], key_name: str = "key", distinct_name: str = "distinct") -> List[dict]:
    rows = []
    for key, g in groups.items():
        count = g.get("count", 0)
        total = float(g.get("totalCost", 0.0))
        rows.append({
            key_name: key,
            "count": count,
            distinct_name: len(g.get("distinct", ())),
            "totalCost": round(total, 2),
            "averageCost": round(total / count, 2) if count else 0.0,
        })
    rows.sort(key=lambda r: (-r["count"], str(r[key_name])))
    return rows


def _cost(value) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    return v if np.isfinite(v) else 0.0


def travel_overview(trips: Iterable[dict], now=None, upcoming_days: int = 30) -> dict:
    trips = [t for t in (trips or []) if isinstance(t, dict)]
    ref = _now(now)
    horizon = ref + pd.Timedelta(days=upcoming_days)
    empty = {
        "activeTrips": [], "upcomingTrips": [], "completedTrips": [],
        "countryStats": {}, "employeeStats": {},
        "totalTrips": 0, "totalCost": 0.0, "avgTripDuration": 0.0,
    }
    if not trips:
        return empty

    active, upcoming, completed = [], [], []
    durations = []
    for t in trips:
        start, end = to_timestamp(t.get("startDate")), to_timestamp(t.get("endDate"))
        status = t.get("travelStatus")
        if status == "in_progress" and start is not None and end is not None and start <= ref <= end:
            active.append(t)
        if status == "scheduled" and start is not None and ref <= start <= horizon:
            upcoming.append(t)
        if status == "completed":
            completed.append(t)
        if start is not None and end is not None:
            durations.append((end - start) / pd.Timedelta(days=1))

    country = group_rollup(trips, lambda t: t.get("destinationCountry") or "Unknown",
                           lambda t: name_of(t.get("employee")), lambda t: _cost(t.get("actualAmount")))
    employee = group_rollup(trips, lambda t: name_of(t.get("employee")),
                            lambda t: t.get("destinationCountry") or "Unknown",
                            lambda t: _cost(t.get("actualAmount")))
    total_cost = float(sum(_cost(t.get("actualAmount")) for t in trips))
    return {
        "activeTrips": active,
        "upcomingTrips": upcoming,
        "completedTrips": completed,
        "countryStats": country,
        "employeeStats": employee,
        "totalTrips": len(trips),
        "totalCost": round(total_cost, 2),
        # trips without both dates count as zero-length, as in the per-trip average
        "avgTripDuration": round(float(np.sum(durations)) / len(trips), 1),
    }


# ---------------------- employees ----------------------

def employee_stats(employees: Iterable[dict]) -> dict:
    df = pd.DataFrame([e for e in (employees or []) if isinstance(e, dict)])
    total = len(df)
    if total == 0:
        return {
            "total": 0, "active": 0, "onLeave": 0, "resigned": 0, "suspended": 0,
            "totalSalary": 0.0, "avgSalary": 0.0,
            "departmentStats": {}, "siteStats": {}, "employmentTypeStats": {},
            "readyForField": 0, "needsAttention": 0,
        }

    def col(name, fill=None):
        return df[name] if name in df.columns else pd.Series([fill] * total, index=df.index)

    status = col("status").fillna("")
    salary = pd.to_numeric(col("salary"), errors="coerce").fillna(0.0)
    dept = col("department").fillna("").astype(str)
    site = col("site").fillna("").astype(str)
    etype = col("employmentType").replace("", np.nan).fillna("full-time").astype(str)

    def _ready(tr):
        return isinstance(tr, dict) and bool(tr.get("readyForField"))

    def _attention(row_docs, row_certs):
        flagged = ("expired", "expiring-soon")
        docs = row_docs if isinstance(row_docs, list) else []
        certs = row_certs if isinstance(row_certs, list) else []
        return any(isinstance(d, dict) and d.get("status") in flagged for d in docs + certs)

    total_salary = float(salary.sum())
    return {
        "total": total,
        "active": int((status == "active").sum()),
        "onLeave": int((status == "on-leave").sum()),
        "resigned": int((status == "resigned").sum()),
        "suspended": int((status == "suspended").sum()),
        "totalSalary": round(total_salary, 2),
        "avgSalary": round(total_salary / total, 2),
        "departmentStats": {k: int(v) for k, v in dept[dept != ""].value_counts().items()},
        "siteStats": {k: int(v) for k, v in site[site != ""].value_counts().items()},
        "employmentTypeStats": {k: int(v) for k, v in etype.value_counts().items()},
        "readyForField": int(col("readinessTracker").apply(_ready).sum()),
        "needsAttention": int(sum(_attention(d, c) for d, c in zip(col("documents"), col("certifications")))),
    }


# ---------------------- dashboard CSV ----------------------

def summary_metrics(employees, govdocs, vehicles, legal_cases, facilities, residencies) -> List[Tuple[str, str, str]]:
    def n(records, status):
        return sum(1 for r in records or [] if r.get("status") == status)

    pending = n(residencies, "pending_renewal") + n(govdocs, "pending_renewal") + n(vehicles, "expired")
    return [
        ("Total Employees", str(len(employees or [])), "Active"),
        ("Active Documents", str(n(govdocs, "active")), "Active"),
        ("Active Vehicles", str(n(vehicles, "active")), "Active"),
        ("Open Legal Cases", str(n(legal_cases, "open")), "Pending"),
        ("Active Facilities", str(n(facilities, "active")), "Active"),
        ("Pending Items", str(pending), "Requires Attention"),
    ]


SUMMARY_HEADERS: Sequence[str] = ("Metric", "Value", "Status")
