from __future__ import annotations

# Collection paths are defined once so pages and controllers never
# hand-assemble URLs.

RESOURCES = {
    "employees": "/employees",
    "admin_employees": "/admin/employees",
    "residencies": "/admin/employee-residencies",
    "government_documents": "/admin/government-documents",
    "vehicles": "/admin/vehicle-registrations",
    "assets": "/admin/assets",
    "correspondence": "/admin/government-correspondence",
    "legal_cases": "/admin/legal-cases",
    "facilities": "/admin/company-facilities",
    "travel": "/travel",
    "travel_requests": "/travel-requests",
    "travel_authorizations": "/travel-authorizations",
    "country_guidelines": "/travel/country-guidelines",
    "travel_notifications": "/travel/notifications",
    "documents": "/documents",
}


def resource_path(name: str, record_id: str | None = None, action: str | None = None) -> str:
    """Return ``/<collection>[/<id>][/<action>]`` for a logical resource."""
    try:
        base = RESOURCES[name]
    except KeyError:
        raise KeyError(
            f"Unknown resource '{name}'. Register it in api/resources.py."
        ) from None
    parts = [base.rstrip("/")]
    if record_id is not None and str(record_id) != "":
        parts.append(str(record_id))
    if action:
        parts.append(action.strip("/"))
    return "/".join(parts)
