from __future__ import annotations

from staff_portal.core.locations import ALL_LOCATIONS, STORE_LOCATIONS

GROUP_ROLES = {"admin", "operation", "ops"}
SITE_ROLES = {"manager"}


def _normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def can_view_group(role: str | None) -> bool:
    return _normalize_role(role) in GROUP_ROLES


def allowed_locations(role: str | None, home_location: str | None = None) -> list[str]:
    """Financial views a profile may open, in dropdown order.

    Group roles see every brand and site; managers are pinned to their home
    site (the first store when the profile has none). Every other role,
    including a missing one, sees nothing.
    """
    normalized = _normalize_role(role)
    if normalized in GROUP_ROLES:
        return list(ALL_LOCATIONS)
    if normalized in SITE_ROLES:
        return [home_location or STORE_LOCATIONS[0]]
    return []


def is_location_allowed(location: str, role: str | None, home_location: str | None = None) -> bool:
    return location in allowed_locations(role, home_location)
