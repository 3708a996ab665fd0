from typing import Literal, Optional

Role = Literal["admin", "engineer", "support"]

# Pool order determines the order of Ticket.assignees.
ASSIGNMENT_ROLES: tuple[str, ...] = ("admin", "engineer", "support")

# Older profiles were created with "viewer" for the read-mostly role.
_ROLE_ALIASES = {"viewer": "support"}


def normalize_role(value: Optional[str]) -> str:
    """Map a raw role string onto the canonical admin/engineer/support set.

    Raises ValueError for anything else so pydantic validators can surface it.
    """
    role = (value or "").strip().lower()
    role = _ROLE_ALIASES.get(role, role)
    if role not in ASSIGNMENT_ROLES:
        raise ValueError(f"Unknown role '{value}'. Expected one of: {', '.join(ASSIGNMENT_ROLES)}")
    return role


def stored_values(role: str) -> list[str]:
    """Every raw value a stored profile row may carry for a canonical role."""
    return [role] + [alias for alias, target in _ROLE_ALIASES.items() if target == role]


def legacy_aliases() -> dict[str, str]:
    return dict(_ROLE_ALIASES)
