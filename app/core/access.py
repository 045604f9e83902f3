"""
Access rules derived from a profile row and the user's user_roles.

Admin comes from user_roles; maker status comes from the profile
(role == "maker" and maker_approved). Everything here is pure so routes and
services can share it without touching the database.
"""

from typing import Any, Dict, Iterable, List, Optional

from app.config.permissions_config import get_permissions_for_roles

APP_ROLES = ("admin", "moderator", "user")

DISPLAY_ADMIN = "Admin"
DISPLAY_MAKER = "Badge Maker"
DISPLAY_PENDING_MAKER = "Pending Badge Maker"
DISPLAY_MODERATOR = "Moderator"
DISPLAY_USER = "User"


def is_admin(roles: Iterable[str]) -> bool:
    return "admin" in set(roles or [])


def is_moderator(roles: Iterable[str]) -> bool:
    return "moderator" in set(roles or [])


def is_approved_maker(profile: Optional[Dict[str, Any]]) -> bool:
    if not profile:
        return False
    return profile.get("role") == "maker" and bool(profile.get("maker_approved"))


def is_pending_maker(profile: Optional[Dict[str, Any]]) -> bool:
    if not profile:
        return False
    return profile.get("role") == "maker" and not profile.get("maker_approved")


def effective_roles(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> List[str]:
    """Roles used for permission lookups. Every signed-in account is a "user"."""
    roles = set(roles or [])
    result = ["user"]
    if "moderator" in roles:
        result.append("moderator")
    if is_approved_maker(profile):
        result.append("maker")
    if "admin" in roles:
        result.append("admin")
    return result


def permissions_for(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> List[str]:
    return get_permissions_for_roles(effective_roles(profile, roles))


def can_access_admin(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> bool:
    return is_admin(roles) or is_approved_maker(profile)


def can_manage_users(roles: Iterable[str]) -> bool:
    return is_admin(roles)


def can_manage_teams(roles: Iterable[str]) -> bool:
    return is_admin(roles)


def can_manage_badges(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> bool:
    return is_admin(roles) or is_approved_maker(profile)


def can_edit_badge(profile: Optional[Dict[str, Any]], roles: Iterable[str], badge_team_name: Optional[str]) -> bool:
    """Admins edit any badge; approved makers only badges of their assigned team."""
    if is_admin(roles):
        return True
    if is_approved_maker(profile):
        return badge_team_name is not None and badge_team_name == profile.get("assigned_team")
    return False


def get_display_role(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> str:
    roles = list(roles or [])
    if is_admin(roles):
        return DISPLAY_ADMIN
    if is_approved_maker(profile):
        return DISPLAY_MAKER
    if is_pending_maker(profile):
        return DISPLAY_PENDING_MAKER
    if is_moderator(roles):
        return DISPLAY_MODERATOR
    return DISPLAY_USER


def get_all_display_roles(profile: Optional[Dict[str, Any]], roles: Iterable[str]) -> List[str]:
    roles = list(roles or [])
    display = []
    if is_admin(roles):
        display.append(DISPLAY_ADMIN)
    if is_approved_maker(profile):
        display.append(DISPLAY_MAKER)
    elif is_pending_maker(profile):
        display.append(DISPLAY_PENDING_MAKER)
    if is_moderator(roles):
        display.append(DISPLAY_MODERATOR)
    if not display:
        display.append(DISPLAY_USER)
    return display
