import logging
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any, Tuple

from supabase import Client
from fastapi import HTTPException

from app.core import access
from app.database.supabase_client import first_row
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, AdminUserResponse

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            profile = first_row(result)
            if not profile:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**profile)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def ensure_profile(self, user: Dict[str, Any]) -> Tuple[ProfileResponse, bool]:
        """Return the caller's profile, creating it on first sign-in. Second value: created."""
        try:
            return self.get_profile(user["id"]), False
        except HTTPException as e:
            if e.status_code != 404:
                raise
        metadata = user.get("user_metadata") or {}
        display_name = metadata.get("full_name") or metadata.get("name")
        try:
            result = self.supabase.table("profiles").insert({
                "id": user["id"],
                "email": user.get("email"),
                "display_name": display_name,
                "role": "user",
                "maker_approved": False,
                "wants_to_be_maker": False,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create profile")
            logger.info(f"Profile created for user {user['id']}")
            return ProfileResponse(**result.data[0]), True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _update(self, user_id: str, update_data: Dict[str, Any]) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update({**update_data, "updated_at": _now()})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        update_data = profile_data.model_dump(exclude_unset=True)
        if not update_data:
            return self.get_profile(user_id)
        return self._update(user_id, update_data)

    def request_maker(self, user_id: str) -> ProfileResponse:
        """Flag the caller as wanting maker status; an admin approves it later"""
        profile = self.get_profile(user_id)
        if access.is_approved_maker(profile.model_dump()):
            raise HTTPException(status_code=400, detail="User is already an approved maker")
        return self._update(user_id, {"wants_to_be_maker": True})

    def approve_maker(self, user_id: str) -> ProfileResponse:
        return self._update(user_id, {"maker_approved": True, "role": "maker"})

    def revoke_maker(self, user_id: str) -> ProfileResponse:
        return self._update(user_id, {"maker_approved": False, "role": "user", "wants_to_be_maker": False})

    def set_assigned_team(self, user_id: str, assigned_team: Optional[str]) -> ProfileResponse:
        return self._update(user_id, {"assigned_team": assigned_team})

    def list_users(self, limit: int = 100, offset: int = 0) -> List[AdminUserResponse]:
        """Profiles combined with their app roles and team memberships"""
        try:
            profiles_result = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            profiles = profiles_result.data or []
            if not profiles:
                return []
            user_ids = [p["id"] for p in profiles]
            roles_result = self.supabase.table("user_roles")\
                .select("user_id, role")\
                .in_("user_id", user_ids)\
                .execute()
            members_result = self.supabase.table("team_members")\
                .select("user_id, team_id")\
                .in_("user_id", user_ids)\
                .execute()
            team_ids = list({m["team_id"] for m in members_result.data or []})
            team_names: Dict[str, str] = {}
            if team_ids:
                teams_result = self.supabase.table("teams")\
                    .select("id, name")\
                    .in_("id", team_ids)\
                    .execute()
                team_names = {t["id"]: t["name"] for t in teams_result.data or []}
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        roles_by_user: Dict[str, List[str]] = {}
        for row in roles_result.data or []:
            roles_by_user.setdefault(row["user_id"], []).append(row["role"])
        teams_by_user: Dict[str, List[str]] = {}
        for row in members_result.data or []:
            if row["team_id"] in team_names:
                teams_by_user.setdefault(row["user_id"], []).append(team_names[row["team_id"]])

        users = []
        for profile in profiles:
            roles = roles_by_user.get(profile["id"], [])
            users.append(AdminUserResponse(
                **ProfileResponse(**profile).model_dump(exclude={"created_at", "updated_at"}),
                roles=roles,
                teams=teams_by_user.get(profile["id"], []),
                display_roles=access.get_all_display_roles(profile, roles),
            ))
        return users
