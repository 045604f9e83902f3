import logging
from datetime import datetime, timedelta, timezone
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from app.database.supabase_client import first_row
from app.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMemberResponse,
    TeamRequestResponse, AdminNotificationCounts
)

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 7


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_team(self, team_data: TeamCreate) -> TeamResponse:
        try:
            result = self.supabase.table("teams").insert({
                "name": team_data.name,
                "description": team_data.description
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team")

            return TeamResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_team_by_id(self, team_id: str) -> TeamResponse:
        try:
            result = self.supabase.table("teams")\
                .select("*")\
                .eq("id", team_id)\
                .maybe_single()\
                .execute()
            team = first_row(result)
            if not team:
                raise HTTPException(status_code=404, detail="Team not found")
            return TeamResponse(**team)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_team_by_name(self, name: str) -> Optional[TeamResponse]:
        result = self.supabase.table("teams")\
            .select("*")\
            .eq("name", name)\
            .maybe_single()\
            .execute()
        team = first_row(result)
        return TeamResponse(**team) if team else None

    def update_team(self, team_id: str, team_data: TeamUpdate) -> TeamResponse:
        try:
            update_data = team_data.model_dump(exclude_unset=True)
            if not update_data:
                return self.get_team_by_id(team_id)
            update_data["updated_at"] = _now()

            result = self.supabase.table("teams")\
                .update(update_data)\
                .eq("id", team_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Team not found")

            return TeamResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_teams(self) -> List[TeamResponse]:
        try:
            result = self.supabase.table("teams")\
                .select("*")\
                .order("name")\
                .execute()
            return [TeamResponse(**team) for team in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_team(self, team_id: str) -> bool:
        try:
            # Delete team members first
            self.supabase.table("team_members")\
                .delete()\
                .eq("team_id", team_id)\
                .execute()

            result = self.supabase.table("teams")\
                .delete()\
                .eq("id", team_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Team not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_member(self, team_id: str, user_id: str) -> TeamMemberResponse:
        """Add a user to a team; adding an existing member returns the existing row"""
        try:
            # Verify team exists
            self.get_team_by_id(team_id)

            existing = self.supabase.table("team_members")\
                .select("*")\
                .eq("team_id", team_id)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            row = first_row(existing)
            if row:
                return TeamMemberResponse(**row)

            result = self.supabase.table("team_members").insert({
                "team_id": team_id,
                "user_id": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member")

            return TeamMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, team_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("team_members")\
                .delete()\
                .eq("team_id", team_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Team member not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, team_id: str) -> List[TeamMemberResponse]:
        try:
            result = self.supabase.table("team_members")\
                .select("*")\
                .eq("team_id", team_id)\
                .execute()

            return [TeamMemberResponse(**member) for member in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_notification_counts(self) -> AdminNotificationCounts:
        """Pending team requests plus uploads and sign-ups of the last 7 days"""
        since = (datetime.now(timezone.utc) - timedelta(days=RECENT_WINDOW_DAYS)).isoformat()
        try:
            requests_result = self.supabase.table("team_requests")\
                .select("id")\
                .eq("status", "pending")\
                .execute()
            uploads_result = self.supabase.table("uploads")\
                .select("id")\
                .gte("created_at", since)\
                .execute()
            profiles_result = self.supabase.table("profiles")\
                .select("id")\
                .gte("created_at", since)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching notification counts: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        team_requests = len(requests_result.data or [])
        new_uploads = len(uploads_result.data or [])
        recent_users = len(profiles_result.data or [])
        return AdminNotificationCounts(
            team_requests=team_requests,
            new_uploads=new_uploads,
            recent_users=recent_users,
            total=team_requests + new_uploads + recent_users
        )


class TeamRequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.teams = TeamService(supabase)

    def create_request(self, user_id: str, team_name: str) -> TeamRequestResponse:
        """Ask to join a team by name; one pending request per user and team"""
        team_name = team_name.strip()
        try:
            existing = self.supabase.table("team_requests")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("team_name", team_name)\
                .eq("status", "pending")\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="You already have a pending request for this team")

            result = self.supabase.table("team_requests").insert({
                "user_id": user_id,
                "team_name": team_name,
                "status": "pending"
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team request")

            logger.info(f"Team request for {team_name} created by user {user_id}")
            return TeamRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_requests(
        self,
        status: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> List[TeamRequestResponse]:
        try:
            query = self.supabase.table("team_requests").select("*")
            if status:
                query = query.eq("status", status)
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("created_at", desc=True).execute()
            return [TeamRequestResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_request(self, request_id: str) -> TeamRequestResponse:
        try:
            result = self.supabase.table("team_requests")\
                .select("*")\
                .eq("id", request_id)\
                .maybe_single()\
                .execute()
            row = first_row(result)
            if not row:
                raise HTTPException(status_code=404, detail="Team request not found")
            return TeamRequestResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _set_status(self, request_id: str, status: str) -> TeamRequestResponse:
        result = self.supabase.table("team_requests")\
            .update({"status": status, "updated_at": _now()})\
            .eq("id", request_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Team request not found")
        return TeamRequestResponse(**result.data[0])

    def approve_request(self, request_id: str) -> TeamRequestResponse:
        """Approve: join the team when it exists and make it the requester's assigned team"""
        request = self.get_request(request_id)
        if request.status != "pending":
            raise HTTPException(status_code=400, detail=f"Team request already {request.status}")
        try:
            team = self.teams.get_team_by_name(request.team_name)
            if team:
                self.teams.add_member(team.id, request.user_id)
            else:
                logger.info(f"Team {request.team_name} does not exist yet; only assigning it to the profile")

            self.supabase.table("profiles")\
                .update({"assigned_team": request.team_name, "updated_at": _now()})\
                .eq("id", request.user_id)\
                .execute()

            return self._set_status(request_id, "approved")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reject_request(self, request_id: str) -> TeamRequestResponse:
        request = self.get_request(request_id)
        if request.status != "pending":
            raise HTTPException(status_code=400, detail=f"Team request already {request.status}")
        try:
            return self._set_status(request_id, "rejected")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
