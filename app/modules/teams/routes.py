from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMemberAdd, TeamMemberResponse,
    TeamRequestCreate, TeamRequestResponse, TeamRequestStatus, AdminNotificationCounts
)
from app.modules.teams.service import TeamService, TeamRequestService
from app.core.dependencies import require_permission, require_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


def get_team_request_service(supabase: Client = Depends(get_supabase)) -> TeamRequestService:
    return TeamRequestService(supabase)


# Team request endpoints
@router.post("/requests", response_model=TeamRequestResponse, status_code=201)
async def create_team_request(
    request: TeamRequestCreate,
    user_data: Dict = Depends(require_permission("team_requests:create")),
    service: TeamRequestService = Depends(get_team_request_service)
):
    """Ask to join a team by name"""
    return service.create_request(user_data["id"], request.team_name)


@router.get("/requests/mine", response_model=List[TeamRequestResponse])
async def list_my_team_requests(
    user_data: Dict = Depends(require_permission("team_requests:create")),
    service: TeamRequestService = Depends(get_team_request_service)
):
    """Caller's pending team requests, newest first"""
    return service.list_requests(status="pending", user_id=user_data["id"])


@router.get("/requests", response_model=List[TeamRequestResponse])
async def list_team_requests(
    status: Optional[TeamRequestStatus] = None,
    user_data: Dict = Depends(require_permission("team_requests:read")),
    service: TeamRequestService = Depends(get_team_request_service)
):
    return service.list_requests(status=status)


@router.post("/requests/{request_id}/approve", response_model=TeamRequestResponse)
async def approve_team_request(
    request_id: str,
    user_data: Dict = Depends(require_permission("team_requests:review")),
    service: TeamRequestService = Depends(get_team_request_service)
):
    """Approve a request: adds membership and sets the requester's assigned team"""
    return service.approve_request(request_id)


@router.post("/requests/{request_id}/reject", response_model=TeamRequestResponse)
async def reject_team_request(
    request_id: str,
    user_data: Dict = Depends(require_permission("team_requests:review")),
    service: TeamRequestService = Depends(get_team_request_service)
):
    return service.reject_request(request_id)


@router.get("/notification-counts", response_model=AdminNotificationCounts)
async def get_notification_counts(
    user_data: Dict = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    """Counters for the admin notification bell"""
    return service.get_notification_counts()


# Team endpoints
@router.post("", response_model=TeamResponse, status_code=201)
async def create_team(
    team_data: TeamCreate,
    user_data: Dict = Depends(require_permission("teams:create")),
    service: TeamService = Depends(get_team_service)
):
    return service.create_team(team_data)


@router.get("", response_model=List[TeamResponse])
async def list_teams(
    user_data: Dict = Depends(require_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    """All teams ordered by name"""
    return service.list_teams()


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: str,
    user_data: Dict = Depends(require_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.get_team_by_id(team_id)


@router.put("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: str,
    team_data: TeamUpdate,
    user_data: Dict = Depends(require_permission("teams:update")),
    service: TeamService = Depends(get_team_service)
):
    return service.update_team(team_id, team_data)


@router.delete("/{team_id}", status_code=204)
async def delete_team(
    team_id: str,
    user_data: Dict = Depends(require_permission("teams:delete")),
    service: TeamService = Depends(get_team_service)
):
    """Delete a team and its memberships"""
    service.delete_team(team_id)
    return None


# Team member endpoints
@router.get("/{team_id}/members", response_model=List[TeamMemberResponse])
async def list_team_members(
    team_id: str,
    user_data: Dict = Depends(require_permission("teams:read")),
    service: TeamService = Depends(get_team_service)
):
    return service.list_members(team_id)


@router.post("/{team_id}/members", response_model=TeamMemberResponse, status_code=201)
async def add_team_member(
    team_id: str,
    member_data: TeamMemberAdd,
    user_data: Dict = Depends(require_permission("teams:manage_members")),
    service: TeamService = Depends(get_team_service)
):
    return service.add_member(team_id, member_data.user_id)


@router.delete("/{team_id}/members/{user_id}", status_code=204)
async def remove_team_member(
    team_id: str,
    user_id: str,
    user_data: Dict = Depends(require_permission("teams:manage_members")),
    service: TeamService = Depends(get_team_service)
):
    service.remove_member(team_id, user_id)
    return None
