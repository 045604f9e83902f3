import logging
from supabase import Client
from fastapi import HTTPException
from typing import List

from app.database.supabase_client import first_row
from app.modules.roles.schemas import UserRoleResponse

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_user_roles(self, user_id: str) -> List[UserRoleResponse]:
        """All user_roles rows for one user"""
        try:
            result = self.supabase.table("user_roles")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at")\
                .execute()
            return [UserRoleResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def assign_role(self, user_id: str, role: str) -> UserRoleResponse:
        """Grant an app role; assigning a role the user already holds returns the existing row"""
        try:
            existing = self.supabase.table("user_roles")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("role", role)\
                .maybe_single()\
                .execute()
            row = first_row(existing)
            if row:
                return UserRoleResponse(**row)

            result = self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "role": role
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to assign role")
            logger.info(f"Role {role} assigned to user {user_id}")
            return UserRoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_role(self, user_id: str, role: str) -> bool:
        try:
            result = self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("role", role)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Role assignment not found")
            logger.info(f"Role {role} removed from user {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
