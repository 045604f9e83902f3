"""
Seed Admins Script
Grants the admin app role to existing profiles, looked up by email.
Usage: python -m app.scripts.seed_admins admin@example.com [other@example.com ...]
Uses the service-role client so user_roles RLS does not block the inserts.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant_admin(supabase: Client, email: str) -> bool:
    """Grant admin to the profile with this email. Returns True when a role row was created."""
    profile_result = supabase.table("profiles")\
        .select("id")\
        .eq("email", email)\
        .execute()

    if not profile_result.data:
        logger.warning(f"No profile found for {email}; the user must sign in once first")
        return False

    user_id = profile_result.data[0]["id"]
    existing = supabase.table("user_roles")\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", "admin")\
        .execute()

    if existing.data:
        logger.info(f"{email} is already an admin")
        return False

    supabase.table("user_roles").insert({
        "user_id": user_id,
        "role": "admin"
    }).execute()
    logger.info(f"Granted admin to {email}")
    return True


def seed_admins(supabase: Client, emails: list) -> int:
    """Grant admin to every email; errors are logged per email"""
    granted = 0
    for email in emails:
        email = email.strip().lower()
        if not email:
            continue
        try:
            if grant_admin(supabase, email):
                granted += 1
        except Exception as e:
            logger.error(f"Error granting admin to {email}: {e}")
    return granted


def main():
    emails = sys.argv[1:]
    if not emails:
        logger.error("Usage: python -m app.scripts.seed_admins EMAIL [EMAIL ...]")
        sys.exit(1)
    try:
        supabase = get_service_supabase()
        logger.info("Starting admin seeding...")
        granted = seed_admins(supabase, emails)
        logger.info(f"Seeding completed: {granted} of {len(emails)} emails granted admin")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
