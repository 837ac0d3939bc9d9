"""
Grant Admin Script
Promotes (or demotes) a profile by e-mail. Used to bootstrap the first admin,
since role changes through the API already require an admin caller.

    python -m app.scripts.grant_admin --email owner@example.com
    python -m app.scripts.grant_admin --email someone@example.com --role viewer
"""

import argparse
import sys

from app.core.audit import AuditRecorder
from app.core.dependencies import PROFILES_TABLE
from app.database.supabase_client import get_service_supabase
from app.modules.users.schemas import Profile
from supabase import Client
from typing import Optional
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def grant_role(supabase: Client, email: str, role: str = "admin") -> Optional[Profile]:
    """Set the role of the profile with this e-mail. Returns None when no profile matches."""
    result = supabase.table(PROFILES_TABLE)\
        .update({"role": role})\
        .eq("email", email)\
        .execute()
    if not result.data:
        return None
    profile = Profile(**result.data[0])
    AuditRecorder(supabase).record(
        PROFILES_TABLE, "role_change", None, profile.id,
        {"new_role": role, "source": "grant_admin"},
    )
    return profile


def main(argv=None):
    parser = argparse.ArgumentParser(description="Grant a role to a profile by e-mail.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", choices=["admin", "viewer"], default="admin")
    args = parser.parse_args(argv)

    try:
        profile = grant_role(get_service_supabase(), args.email, args.role)
    except Exception as e:
        logger.error("Error granting role: %s", e)
        sys.exit(1)

    if profile is None:
        logger.error("No profile found for %s", args.email)
        sys.exit(1)
    logger.info("Profile %s (%s) now has role %s", profile.id, profile.email, profile.role)


if __name__ == "__main__":
    main()
