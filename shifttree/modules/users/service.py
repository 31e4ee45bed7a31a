from supabase import Client
from shifttree.core.schemas import UserResponse
from typing import Any, Dict, Iterable, List, Optional

USER_COLUMNS = "id, email, username"


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get user_account row by email"""
        result = self.supabase.table("user_account")\
            .select(USER_COLUMNS)\
            .eq("email", email)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return result.data[0]

    def get_users_by_ids(self, user_ids: Iterable[str]) -> Dict[str, UserResponse]:
        """Map of user id -> UserResponse for the given ids (unknown ids are skipped)"""
        ids = sorted({str(i) for i in user_ids})
        if not ids:
            return {}
        result = self.supabase.table("user_account")\
            .select(USER_COLUMNS)\
            .in_("id", ids)\
            .execute()
        return {row["id"]: UserResponse.from_row(row) for row in result.data or []}

    def list_users(self, user_ids: List[str]) -> List[UserResponse]:
        """UserResponses in the order of user_ids"""
        users = self.get_users_by_ids(user_ids)
        return [users[i] for i in user_ids if i in users]
