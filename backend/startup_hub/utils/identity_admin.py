"""
Client for the identity provider's admin API (Supabase Auth).

Users live with the provider; this client lists them, reads one, merges
metadata patches (role, full name) and deletes accounts.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

import requests

import config
from ..services.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class IdentityAdminClient:
    def __init__(self, base_url: str, service_key: str, timeout: int = None):
        if not base_url or not service_key:
            raise ValueError("Identity provider URL and service key must be provided")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or config.IDENTITY_TIMEOUT_SECONDS
        self.session = requests.Session()
        self.session.headers.update({
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}/auth/v1/admin/{path}"

    def _request(self, method: str, path: str, **kwargs) -> Optional[requests.Response]:
        """Send a request; a 404 yields None, other failures raise UpstreamError"""
        try:
            response = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Identity provider request {method} {path} failed: {e}")
            raise UpstreamError("Identity provider is unavailable")

        if response.status_code == 404:
            return None
        if not response.ok:
            logger.error(f"Identity provider {method} {path} returned {response.status_code}: {response.text}")
            raise UpstreamError("Identity provider request failed")
        return response

    def list_users(self, page: int = 1, per_page: int = 1000) -> List[Dict[str, Any]]:
        response = self._request("GET", "users", params={"page": page, "per_page": per_page})
        if response is None:
            return []
        return response.json().get("users", [])

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = self._request("GET", f"users/{user_id}")
        return response.json() if response is not None else None

    def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge metadata into the user's user_metadata.

        Returns:
            The updated user, or None if the user does not exist
        """
        user = self.get_user(user_id)
        if user is None:
            return None
        merged = {**(user.get("user_metadata") or {}), **metadata}
        response = self._request("PUT", f"users/{user_id}", json={"user_metadata": merged})
        if response is None:
            return None
        logger.info(f"Updated metadata for user {user_id}: {sorted(metadata)}")
        return response.json()

    def delete_user(self, user_id: str) -> bool:
        """Returns False if the user does not exist"""
        response = self._request("DELETE", f"users/{user_id}")
        if response is None:
            return False
        logger.info(f"Deleted user {user_id}")
        return True


@lru_cache()
def get_identity_admin() -> IdentityAdminClient:
    return IdentityAdminClient(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
