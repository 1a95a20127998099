"""Bearer credentials of the signed-in user"""

import asyncio
import logging
from typing import Callable, Dict, Optional

import httpx

logger = logging.getLogger("mealbudget.client.session")


class SessionTokens:
    """
    Holds the access/refresh token pair.

    refresh() is guarded by a lock so several requests failing with 401 at the
    same time cause one refresh; the others see the token already changed.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        on_logout: Optional[Callable[[], None]] = None,
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.on_logout = on_logout
        self._refresh_lock = asyncio.Lock()

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def authorization_header(self) -> Dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    def update(self, access_token: str, refresh_token: str) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token

    async def refresh(
        self, http: httpx.AsyncClient, url: str, rejected_token: Optional[str]
    ) -> bool:
        """
        Exchange the refresh token for a new pair.

        Returns True when the caller should replay its request with the
        current token, False when the session cannot be recovered.
        """
        async with self._refresh_lock:
            if self.access_token and self.access_token != rejected_token:
                # Someone else refreshed while we waited
                return True
            if not self.refresh_token:
                return False

            try:
                response = await http.post(url, json={"refresh_token": self.refresh_token})
            except httpx.HTTPError as exc:
                logger.warning("Token refresh failed: %s", exc)
                return False

            if response.status_code != 200:
                logger.info("Token refresh rejected with HTTP %s", response.status_code)
                return False

            data = (response.json() or {}).get("data") or {}
            if not data.get("access_token") or not data.get("refresh_token"):
                return False
            self.update(data["access_token"], data["refresh_token"])
            logger.info("Session tokens refreshed")
            return True

    def logout(self) -> None:
        """Drop the tokens and tell the app the session is over"""
        self.access_token = None
        self.refresh_token = None
        logger.info("Session logged out")
        if self.on_logout is not None:
            self.on_logout()
