from __future__ import annotations

from typing import Mapping

import httpx

from mapshelf.api.client import AuthApiClient, CredentialPolicy
from mapshelf.api.errors import AuthError
from mapshelf.config import get_settings
from mapshelf.utils.log import logger


class ServerSessionGuard:
    """
    Request-scoped admission check for server-rendered pages.

    Reads the refresh cookie from the incoming request, forwards it to the
    refresh endpoint and answers True only if a usable access token comes back.
    Holds no session state and caches nothing between requests; every failure
    is reported as False.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        cookie_name: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        s = get_settings()
        self.base_url = base_url or s.api_base()
        self.cookie_name = cookie_name or s.refresh_cookie_name
        self._transport = transport
        self._timeout = timeout

    async def is_authenticated(self, request_cookies: Mapping[str, str] | None) -> bool:
        value = (request_cookies or {}).get(self.cookie_name)
        if not value:
            return False

        client = AuthApiClient(
            base_url=self.base_url,
            credentials=CredentialPolicy.forward,
            cookies={self.cookie_name: str(value)},
            transport=self._transport,
            timeout=self._timeout,
        )
        try:
            data = await client.refresh()
        except AuthError as ex:
            logger.debug("guard.refresh_rejected", error=type(ex).__name__, code=ex.code)
            return False
        except Exception:
            logger.warning("guard.refresh_error", exc_info=True)
            return False
        finally:
            await client.aclose()
        return bool(data.access_token)
