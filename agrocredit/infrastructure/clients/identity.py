"""Identity provider HTTP client for resolving bearer tokens to principals"""

import httpx
from agrocredit.domain.models import Principal
from agrocredit.domain.exceptions import AuthenticationError, DependencyFailure
from agrocredit.config import settings


class IdentityClient:
    """Client for the external auth service's user endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.identity_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.identity_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_principal(self, token: str) -> Principal:
        """
        Resolve an access token to the authenticated user.

        The role is read from user_metadata.role, falling back to
        app_metadata.role; it may be absent for accounts without one.

        Raises:
            AuthenticationError: Token rejected (401/403)
            DependencyFailure: On timeout, other HTTP errors, or invalid response
        """
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
                if response.status_code in (401, 403):
                    raise AuthenticationError("Invalid or expired access token")
                response.raise_for_status()
                data = response.json()

                user_meta = data.get("user_metadata") or {}
                app_meta = data.get("app_metadata") or {}
                return Principal(
                    id=str(data["id"]),
                    email=data.get("email") or "",
                    role=user_meta.get("role") or app_meta.get("role"),
                    name=user_meta.get("name") or user_meta.get("full_name"),
                    phone=data.get("phone") or user_meta.get("phone") or None,
                )

            except httpx.TimeoutException as e:
                raise DependencyFailure(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DependencyFailure(f"Identity provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise DependencyFailure(f"Identity provider unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise DependencyFailure(f"Invalid user data from identity provider: {e}") from e
