"""
Bearer tokens for the mail platform (Microsoft Graph application
permissions), acquired with an Azure AD client-secret credential.

azure-identity owns the OAuth2 exchange and the token cache. This module
only maps its failures onto the service's own error types so callers handle
one exception hierarchy:

  - network failure                 -> TransportError
  - rejected or unreadable response -> GatewayError
"""

import logging

from azure.core.credentials_async import AsyncTokenCredential
from azure.core.exceptions import AzureError, ServiceRequestError
from azure.identity.aio import ClientSecretCredential

from app.errors import GatewayError, TransportError

logger = logging.getLogger(__name__)

GRAPH_SCOPE = "https://graph.microsoft.com/.default"


class GraphTokenProvider:
    """Hands out Graph bearer tokens from one long-lived Azure credential."""

    def __init__(self, credential: AsyncTokenCredential, scope: str = GRAPH_SCOPE):
        self._credential = credential
        self._scope = scope

    @classmethod
    def from_client_secret(
        cls,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        scope: str = GRAPH_SCOPE,
    ) -> "GraphTokenProvider":
        return cls(ClientSecretCredential(tenant_id, client_id, client_secret), scope)

    async def get_token(self) -> str:
        """
        Return a valid bearer token.

        Raises:
            TransportError: the token endpoint could not be reached.
            GatewayError: the token request was rejected or unreadable.
        """
        try:
            access_token = await self._credential.get_token(self._scope)
        except ServiceRequestError as exc:
            raise TransportError(f"Token request failed: {exc}") from exc
        except AzureError as exc:
            raise GatewayError(
                "Token request was rejected",
                errors=[str(exc)],
                status_code=getattr(exc, "status_code", None),
            ) from exc
        except ValueError as exc:
            # Body that is not a token response, e.g. a proxy error page
            raise GatewayError("Token endpoint returned an unreadable body", errors=[str(exc)]) from exc

        if not access_token.token:
            raise GatewayError("Token endpoint returned no access token")
        return access_token.token

    async def close(self) -> None:
        await self._credential.close()
