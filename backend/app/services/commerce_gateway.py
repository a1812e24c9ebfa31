"""
Commerce platform gateway (Shopify Admin GraphQL API).

A single ``execute`` call submits a query or mutation plus variables and
returns the decoded ``data`` object. Every failure mode surfaces as a
GatewayError carrying the raw error list for logging:

  - network failure           -> TransportError
  - non-2xx HTTP status        -> GatewayError (status_code set)
  - top-level GraphQL errors   -> GatewayError (errors = response["errors"])
  - a mutation's userErrors    -> GatewayError (errors = payload["userErrors"])
  - a body of the wrong shape   -> GatewayError

The gateway never retries. Whether a failure is fatal is the workflow's call.
"""

import logging
from typing import Any, Optional

import httpx

from app.errors import GatewayError, TransportError
from app.models.intake import (
    CustomerRecord,
    RemoteFileReference,
    StagedUploadParameter,
    StagedUploadTarget,
)
from app.services import commerce_queries
from app.services.normalizer import file_content_type

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
CUSTOMER_GID_PREFIX = "gid://shopify/Customer/"


def customer_gid(customer_id: str) -> str:
    """Expand a numeric customer id to its global id; gids pass through."""
    customer_id = str(customer_id).strip()
    if customer_id.startswith("gid://"):
        return customer_id
    return f"{CUSTOMER_GID_PREFIX}{customer_id}"


class CommerceGateway:
    """Authenticated client for the one fixed back-office GraphQL endpoint."""

    def __init__(self, endpoint: str, access_token: str, client: httpx.AsyncClient):
        self.endpoint = endpoint
        self._access_token = access_token
        self._client = client

    async def execute(self, query: str, variables: Optional[dict] = None) -> dict:
        """
        Run one GraphQL operation and return its ``data`` object.

        Raises:
            TransportError: the request never got a response.
            GatewayError: non-2xx status, GraphQL errors, or userErrors.
        """
        try:
            response = await self._client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers={ACCESS_TOKEN_HEADER: self._access_token},
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Commerce API request failed: {exc}") from exc

        if not response.is_success:
            raise GatewayError(
                f"Commerce API returned HTTP {response.status_code}",
                errors=[response.text],
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            raise GatewayError(
                "Commerce API returned a non-JSON body",
                errors=[response.text],
                status_code=response.status_code,
            )

        if not isinstance(body, dict):
            raise GatewayError(
                "Commerce API returned an unexpected body",
                errors=[response.text],
                status_code=response.status_code,
            )

        if body.get("errors"):
            raise GatewayError("Commerce API returned GraphQL errors", errors=body["errors"])

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise GatewayError("Commerce API returned an unexpected data object", errors=[response.text])
        for operation, payload in data.items():
            if isinstance(payload, dict) and payload.get("userErrors"):
                raise GatewayError(
                    f"{operation} returned userErrors",
                    errors=payload["userErrors"],
                )
        return data

    # ------------------------------------------------------------------
    # Typed operations
    # ------------------------------------------------------------------

    async def create_staged_upload(self, filename: str, mime_type: str) -> StagedUploadTarget:
        data = await self.execute(
            commerce_queries.STAGED_UPLOADS_CREATE,
            {
                "input": {
                    "filename": filename,
                    "httpMethod": "POST",
                    "mimeType": mime_type,
                    "resource": "FILE",
                }
            },
        )
        targets = _payload(data, "stagedUploadsCreate").get("stagedTargets") or []
        if not isinstance(targets, list) or not targets:
            raise GatewayError("stagedUploadsCreate returned no staged target")

        target = targets[0]
        if not isinstance(target, dict):
            raise GatewayError("stagedUploadsCreate returned an incomplete target", errors=[target])
        parameters = target.get("parameters") or []
        if (
            not target.get("resourceUrl")
            or not target.get("url")
            or not isinstance(parameters, list)
            or not all(isinstance(p, dict) and "name" in p and "value" in p for p in parameters)
        ):
            raise GatewayError("stagedUploadsCreate returned an incomplete target", errors=[target])

        return StagedUploadTarget(
            resource_url=target["resourceUrl"],
            post_url=target["url"],
            parameters=[StagedUploadParameter(name=p["name"], value=p["value"]) for p in parameters],
        )

    async def create_file(self, resource_url: str, mime_type: str) -> RemoteFileReference:
        data = await self.execute(
            commerce_queries.FILE_CREATE,
            {
                "files": {
                    "contentType": file_content_type(mime_type),
                    "originalSource": resource_url,
                }
            },
        )
        files = _payload(data, "fileCreate").get("files") or []
        if not isinstance(files, list) or not files or not isinstance(files[0], dict) or not files[0].get("id"):
            raise GatewayError("fileCreate returned no file id")
        return RemoteFileReference(file_id=files[0]["id"])

    async def set_customer_metafield(
        self,
        customer_id: str,
        namespace: str,
        key: str,
        type: str,
        value: str,
    ) -> list[dict]:
        data = await self.execute(
            commerce_queries.METAFIELDS_SET,
            {
                "metafields": [
                    {
                        "key": key,
                        "namespace": namespace,
                        "ownerId": customer_gid(customer_id),
                        "type": type,
                        "value": value,
                    }
                ]
            },
        )
        metafields = _payload(data, "metafieldsSet").get("metafields")
        if not metafields:
            raise GatewayError("metafieldsSet returned no metafields")
        return metafields

    async def create_customer(self, customer_input: dict) -> Optional[CustomerRecord]:
        """
        Create a customer. Returns None when the platform created nothing
        without saying why; rejected input raises GatewayError with userErrors.
        """
        data = await self.execute(commerce_queries.CUSTOMER_CREATE, {"input": customer_input})
        customer = _payload(data, "customerCreate").get("customer")
        if not isinstance(customer, dict) or not customer.get("id"):
            return None

        edges = (customer.get("metafields") or {}).get("edges") or []
        return CustomerRecord(
            id=customer["id"],
            email=customer.get("email"),
            phone=customer.get("phone"),
            metafields=[edge.get("node") or {} for edge in edges],
        )

    async def generate_activation_url(self, customer_id: str) -> str:
        data = await self.execute(
            commerce_queries.CUSTOMER_GENERATE_ACTIVATION_URL,
            {"customerId": customer_gid(customer_id)},
        )
        url = _payload(data, "customerGenerateAccountActivationUrl").get("accountActivationUrl")
        if not url:
            raise GatewayError("customerGenerateAccountActivationUrl returned no URL")
        return url


def _payload(data: dict, operation: str) -> dict[str, Any]:
    """Return the mutation payload, failing loudly if the shape is wrong."""
    payload = data.get(operation)
    if not isinstance(payload, dict):
        raise GatewayError(f"Commerce API response is missing {operation}")
    return payload
