"""
Binary relay to a staged object-storage target.

The commerce platform hands out a pre-signed POST target together with form
parameters. The storage signature covers those fields, so they are written
into the multipart body exactly in the order supplied, with the file bytes
as the last field.
"""

import logging

import httpx

from app.errors import GatewayError, TransportError
from app.models.intake import StagedUploadTarget

logger = logging.getLogger(__name__)

FILE_FIELD_NAME = "file"


def build_multipart_fields(
    target: StagedUploadTarget,
    content: bytes,
    filename: str,
    mime_type: str,
) -> list[tuple[str, tuple]]:
    """
    Build the ordered multipart field list for httpx.

    Plain form fields are encoded as ``(name, (None, value))`` so httpx writes
    them without a filename; passing everything through ``files`` (a list)
    keeps the order intact.
    """
    fields: list[tuple[str, tuple]] = [
        (param.name, (None, param.value.encode("utf-8")))
        for param in target.parameters
    ]
    fields.append((FILE_FIELD_NAME, (filename, content, mime_type)))
    return fields


class BinaryRelay:
    """Physically transfers file bytes to a staged upload target."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def transfer(
        self,
        target: StagedUploadTarget,
        content: bytes,
        filename: str,
        mime_type: str,
    ) -> str:
        """
        POST the file to ``target.post_url`` and return ``target.resource_url``.

        Raises:
            TransportError: network failure.
            GatewayError: storage answered with a non-2xx status.
        """
        fields = build_multipart_fields(target, content, filename, mime_type)

        try:
            response = await self._client.post(target.post_url, files=fields)
        except httpx.HTTPError as exc:
            raise TransportError(f"Staged upload transfer failed: {exc}") from exc

        if not response.is_success:
            raise GatewayError(
                f"Staged upload target returned HTTP {response.status_code}",
                errors=[response.text],
                status_code=response.status_code,
            )

        logger.info(
            "Transferred %d bytes to staged target (%d signed fields)",
            len(content),
            len(target.parameters),
        )
        return target.resource_url
