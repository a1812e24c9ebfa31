"""
Pydantic models for the intake workflows.

All of these are request-scoped; nothing here is persisted locally.

Models:
  RegistrationRequest   : inbound self-registration form
  UploadedFile          : file part of the tax-exempt upload form
  UploadRequest         : inbound tax-exempt upload
  StagedUploadParameter : one signed form field for the object-storage POST
  StagedUploadTarget    : pre-signed upload destination from the commerce platform
  RemoteFileReference   : permanent file record created after the transfer
  CustomerRecord        : customer fields read back from customerCreate
  NotificationMessage   : one outbound email
"""

import os
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Inbound requests
# ---------------------------------------------------------------------------

class RegistrationRequest(BaseModel):
    """
    Self-registration form. Accepts the storefront's camelCase field names.

    Only ``email`` is required; no format check is done here (the commerce
    platform rejects bad addresses itself).
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    company_name: str = Field("", alias="companyName")
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str
    company_website: str = Field("", alias="companyWebsite")
    phone_number: str = Field("", alias="phoneNumber")

    @field_validator("email")
    @classmethod
    def email_must_be_present(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("email is required")
        return v.strip()

    @field_validator(
        "company_name", "first_name", "last_name", "company_website", "phone_number",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        # JSON clients sometimes send phone numbers as numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class UploadedFile(BaseModel):
    """The file part of an upload, already read into memory."""

    name: str
    content: bytes

    @property
    def declared_extension(self) -> str:
        return os.path.splitext(self.name)[1]

    @property
    def size(self) -> int:
        return len(self.content)


class UploadRequest(BaseModel):
    customer_id: str
    customer_company: str
    file: UploadedFile


# ---------------------------------------------------------------------------
# Commerce platform objects
# ---------------------------------------------------------------------------

class StagedUploadParameter(BaseModel):
    name: str
    value: str


class StagedUploadTarget(BaseModel):
    """
    Pre-signed upload destination.

    ``parameters`` must be sent in the order received: the storage signature
    covers them.
    """

    resource_url: str
    post_url: str
    parameters: list[StagedUploadParameter] = []


class RemoteFileReference(BaseModel):
    file_id: str


class CustomerRecord(BaseModel):
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    metafields: list[dict] = []


# ---------------------------------------------------------------------------
# Outbound email
# ---------------------------------------------------------------------------

class NotificationMessage(BaseModel):
    subject: str
    body: str
    content_type: Literal["html", "text"] = "html"
    recipients: list[str]
    sender: str

    @field_validator("recipients")
    @classmethod
    def dedupe_recipients(cls, v: list[str]) -> list[str]:
        # Keep first-seen order
        seen: set = set()
        ordered: list[str] = []
        for address in v:
            if address not in seen:
                seen.add(address)
                ordered.append(address)
        if not ordered:
            raise ValueError("at least one recipient is required")
        return ordered
