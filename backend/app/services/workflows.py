"""
Intake workflow orchestration.

Each workflow turns one inbound request into an ordered chain of remote
calls, each depending on the previous step's output. Nothing is rolled back:
when a step fails, the stages that already landed are reported so an
operator can reconcile the remote side by hand.

Upload:
  VALIDATING -> STAGING -> TRANSFERRING -> CREATING_FILE
             -> LINKING_METAFIELD -> NOTIFYING -> SUCCEEDED
  Any failure before NOTIFYING raises WorkflowFailed (the caller gets a 500).

Registration:
  VALIDATING -> CREATING_CUSTOMER -> GENERATING_ACTIVATION_LINK
             -> SENDING_EMAILS -> SUCCEEDED
  or CREATING_CUSTOMER -> LOGGING_USER_ERRORS.
  Back-office failures are logged only; the caller is always redirected.

Notifications are returned on the outcome and delivered by ``notify``, which
the HTTP layer runs as a background task after the response is sent.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from app.config import Settings
from app.errors import GatewayError, ValidationError, WorkflowFailed
from app.models.intake import NotificationMessage, RegistrationRequest, UploadRequest
from app.services.binary_relay import BinaryRelay
from app.services.commerce_gateway import CommerceGateway
from app.services.normalizer import (
    ALLOWED_FILE_TYPES_MESSAGE,
    classify_file_type,
    normalize_phone,
    normalize_website,
    validate_website,
)
from app.services.notifier import (
    MailNotifier,
    compose_activation_email,
    compose_new_customer_notice,
    compose_tax_exempt_notice,
)

logger = logging.getLogger(__name__)

TAX_EXEMPT_NAMESPACE = "tax_exempt_forms"
TAX_EXEMPT_KEY = "tax_exempt_form"
CUSTOMER_INFO_NAMESPACE = "customer-info"


class UploadStage(str, Enum):
    VALIDATING = "validating"
    STAGING = "staging"
    TRANSFERRING = "transferring"
    CREATING_FILE = "creating_file"
    LINKING_METAFIELD = "linking_metafield"
    NOTIFYING = "notifying"
    SUCCEEDED = "succeeded"


class RegistrationStage(str, Enum):
    VALIDATING = "validating"
    CREATING_CUSTOMER = "creating_customer"
    LOGGING_USER_ERRORS = "logging_user_errors"
    GENERATING_ACTIVATION_LINK = "generating_activation_link"
    SENDING_EMAILS = "sending_emails"
    SUCCEEDED = "succeeded"


@dataclass
class UploadOutcome:
    customer_id: str
    file_id: str
    notifications: list[NotificationMessage] = field(default_factory=list)
    completed: list[UploadStage] = field(default_factory=list)


@dataclass
class RegistrationOutcome:
    stage: RegistrationStage
    customer_id: Optional[str] = None
    notifications: list[NotificationMessage] = field(default_factory=list)
    error: Optional[GatewayError] = None


def tax_exempt_filename(company: str, extension: str) -> str:
    return f"{company} Tax Exempt Form{extension}"


def build_customer_input(
    request: RegistrationRequest,
    phone: Optional[str],
    website: str,
) -> dict:
    """
    Build the customerCreate input.

    ``company_website`` is attached only when the normalized website is a
    valid URL; an unusable website is dropped silently.
    """
    metafields = [
        {
            "key": "company",
            "namespace": CUSTOMER_INFO_NAMESPACE,
            "type": "single_line_text_field",
            "value": request.company_name,
        },
        {
            "key": "phone_number",
            "namespace": CUSTOMER_INFO_NAMESPACE,
            "type": "single_line_text_field",
            "value": phone,
        },
    ]
    if website and validate_website(website):
        metafields.append(
            {
                "key": "company_website",
                "namespace": CUSTOMER_INFO_NAMESPACE,
                "type": "url",
                "value": website,
            }
        )

    return {
        "email": request.email,
        "phone": phone,
        "firstName": request.first_name,
        "lastName": request.last_name,
        "addresses": [
            {
                "company": request.company_name,
                "firstName": request.first_name,
                "lastName": request.last_name,
                "phone": phone,
            }
        ],
        "metafields": metafields,
    }


# ---------------------------------------------------------------------------
# Upload workflow
# ---------------------------------------------------------------------------

class UploadWorkflow:
    """Tax-exempt document upload: stage, transfer, create, link, notify."""

    def __init__(
        self,
        gateway: CommerceGateway,
        relay: BinaryRelay,
        notifier: MailNotifier,
        settings: Settings,
    ):
        self.gateway = gateway
        self.relay = relay
        self.notifier = notifier
        self.settings = settings

    async def run(self, request: UploadRequest) -> UploadOutcome:
        """
        Drive the upload up to (not including) notification delivery.

        Raises:
            ValidationError: the file type is not allowed; nothing was sent.
            WorkflowFailed: a remote step failed; later steps were not run.
        """
        extension = request.file.declared_extension
        mime_type = classify_file_type(extension)
        if not mime_type:
            logger.info(
                "Rejected upload from customer %s: extension %r not allowed",
                request.customer_id,
                extension,
            )
            raise ValidationError(ALLOWED_FILE_TYPES_MESSAGE)

        completed: list[UploadStage] = [UploadStage.VALIDATING]
        filename = tax_exempt_filename(request.customer_company, extension)
        stage = UploadStage.STAGING

        try:
            target = await self.gateway.create_staged_upload(filename, mime_type)
            completed.append(stage)

            stage = UploadStage.TRANSFERRING
            resource_url = await self.relay.transfer(
                target, request.file.content, filename, mime_type
            )
            completed.append(stage)

            stage = UploadStage.CREATING_FILE
            file_ref = await self.gateway.create_file(resource_url, mime_type)
            completed.append(stage)

            stage = UploadStage.LINKING_METAFIELD
            await self.gateway.set_customer_metafield(
                request.customer_id,
                namespace=TAX_EXEMPT_NAMESPACE,
                key=TAX_EXEMPT_KEY,
                type="file_reference",
                value=file_ref.file_id,
            )
            completed.append(stage)
        except GatewayError as exc:
            logger.error(
                "Upload for customer %s failed at %s (completed: %s): %s %s",
                request.customer_id,
                stage.value,
                ", ".join(s.value for s in completed),
                exc.message,
                exc.errors,
            )
            raise WorkflowFailed(stage.value, exc, [s.value for s in completed]) from exc

        logger.info(
            "Linked file %s to customer %s", file_ref.file_id, request.customer_id
        )

        notice = compose_tax_exempt_notice(
            company=request.customer_company,
            customer_id=request.customer_id,
            admin_base_url=self.settings.admin_base_url,
            sender=self.settings.mail_sender_address,
            staff_address=self.settings.staff_notification_address,
        )
        return UploadOutcome(
            customer_id=request.customer_id,
            file_id=file_ref.file_id,
            notifications=[notice],
            completed=completed,
        )

    async def notify(self, outcome: UploadOutcome) -> UploadStage:
        """Deliver the staff notice. Failures are logged, never raised."""
        delivered = await self.notifier.send_sequence(outcome.notifications)
        if delivered < len(outcome.notifications):
            logger.warning(
                "Staff notice for customer %s was not delivered", outcome.customer_id
            )
            return UploadStage.NOTIFYING
        return UploadStage.SUCCEEDED


# ---------------------------------------------------------------------------
# Registration workflow
# ---------------------------------------------------------------------------

class RegistrationWorkflow:
    """Customer self-registration: create, activation link, emails."""

    def __init__(
        self,
        gateway: CommerceGateway,
        notifier: MailNotifier,
        settings: Settings,
    ):
        self.gateway = gateway
        self.notifier = notifier
        self.settings = settings

    async def run(self, request: RegistrationRequest) -> RegistrationOutcome:
        """
        Create the customer and prepare the activation and staff emails.

        Never raises GatewayError: back-office failures end the workflow with
        a logged outcome instead.
        """
        website = normalize_website(request.company_website)
        phone = normalize_phone(request.phone_number)
        if request.phone_number and phone is None:
            logger.info("Phone number for %s could not be normalized; submitting none", request.email)

        customer_input = build_customer_input(request, phone, website)

        try:
            customer = await self.gateway.create_customer(customer_input)
        except GatewayError as exc:
            logger.error("Error creating customer %s: %s %s", request.email, exc.message, exc.errors)
            return RegistrationOutcome(stage=RegistrationStage.LOGGING_USER_ERRORS, error=exc)

        if customer is None:
            logger.error("Error creating customer %s: no customer returned", request.email)
            return RegistrationOutcome(stage=RegistrationStage.LOGGING_USER_ERRORS)

        logger.info("Created customer %s for %s", customer.id, request.company_name)

        try:
            activation_url = await self.gateway.generate_activation_url(customer.id)
        except GatewayError as exc:
            logger.error(
                "Customer %s was created but no activation URL was generated: %s %s",
                customer.id,
                exc.message,
                exc.errors,
            )
            return RegistrationOutcome(
                stage=RegistrationStage.GENERATING_ACTIVATION_LINK,
                customer_id=customer.id,
                error=exc,
            )

        activation = compose_activation_email(
            email=request.email,
            activation_url=activation_url,
            sender=self.settings.mail_sender_address,
        )
        staff_notice = compose_new_customer_notice(
            company=request.company_name,
            customer_id=customer.id,
            admin_base_url=self.settings.admin_base_url,
            sender=self.settings.mail_sender_address,
            staff_address=self.settings.staff_notification_address,
        )
        return RegistrationOutcome(
            stage=RegistrationStage.SENDING_EMAILS,
            customer_id=customer.id,
            notifications=[activation, staff_notice],
        )

    async def notify(self, outcome: RegistrationOutcome) -> RegistrationStage:
        """
        Send the activation email, then the staff notice only if the first
        one went out. Failures are logged, never raised.
        """
        if not outcome.notifications:
            return outcome.stage

        delivered = await self.notifier.send_sequence(outcome.notifications)
        if delivered < len(outcome.notifications):
            logger.warning(
                "Only %d of %d registration emails sent for customer %s",
                delivered,
                len(outcome.notifications),
                outcome.customer_id,
            )
            return RegistrationStage.SENDING_EMAILS

        logger.info("Emails sent successfully for customer %s", outcome.customer_id)
        return RegistrationStage.SUCCEEDED
