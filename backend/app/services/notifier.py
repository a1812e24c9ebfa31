"""
Outbound email via the mail platform (Microsoft Graph ``sendMail``).

Messages are built as provider-agnostic NotificationMessage models by the
compose_* helpers below; only MailNotifier knows the Graph payload format.

Graph sendMail payload
----------------------
  message.subject                          str
  message.body.contentType                 "HTML" | "Text"
  message.body.content                     str
  message.toRecipients[].emailAddress      {"address": str}
  message.from.emailAddress                {"address": str}
  saveToSentItems                          bool
"""

import html
import logging
from typing import Iterable, Protocol

import httpx

from app.errors import GatewayError, NotificationError, TransportError
from app.models.intake import NotificationMessage

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


# ---------------------------------------------------------------------------
# Message composition
# ---------------------------------------------------------------------------

def _customer_admin_url(admin_base_url: str, customer_id: str) -> str:
    numeric_id = str(customer_id).rsplit("/", 1)[-1]
    return f"{admin_base_url.rstrip('/')}/customers/{numeric_id}"


def compose_tax_exempt_notice(
    company: str,
    customer_id: str,
    admin_base_url: str,
    sender: str,
    staff_address: str,
) -> NotificationMessage:
    """Staff notice that a customer uploaded a tax-exempt document."""
    link = _customer_admin_url(admin_base_url, customer_id)
    company_html = html.escape(company)
    return NotificationMessage(
        subject=f"New tax exempt document uploaded for {company}",
        body=(
            f"{company_html} has uploaded a new tax exempt document\n"
            f'<a href="{link}">Click here to review the document and approve the customer</a>.'
        ),
        content_type="html",
        recipients=[staff_address],
        sender=sender,
    )


def compose_activation_email(
    email: str,
    activation_url: str,
    sender: str,
) -> NotificationMessage:
    """Plain-text account activation link for a newly registered customer."""
    return NotificationMessage(
        subject="Account Activation",
        body=f"Click the following link to activate your account:\n{activation_url}",
        content_type="text",
        recipients=[email],
        sender=sender,
    )


def compose_new_customer_notice(
    company: str,
    customer_id: str,
    admin_base_url: str,
    sender: str,
    staff_address: str,
) -> NotificationMessage:
    link = _customer_admin_url(admin_base_url, customer_id)
    return NotificationMessage(
        subject=f"New customer: {company}",
        body=(
            f"{html.escape(company)} has created an account!\n"
            f'<a href="{link}">Click here to view the customer</a>.'
        ),
        content_type="html",
        recipients=[staff_address],
        sender=sender,
    )


def to_graph_payload(message: NotificationMessage, save_to_sent_items: bool = True) -> dict:
    """Convert a NotificationMessage into the Graph sendMail request body."""
    return {
        "message": {
            "subject": message.subject,
            "body": {
                "contentType": "HTML" if message.content_type == "html" else "Text",
                "content": message.body,
            },
            "toRecipients": [
                {"emailAddress": {"address": address}} for address in message.recipients
            ],
            "from": {"emailAddress": {"address": message.sender}},
        },
        "saveToSentItems": save_to_sent_items,
    }


# ---------------------------------------------------------------------------
# Sender
# ---------------------------------------------------------------------------

class MailNotifier:
    """Sends messages from one fixed mailbox identity."""

    def __init__(
        self,
        mailbox: str,
        credentials: TokenProvider,
        client: httpx.AsyncClient,
        graph_base_url: str = "https://graph.microsoft.com/v1.0",
    ):
        self.mailbox = mailbox
        self.send_url = f"{graph_base_url.rstrip('/')}/users/{mailbox}/sendMail"
        self._credentials = credentials
        self._client = client

    async def send(self, message: NotificationMessage) -> None:
        """
        Submit one message.

        Raises:
            TransportError: network failure.
            NotificationError: the mail platform rejected the message.
        """
        token = await self._credentials.get_token()
        try:
            response = await self._client.post(
                self.send_url,
                json=to_graph_payload(message),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"sendMail request failed: {exc}") from exc

        if not response.is_success:
            raise NotificationError(
                f"sendMail returned HTTP {response.status_code}",
                errors=[response.text],
                status_code=response.status_code,
            )

        logger.info("Sent %r to %s", message.subject, ", ".join(message.recipients))

    async def send_sequence(self, messages: Iterable[NotificationMessage]) -> int:
        """
        Send messages in order, stopping at the first failure.

        Never raises for delivery failures: they are logged and the number
        of messages actually delivered is returned. Intended to run detached
        from the HTTP response.
        """
        delivered = 0
        for message in messages:
            try:
                await self.send(message)
            except GatewayError as exc:
                logger.error(
                    "Failed to send %r to %s: %s %s",
                    message.subject,
                    ", ".join(message.recipients),
                    exc.message,
                    exc.errors,
                )
                break
            delivered += 1
        return delivered
