"""Messaging gateway client for payment reminders, with exponential backoff retry"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

import httpx

from rahnu_gateway.config import settings
from rahnu_gateway.domain.exceptions import MessagingGatewayError
from rahnu_gateway.domain.models import Reminder
from rahnu_gateway.infrastructure.observability.metrics import (
    reminder_counter,
    reminder_failure_counter,
    reminder_latency_histogram,
)

logger = logging.getLogger(__name__)


def reminder_payload(reminder: Reminder) -> Dict[str, Any]:
    return {
        "event": "PAYMENT_REMINDER",
        "channel": reminder.channel.value,
        "recipient": reminder.recipient,
        "message": reminder.message,
        "payment_id": reminder.payment_id,
        "loan_id": reminder.loan_id,
        "contract_number": reminder.contract_number,
        "amount": str(reminder.amount),
        "due_date": reminder.due_date.isoformat(),
    }


class MessagingClient:
    """Client for the SMS / email / WhatsApp delivery gateway"""

    def __init__(self, gateway_url: Optional[str] = None, timeout: Optional[float] = None):
        self.gateway_url = gateway_url or settings.messaging_gateway_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.reminder_max_retries
        self.backoff_base = settings.reminder_backoff_base

    async def send_reminder(self, reminder: Reminder) -> None:
        """
        Deliver a payment reminder with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on 5xx errors and network failures, not on 4xx
        - Tracks latency histogram and failure counter
        - Every attempt carries the same Idempotency-Key so the gateway can
          drop a resend of a message it already accepted

        Raises:
            MessagingGatewayError: After the final failed attempt
        """
        payload = reminder_payload(reminder)
        headers = {"Idempotency-Key": f"reminder-{reminder.payment_id}-{uuid.uuid4()}"}
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                try:
                    with reminder_latency_histogram.time():
                        response = await client.post(self.gateway_url, json=payload, headers=headers)
                        response.raise_for_status()
                    reminder_counter.labels(channel=reminder.channel.value, outcome="sent").inc()
                    return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    reminder_failure_counter.inc()

                    client_error = (
                        isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
                    )
                    if client_error or attempt >= self.max_retries:
                        reminder_counter.labels(channel=reminder.channel.value, outcome="failed").inc()
                        raise MessagingGatewayError(
                            f"Reminder for payment {reminder.payment_id} not delivered: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

    async def dispatch(self, reminder: Reminder) -> None:
        """Background-task entry point: delivery failures are logged, not raised"""
        try:
            await self.send_reminder(reminder)
        except MessagingGatewayError as e:
            logger.error(
                "Reminder delivery failed",
                extra={"payment_id": reminder.payment_id, "channel": reminder.channel.value, "error": str(e)},
            )
