from __future__ import annotations

import logging

import httpx

from barber_assistant.application.exceptions import TransportError

GRAPH_API_BASE = "https://graph.facebook.com"
MAX_TEXT_LENGTH = 4096


class WhatsAppClient:
    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v20.0",
        client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token
        self._send_endpoint = f"{GRAPH_API_BASE}/{api_version}/{phone_number_id}/messages"
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": recipient_id,
            "type": "text",
            "text": {"preview_url": False, "body": text[:MAX_TEXT_LENGTH]},
        }
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            resp = self._client.post(self._send_endpoint, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"WhatsApp send failed: {e}") from e

        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "phone": recipient_id,
                    "reason": f"status={resp.status_code} code={error_code}",
                    "error": error_message,
                },
            )
            raise TransportError(f"WhatsApp send failed with status {resp.status_code}")

    def close(self) -> None:
        self._client.close()
