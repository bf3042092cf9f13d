"""
app/connectors/graph_mail_connector.py

Microsoft Graph mailbox connector.

Reads unread messages with attachments from the signed-in user's inbox,
downloads file attachments and marks messages read. Authentication uses the
OAuth refresh-token grant; rotated refresh tokens are written back to
``refresh_token_file`` when one is configured.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from pathlib import Path
from typing import Any

import requests

from app.config import ExternalHTTPSettings, MailSettings
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.domain.ingestion import MailAttachment, MailItem

logger = logging.getLogger(__name__)

_FILE_ATTACHMENT_TYPE = "#microsoft.graph.fileAttachment"
_TOKEN_EXPIRY_MARGIN_SECONDS = 60


class MailAuthenticationError(ConnectorRequestError):
    """
    Raised when no usable access token can be obtained.
    """


class GraphMailConnector(BaseConnector):
    def __init__(
        self,
        *,
        settings: MailSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="graph_mail", http_settings=http_settings, session=session)
        self._settings = settings
        self._refresh_token: str | None = settings.refresh_token
        self._access_token: str | None = None
        self._access_token_expires_at: float = 0.0

    # ------------------------------------------------------------------
    # MailSource
    # ------------------------------------------------------------------

    def list_unread_items(self) -> list[MailItem]:
        payload = self._request_json(
            method="GET",
            url=f"{self._settings.base_url}/me/messages",
            params={
                "$filter": "hasAttachments eq true and isRead eq false",
                "$select": "id,subject,from,receivedDateTime",
                "$top": self._settings.page_size,
            },
            headers=self._auth_headers(),
        )
        messages = payload.get("value", []) if isinstance(payload, dict) else []

        items: list[MailItem] = []
        for message in messages:
            item = self._to_mail_item(message)
            if item is not None:
                items.append(item)
        items.sort(key=lambda item: item.received_at)
        logger.info("Graph mailbox returned %s unread items", len(items))
        return items

    def fetch_attachments(self, message_id: str) -> list[MailAttachment]:
        payload = self._request_json(
            method="GET",
            url=f"{self._settings.base_url}/me/messages/{message_id}/attachments",
            headers=self._auth_headers(),
        )
        entries = payload.get("value", []) if isinstance(payload, dict) else []

        attachments: list[MailAttachment] = []
        for entry in entries:
            if entry.get("@odata.type") != _FILE_ATTACHMENT_TYPE:
                continue
            name = entry.get("name") or ""
            try:
                content = base64.b64decode(entry.get("contentBytes") or "", validate=True)
            except (binascii.Error, ValueError):
                logger.warning("Undecodable attachment message_id=%s name=%r", message_id, name)
                continue
            attachments.append(
                MailAttachment(
                    name=name,
                    content=content,
                    content_type=entry.get("contentType") or "application/octet-stream",
                )
            )
        return attachments

    def mark_processed(self, message_id: str) -> None:
        self._request(
            method="PATCH",
            url=f"{self._settings.base_url}/me/messages/{message_id}",
            headers=self._auth_headers(),
            json_body={"isRead": True},
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._get_access_token()}"}

    def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._access_token_expires_at:
            return self._access_token

        refresh_token = self._refresh_token or self._read_refresh_token_file()
        if not self._settings.client_id or not refresh_token:
            raise MailAuthenticationError(
                "GRAPH_CLIENT_ID and a refresh token (GRAPH_REFRESH_TOKEN or GRAPH_REFRESH_TOKEN_FILE) are required."
            )

        form = {
            "client_id": self._settings.client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "scope": self._settings.scope,
        }
        if self._settings.client_secret:
            form["client_secret"] = self._settings.client_secret

        try:
            payload = self._request_json(method="POST", url=self._settings.token_url, form=form)
        except ConnectorRequestError as exc:
            raise MailAuthenticationError("Refresh-token exchange failed.") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise MailAuthenticationError("Token endpoint returned no access_token.")

        expires_in = int(payload.get("expires_in") or 3600)
        self._access_token = access_token
        self._access_token_expires_at = time.monotonic() + max(0, expires_in - _TOKEN_EXPIRY_MARGIN_SECONDS)

        rotated = payload.get("refresh_token")
        if rotated and rotated != refresh_token:
            self._refresh_token = rotated
            self._write_refresh_token_file(rotated)
        else:
            self._refresh_token = refresh_token
        return access_token

    def _read_refresh_token_file(self) -> str | None:
        if not self._settings.refresh_token_file:
            return None
        path = Path(self._settings.refresh_token_file)
        if not path.is_file():
            return None
        token = path.read_text(encoding="utf-8").strip()
        return token or None

    def _write_refresh_token_file(self, token: str) -> None:
        if not self._settings.refresh_token_file:
            return
        path = Path(self._settings.refresh_token_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(token, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not persist rotated refresh token path=%s error=%s", path, exc)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_mail_item(self, message: dict[str, Any]) -> MailItem | None:
        message_id = message.get("id")
        sender = ((message.get("from") or {}).get("emailAddress") or {}).get("address")
        received = message.get("receivedDateTime")
        if not message_id or not sender or not received:
            logger.warning("Skipping malformed Graph message payload id=%r", message_id)
            return None
        try:
            received_at = self.parse_iso_datetime(received)
        except ValueError:
            logger.warning("Unparseable receivedDateTime id=%s value=%r", message_id, received)
            return None
        return MailItem(
            message_id=message_id,
            sender=sender.strip().lower(),
            subject=message.get("subject") or "",
            received_at=received_at,
        )
