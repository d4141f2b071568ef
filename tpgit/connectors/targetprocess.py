"""TargetProcess REST connector for posting comments on entities."""

from __future__ import annotations

import base64
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from tpgit.connectors.base import Commenter

logger = logging.getLogger(__name__)

Authenticator = Callable[[urllib.request.Request], None]


class TargetProcessError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class GeneralRef(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: int = Field(alias="Id")


class CommentPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    description: str = Field(alias="Description")
    general: GeneralRef = Field(alias="General")


def password_auth(username: str, password: str) -> Authenticator:
    credentials = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")

    def _apply(request: urllib.request.Request) -> None:
        request.add_header("Authorization", f"Basic {credentials}")

    return _apply


def token_auth(token: str) -> Authenticator:
    """Add the access_token query parameter TargetProcess accepts for service tokens."""

    def _apply(request: urllib.request.Request) -> None:
        parts = urllib.parse.urlsplit(request.full_url)
        query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        query = [(key, value) for key, value in query if key != "access_token"]
        query.append(("access_token", token))
        request.full_url = urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))

    return _apply


class TargetProcessClient(Commenter):
    def __init__(self, url: str, authenticator: Authenticator, *, timeout_seconds: float = 30.0) -> None:
        self.url = url.rstrip("/")
        self.authenticator = authenticator
        self.timeout_seconds = timeout_seconds

    def comment(self, entity_id: int, message: str) -> None:
        payload = CommentPayload(description=message, general=GeneralRef(id=entity_id))
        data = json.dumps(payload.model_dump(by_alias=True)).encode("utf-8")
        request = urllib.request.Request(
            f"{self.url}/api/v1/comments",
            data=data,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            method="POST",
        )
        self.authenticator(request)

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                status = response.status
                body = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")
            raise TargetProcessError(
                f"TargetProcess API returned status {exc.code} for entity {entity_id}, expected 201. Body was: {body}",
                status=exc.code,
                body=body,
            ) from exc
        except (urllib.error.URLError, TimeoutError) as exc:
            reason = getattr(exc, "reason", exc)
            raise TargetProcessError(f"TargetProcess API request for entity {entity_id} failed: {reason}") from exc

        if status != 201:
            raise TargetProcessError(
                f"TargetProcess API returned status {status} for entity {entity_id}, expected 201. Body was: {body}",
                status=status,
                body=body,
            )
        logger.debug("Commented on entity=%s", entity_id)
