"""HTTP client for the lead collection backend.

Responses are returned as controller events so the runner can feed them
straight into ``TurnController.dispatch``.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .events import AgentReplied, SessionStarted

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


class ClientError(Exception):
    """Raised when the backend cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LeadChatClient:
    """Async client for the ``/api/chat`` endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "LeadChatClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ClientError(
                f"{path} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ClientError(f"{path} failed: {e}") from e
        except ValueError as e:
            raise ClientError(f"{path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise ClientError(f"{path} returned an unexpected payload")
        return data

    async def start_chat(self) -> SessionStarted:
        """Create a session.

        Returns:
            SessionStarted event with the session ID and first question

        Raises:
            ClientError: If the request fails
        """
        data = await self._post("/api/chat/start")
        try:
            return SessionStarted(session_id=str(data["session_id"]), message=str(data["message"]))
        except KeyError as e:
            raise ClientError(f"Start response is missing {e}") from e

    async def send_message(self, session_id: str, text: str) -> AgentReplied:
        """Send the user's answer.

        Args:
            session_id: Session being answered
            text: Transcript or typed answer

        Returns:
            AgentReplied event with the agent's next message

        Raises:
            ClientError: If the request fails
        """
        data = await self._post("/api/chat/message", {"session_id": session_id, "message": text})
        try:
            return AgentReplied(
                agent_message=str(data["agent_message"]),
                is_complete=bool(data["is_complete"]),
                validation_error=data.get("validation_error"),
                should_auto_listen=data.get("should_auto_listen") is True,
            )
        except KeyError as e:
            raise ClientError(f"Message response is missing {e}") from e
