"""Client for the chat completions service that writes the Karate features."""

from __future__ import annotations

import json
import time

import httpx
from pydantic import ValidationError

from karate_testgen.config import DEFAULT_API_URL, DEFAULT_MODEL_NAME, DEFAULT_TEMPERATURE
from karate_testgen.errors import AuthError, ProtocolError
from karate_testgen.models import CompletionRequest, CompletionResponse
from karate_testgen.prompting import build_messages

AUTH_STATUS_CODES = {401, 403}
BODY_EXCERPT_CHARS = 300


def _excerpt(text: str) -> str:
    text = text.strip()
    if len(text) > BODY_EXCERPT_CHARS:
        return text[:BODY_EXCERPT_CHARS] + "..."
    return text


def parse_completion(response: httpx.Response) -> str:
    """Extract ``choices[0].message.content`` from a service response.

    Raises:
        AuthError: If the service rejected the credential.
        ProtocolError: On any other non-2xx status, a non-JSON body, or a
            payload without a usable first choice.
    """
    status = response.status_code
    if status in AUTH_STATUS_CODES:
        raise AuthError(f"Completion service rejected the API key (HTTP {status})")
    if not response.is_success:
        raise ProtocolError(
            f"Completion service returned HTTP {status}: {_excerpt(response.text)}",
            status_code=status,
        )

    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(
            f"Completion service returned invalid JSON: {_excerpt(response.text)}",
            status_code=status,
        ) from exc

    try:
        return CompletionResponse.model_validate(payload).text
    except ValidationError as exc:
        raise ProtocolError(
            f"Unexpected completion response shape: {exc.error_count()} validation error(s)",
            status_code=status,
        ) from exc


class ChatCompletionsGenerator:
    """Thin adapter around an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str | None,
        model_name: str = DEFAULT_MODEL_NAME,
        temperature: float = DEFAULT_TEMPERATURE,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 120.0,
        max_retries: int = 2,
        retry_backoff: float = 1.0,
        client: httpx.Client | None = None,
    ):
        """Create a generator bound to one credential and model.

        Args:
            api_key: Bearer token for the service.
            model_name: Model identifier sent with every request.
            temperature: Sampling temperature sent with every request.
            api_url: Full URL of the chat completions endpoint.
            timeout: Per-request timeout in seconds.
            max_retries: Extra attempts after a transport failure.
            retry_backoff: Seconds to wait per attempt number before retrying.
            client: Optional pre-built ``httpx.Client``; closed by the caller.

        Raises:
            AuthError: If ``api_key`` is missing or blank.
        """
        if not api_key or not api_key.strip():
            raise AuthError("Missing OPENAI_API_KEY")
        self.api_key = api_key.strip()
        self.model_name = model_name
        self.temperature = temperature
        self.api_url = api_url
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def __enter__(self) -> ChatCompletionsGenerator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def build_request(self, controller_code: str) -> CompletionRequest:
        return CompletionRequest(
            model=self.model_name,
            temperature=self.temperature,
            messages=build_messages(controller_code),
        )

    def _post(self, request: CompletionRequest) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        attempt = 0
        while True:
            try:
                return self._client.post(self.api_url, json=request.model_dump(), headers=headers)
            except httpx.TransportError as exc:
                if attempt >= self.max_retries:
                    raise ProtocolError(
                        f"Completion service unreachable after {attempt + 1} attempt(s): {exc}"
                    ) from exc
                attempt += 1
                time.sleep(self.retry_backoff * attempt)

    def generate_test(self, controller_code: str) -> str:
        """Send one controller to the service and return the generated feature text."""
        response = self._post(self.build_request(controller_code))
        return parse_completion(response)
