import asyncio
import json
import logging
from typing import Any, Protocol

import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ModelEmptyResponse, ModelUnavailable
from .schemas import ModelRequest
from .settings import Settings

logger = logging.getLogger(__name__)

# Low temperature keeps the structured reply close to deterministic.
TEMPERATURE = 0.2
BEDROCK_MAX_TOKENS = 1500


class ModelClient(Protocol):
    async def complete(self, request: ModelRequest) -> str: ...


def _first_choice_text(payload: Any) -> str:
    choices = payload.get('choices') if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ModelEmptyResponse('Completion service returned no choices')
    message = choices[0].get('message')
    content = message.get('content') if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise ModelEmptyResponse('Completion service returned an empty message')
    return content


class ChatCompletionClient:
    """OpenAI-compatible chat completions endpoint (Groq by default)."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.url = settings.completion_api_url
        self.api_key = settings.completion_api_key
        self.model = settings.completion_model
        self.timeout_s = settings.timeout_seconds
        self._client = client

    def build_payload(self, request: ModelRequest) -> dict[str, Any]:
        return {
            'messages': [m.model_dump() for m in request.messages],
            'model': self.model,
            'temperature': TEMPERATURE,
            'response_format': {'type': 'json_object'},
        }

    async def complete(self, request: ModelRequest) -> str:
        if not self.api_key:
            raise ModelUnavailable('COMPLETION_API_KEY is missing')
        payload = self.build_payload(request)
        if self._client is not None:
            data = await self._post(self._client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                data = await self._post(client, payload)
        return _first_choice_text(data)

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> Any:
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }
        try:
            response = await client.post(self.url, headers=headers, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ModelUnavailable(
                f'Completion service HTTP error: {exc.response.status_code}'
            ) from exc
        except httpx.HTTPError as exc:
            raise ModelUnavailable(f'Completion service transport error: {exc}') from exc
        except ValueError as exc:
            raise ModelUnavailable('Completion service returned a non-JSON envelope') from exc


class BedrockModelClient:
    """Anthropic models on AWS Bedrock, called through boto3."""

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self.model_id = settings.bedrock_model_id
        self._client = client if client is not None else self._runtime_client(settings)

    @staticmethod
    def _runtime_client(settings: Settings) -> Any:
        return boto3.client(
            'bedrock-runtime',
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            aws_session_token=settings.aws_session_token,
            config=Config(
                connect_timeout=settings.timeout_seconds,
                read_timeout=settings.timeout_seconds,
                retries={'total_max_attempts': 1},
            ),
        )

    def build_body(self, request: ModelRequest) -> dict[str, Any]:
        return {
            'anthropic_version': 'bedrock-2023-05-31',
            'max_tokens': BEDROCK_MAX_TOKENS,
            'temperature': TEMPERATURE,
            'system': request.system,
            'messages': [
                {'role': 'user', 'content': [{'type': 'text', 'text': m.content}]}
                for m in request.user_messages
            ],
        }

    def _invoke(self, body: dict[str, Any]) -> dict[str, Any]:
        response = self._client.invoke_model(
            modelId=self.model_id,
            contentType='application/json',
            accept='application/json',
            body=json.dumps(body),
        )
        return json.loads(response['body'].read())

    async def complete(self, request: ModelRequest) -> str:
        try:
            payload = await asyncio.to_thread(self._invoke, self.build_body(request))
        except (BotoCoreError, ClientError) as exc:
            raise ModelUnavailable(f'Bedrock request failed: {exc}') from exc
        except ValueError as exc:
            raise ModelUnavailable('Bedrock returned a non-JSON body') from exc

        blocks = payload.get('content') if isinstance(payload, dict) else None
        text = ''.join(
            chunk.get('text', '') for chunk in blocks or [] if isinstance(chunk, dict)
        )
        if not text.strip():
            raise ModelEmptyResponse('Bedrock returned no text content')
        return text


def build_model_client(settings: Settings, http_client: httpx.AsyncClient | None = None) -> ModelClient:
    if settings.model_provider == 'bedrock':
        logger.info(f'Model provider: Bedrock | Model: {settings.bedrock_model_id}')
        return BedrockModelClient(settings)
    logger.info(f'Model provider: {settings.completion_api_url} | Model: {settings.completion_model}')
    return ChatCompletionClient(settings, client=http_client)
