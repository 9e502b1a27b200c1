"""
Shared fixtures: test settings, canned explorer payloads and stub HTTP services
built on httpx.MockTransport.
"""

import json

import httpx
import pytest

from walletguard_api.settings import Settings

VALID_ADDRESS = '0x' + 'A' * 40
EXPLORER_URL = 'https://explorer.test/api'
COMPLETION_URL = 'https://llm.test/openai/v1/chat/completions'


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        EXPLORER_API_URL=EXPLORER_URL,
        ETHERSCAN_API_KEY='explorer-key',
        EXPLORER_CHAIN_ID=1,
        EXPLORER_TX_PAGE_SIZE=20,
        MODEL_PROVIDER='openai_compat',
        COMPLETION_API_URL=COMPLETION_URL,
        COMPLETION_API_KEY='model-key',
        COMPLETION_MODEL='test-model',
        WALLETGUARD_TIMEOUT_SECONDS=5,
        DD_API_KEY=None,
        DD_TRACE_ENABLED=False,
    )


def make_transaction(index: int = 0, **overrides) -> dict:
    tx = {
        'hash': f'0x{index:064x}',
        'blockNumber': str(19_000_000 - index),
        'timeStamp': str(1_700_000_000 - index * 60),
        'from': VALID_ADDRESS.lower(),
        'to': '0x' + 'b' * 40,
        'value': '250000000000000000',
        'gasPrice': '30000000000',
        'gasUsed': '21000',
        'methodId': '0x',
        'functionName': '',
    }
    tx.update(overrides)
    return tx


@pytest.fixture
def assessment_payload() -> dict:
    return {
        'isFraudulent': False,
        'riskScore': 5,
        'confidenceLevel': 'Low',
        'flags': [],
        'behaviors': {
            'highFrequencyTrading': False,
            'largeTransfers': False,
            'interactionsWithFlaggedWallets': False,
            'unusualContractCalls': False,
            'gasPriceAnomaly': False,
        },
        'summary': 'ok',
        'recommendations': [],
        'activityPatterns': {
            'activityAge': '1 day',
            'peakActivityPeriods': [],
            'dormantPeriods': [],
            'commonInteractions': [],
        },
    }


class StubServices:
    """Routes explorer GETs by `action` and completion POSTs to canned replies."""

    def __init__(self) -> None:
        self.balance_result = '1000000000000000000'
        self.txlist_result: object = [make_transaction(0)]
        self.token_result: object = '0'
        self.model_content: object = '{}'
        self.failures: dict[str, httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []
        self.clients: list[httpx.AsyncClient] = []

    @property
    def explorer_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == 'explorer.test']

    @property
    def model_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == 'llm.test']

    def _fail(self, key: str, request: httpx.Request) -> httpx.Response | None:
        failure = self.failures.get(key)
        if failure is None:
            return None
        if isinstance(failure, Exception):
            raise failure
        return failure

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == 'llm.test':
            failed = self._fail('completion', request)
            if failed is not None:
                return failed
            return httpx.Response(
                200,
                json={'choices': [{'index': 0, 'message': {'role': 'assistant', 'content': self.model_content}}]},
            )

        action = request.url.params.get('action')
        failed = self._fail(action, request)
        if failed is not None:
            return failed
        if action == 'balance':
            return httpx.Response(200, json={'status': '1', 'message': 'OK', 'result': self.balance_result})
        if action == 'txlist':
            return httpx.Response(200, json={'status': '1', 'message': 'OK', 'result': self.txlist_result})
        if action == 'tokenbalance':
            return httpx.Response(200, json={'status': '1', 'message': 'OK', 'result': self.token_result})
        return httpx.Response(404, json={'error': f'unknown action {action}'})

    def client(self) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        self.clients.append(client)
        return client

    async def aclose(self) -> None:
        for client in self.clients:
            await client.aclose()


@pytest.fixture
def stub_services(assessment_payload) -> StubServices:
    services = StubServices()
    services.model_content = json.dumps(assessment_payload)
    return services


class FakeSpan:
    def __init__(self, name, **kwargs):
        self.name = name
        self.kwargs = kwargs
        self.tags = {}
        self.finished = False

    def set_tag(self, key, value):
        self.tags[key] = value

    def finish(self):
        self.finished = True


class FakeTracer:
    """Records spans the way ddtrace's tracer.trace() hands them out."""

    def __init__(self):
        self.spans = []

    def trace(self, name, **kwargs):
        span = FakeSpan(name, **kwargs)
        self.spans.append(span)
        return span
