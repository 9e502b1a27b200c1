import asyncio
import logging
from typing import Any

import httpx

from .errors import ExplorerUnavailable
from .schemas import MAX_RECENT_TRANSACTIONS, ExplorerSnapshot, TokenHolding, TransactionRecord
from .settings import Settings
from .validation import Address

logger = logging.getLogger(__name__)

TRANSACTION_FIELDS: dict[str, str] = {
    'hash': 'hash',
    'blockNumber': 'block_number',
    'timeStamp': 'timestamp',
    'from': 'from_address',
    'to': 'to_address',
    'value': 'value',
    'gasPrice': 'gas_price',
    'gasUsed': 'gas_used',
    'methodId': 'method_id',
    'functionName': 'function_name',
}


def _text(value: Any, default: str = '') -> str:
    if value is None or value == '':
        return default
    return str(value)


def _transaction_from_explorer(tx: dict[str, Any]) -> TransactionRecord:
    return TransactionRecord(
        **{field: _text(tx.get(key)) for key, field in TRANSACTION_FIELDS.items()}
    )


def _token_from_explorer(token: dict[str, Any]) -> TokenHolding:
    return TokenHolding(
        token_name=_text(token.get('tokenName'), 'Unknown'),
        token_symbol=_text(token.get('tokenSymbol'), 'Unknown'),
        token_quantity=_text(token.get('balance'), '0'),
        token_contract_address=_text(token.get('contractAddress')),
    )


class ExplorerClient:
    """Reads balance, transaction and token data from an Etherscan-style API."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = settings.explorer_api_url
        self.api_key = settings.explorer_api_key
        self.chain_id = settings.explorer_chain_id
        self.page_size = settings.explorer_tx_page_size
        self.timeout_s = settings.timeout_seconds
        self._client = client

    async def fetch_snapshot(self, address: Address) -> ExplorerSnapshot:
        if self._client is not None:
            return await self._fetch_all(self._client, address)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await self._fetch_all(client, address)

    async def _fetch_all(self, client: httpx.AsyncClient, address: Address) -> ExplorerSnapshot:
        # The group cancels and awaits the sibling calls as soon as one fails.
        try:
            async with asyncio.TaskGroup() as tg:
                balance_task = tg.create_task(self._get_balance(client, address))
                transactions_task = tg.create_task(self._get_transactions(client, address))
                tokens_task = tg.create_task(self._get_token_balances(client, address))
        except ExceptionGroup as group:
            failed, _ = group.split(ExplorerUnavailable)
            if failed is None:
                raise
            raise failed.exceptions[0]

        balance = balance_task.result()
        transactions = transactions_task.result()
        tokens = tokens_task.result()
        logger.info(
            f'Explorer snapshot for {address}: {len(transactions)} transactions, '
            f'{len(tokens)} token balances'
        )
        return ExplorerSnapshot(
            balance=balance,
            transaction_count=len(transactions),
            recent_transactions=[
                _transaction_from_explorer(tx) for tx in transactions[:MAX_RECENT_TRANSACTIONS]
            ],
            token_balances=[_token_from_explorer(t) for t in tokens if isinstance(t, dict)],
        )

    async def _call(self, client: httpx.AsyncClient, action: str, params: dict[str, Any]) -> Any:
        query: dict[str, Any] = {'module': 'account', 'action': action, **params}
        if self.chain_id is not None:
            query['chainid'] = self.chain_id
        if self.api_key:
            query['apikey'] = self.api_key

        try:
            response = await client.get(self.base_url, params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExplorerUnavailable(
                f'Explorer HTTP error on {action}: {exc.response.status_code}', action=action
            ) from exc
        except httpx.HTTPError as exc:
            raise ExplorerUnavailable(
                f'Explorer transport error on {action}: {exc}', action=action
            ) from exc
        except ValueError as exc:
            raise ExplorerUnavailable(
                f'Explorer returned a non-JSON body on {action}', action=action
            ) from exc

        if not isinstance(data, dict) or 'result' not in data:
            raise ExplorerUnavailable(
                f'Unexpected explorer response format on {action}', action=action
            )
        return data['result']

    async def _get_balance(self, client: httpx.AsyncClient, address: Address) -> str:
        result = await self._call(client, 'balance', {'address': address, 'tag': 'latest'})
        if not isinstance(result, str) or not (result.isascii() and result.isdigit()):
            raise ExplorerUnavailable(f'Explorer balance lookup failed: {result!r}', action='balance')
        return result

    async def _get_transactions(
        self, client: httpx.AsyncClient, address: Address
    ) -> list[dict[str, Any]]:
        result = await self._call(
            client,
            'txlist',
            {
                'address': address,
                'startblock': 0,
                'endblock': 99999999,
                'page': 1,
                'offset': self.page_size,
                'sort': 'desc',
            },
        )
        # Errors such as an invalid API key come back as a string result.
        if not isinstance(result, list):
            raise ExplorerUnavailable(
                f'Explorer transaction lookup failed: {result!r}', action='txlist'
            )
        return [tx for tx in result if isinstance(tx, dict)]

    async def _get_token_balances(self, client: httpx.AsyncClient, address: Address) -> list[Any]:
        result = await self._call(
            client,
            'tokenbalance',
            {'address': address, 'contractaddress': '', 'tag': 'latest'},
        )
        if not isinstance(result, list):
            logger.debug(f'Token balance result for {address} is not a list ({result!r}); using []')
            return []
        return result
