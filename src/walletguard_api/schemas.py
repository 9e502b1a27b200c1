from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_RECENT_TRANSACTIONS = 20


class _Frozen(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class _Strict(BaseModel):
    # Validated against model output: wire names only, no coercion.
    model_config = ConfigDict(alias_generator=to_camel, frozen=True, strict=True)


# Explorer data


class TransactionRecord(_Frozen):
    hash: str = ''
    block_number: str = ''
    timestamp: str = Field(default='', alias='timeStamp')
    from_address: str = Field(default='', alias='from')
    to_address: str = Field(default='', alias='to')
    value: str = ''
    gas_price: str = ''
    gas_used: str = ''
    method_id: str = ''
    function_name: str = ''


class TokenHolding(_Frozen):
    token_name: str = 'Unknown'
    token_symbol: str = 'Unknown'
    token_quantity: str = '0'
    token_contract_address: str = ''


class ExplorerSnapshot(_Frozen):
    balance: str
    transaction_count: int = Field(ge=0)
    recent_transactions: list[TransactionRecord] = Field(
        default_factory=list, max_length=MAX_RECENT_TRANSACTIONS
    )
    token_balances: list[TokenHolding] = Field(default_factory=list)


# Model request


class ModelMessage(_Frozen):
    role: Literal['system', 'user']
    content: str


class ModelRequest(_Frozen):
    messages: tuple[ModelMessage, ...]

    @property
    def system(self) -> str:
        return '\n\n'.join(m.content for m in self.messages if m.role == 'system')

    @property
    def user_messages(self) -> list[ModelMessage]:
        return [m for m in self.messages if m.role == 'user']


# Risk assessment, validated strictly against model output


class Behaviors(_Strict):
    model_config = ConfigDict(extra='forbid')

    high_frequency_trading: bool
    large_transfers: bool
    interactions_with_flagged_wallets: bool
    unusual_contract_calls: bool
    gas_price_anomaly: bool


class ActivityPatterns(_Strict):
    activity_age: str
    peak_activity_periods: list[str]
    dormant_periods: list[str]
    common_interactions: list[str]


class RiskAssessment(_Strict):
    is_fraudulent: bool
    risk_score: int = Field(ge=0, le=100)
    confidence_level: Literal['Low', 'Medium', 'High']
    flags: list[str]
    behaviors: Behaviors
    summary: str = Field(min_length=1, pattern=r'\S')
    recommendations: list[str]
    activity_patterns: ActivityPatterns


# Pipeline output


class AnalysisReport(_Frozen):
    address: str
    is_valid: Literal[True] = True
    explorer_snapshot: ExplorerSnapshot
    risk_assessment: RiskAssessment
    timestamp: str


# HTTP surface


class WalletAnalyzeRequest(BaseModel):
    address: str = Field(..., description='Target EVM wallet address (0x + 40 hex chars)')


class TraceStep(_Frozen):
    step: str
    duration_ms: int
    ok: bool
    detail: str | None = None
