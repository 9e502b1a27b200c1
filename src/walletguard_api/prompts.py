from .schemas import ExplorerSnapshot, ModelMessage, ModelRequest
from .validation import Address

SYSTEM_PROMPT = (
    'You are a blockchain fraud detection expert. '
    'Analyze the provided Ethereum wallet data and return a detailed JSON assessment. '
    'Include risk scoring, behavioral analysis, and fraud detection. '
    'ONLY RESPOND WITH JSON. Return exactly one JSON object matching the requested fields verbatim. '
    'Do not include any extra text, markdown, or code fences before or after the JSON.'
)

ASSESSMENT_CONTRACT = """{
  "isFraudulent": boolean,
  "riskScore": integer (0-100),
  "confidenceLevel": string ("Low", "Medium", or "High"),
  "flags": string[],
  "behaviors": {
    "highFrequencyTrading": boolean,
    "largeTransfers": boolean,
    "interactionsWithFlaggedWallets": boolean,
    "unusualContractCalls": boolean,
    "gasPriceAnomaly": boolean
  },
  "summary": string (non-empty),
  "recommendations": string[],
  "activityPatterns": {
    "activityAge": string,
    "peakActivityPeriods": string[],
    "dormantPeriods": string[],
    "commonInteractions": string[]
  }
}"""


def build_user_prompt(address: Address, snapshot: ExplorerSnapshot) -> str:
    return (
        f'Analyze this Ethereum wallet address {address} with the following explorer data: '
        f'{snapshot.model_dump_json(by_alias=True)}. '
        'Balances and values are integer strings in the smallest unit (wei); '
        'timeStamp is a unix timestamp in seconds. '
        'Evaluate for fraud indicators, unusual patterns, and risk factors. '
        'Return ONLY a JSON object with exactly these fields and types, and no others:\n'
        f'{ASSESSMENT_CONTRACT}'
    )


def build_model_request(address: Address, snapshot: ExplorerSnapshot) -> ModelRequest:
    return ModelRequest(
        messages=(
            ModelMessage(role='system', content=SYSTEM_PROMPT),
            ModelMessage(role='user', content=build_user_prompt(address, snapshot)),
        )
    )
