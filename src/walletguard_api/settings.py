from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        populate_by_name=True,
        env_parse_none_str='none',
    )

    explorer_api_url: str = Field(default='https://api.etherscan.io/v2/api', alias='EXPLORER_API_URL')
    explorer_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('ETHERSCAN_API_KEY', 'EXPLORER_API_KEY'),
    )
    # Etherscan V2 routes by chain id; EXPLORER_CHAIN_ID=none omits it for single-chain explorers.
    explorer_chain_id: int | None = Field(default=1, alias='EXPLORER_CHAIN_ID')
    explorer_tx_page_size: int = Field(default=20, ge=1, le=10_000, alias='EXPLORER_TX_PAGE_SIZE')

    model_provider: Literal['openai_compat', 'bedrock'] = Field(
        default='openai_compat', alias='MODEL_PROVIDER'
    )
    completion_api_url: str = Field(
        default='https://api.groq.com/openai/v1/chat/completions', alias='COMPLETION_API_URL'
    )
    completion_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('COMPLETION_API_KEY', 'GROQ_API_KEY'),
    )
    completion_model: str = Field(default='llama-3.3-70b-versatile', alias='COMPLETION_MODEL')

    aws_region: str = Field(default='us-west-2', alias='AWS_REGION')
    aws_access_key_id: str | None = Field(default=None, alias='AWS_ACCESS_KEY_ID')
    aws_secret_access_key: str | None = Field(default=None, alias='AWS_SECRET_ACCESS_KEY')
    aws_session_token: str | None = Field(default=None, alias='AWS_SESSION_TOKEN')
    bedrock_model_id: str = Field(
        default='anthropic.claude-3-5-sonnet-20241022-v2:0', alias='BEDROCK_MODEL_ID'
    )

    timeout_seconds: float = Field(default=30.0, gt=0, alias='WALLETGUARD_TIMEOUT_SECONDS')
    log_level: str = Field(default='INFO', alias='LOG_LEVEL')

    dd_api_key: str | None = Field(default=None, alias='DD_API_KEY')
    dd_service: str = Field(default='walletguard-api', alias='DD_SERVICE')
    dd_env: str = Field(default='dev', alias='DD_ENV')
    dd_version: str = Field(default='0.1.0', alias='DD_VERSION')
    dd_site: str = Field(default='datadoghq.com', alias='DD_SITE')
    dd_send_logs: bool = Field(default=True, alias='DD_SEND_LOGS')
    dd_trace_enabled: bool = Field(default=False, alias='DD_TRACE_ENABLED')
    dd_trace_agent_url: str | None = Field(default=None, alias='DD_TRACE_AGENT_URL')


settings = Settings()
