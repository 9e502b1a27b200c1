import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from .schemas import AnalysisReport, TraceStep
from .settings import Settings

logger = logging.getLogger(__name__)


def _intake_url(settings: Settings) -> str:
    return f'https://http-intake.logs.{settings.dd_site}/api/v2/logs'


def build_analysis_log(
    settings: Settings,
    address: str,
    trace: list[TraceStep],
    report: AnalysisReport | None = None,
    error: dict[str, str] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        'ddsource': 'python',
        'service': settings.dd_service,
        'ddtags': f'env:{settings.dd_env},version:{settings.dd_version}',
        'hostname': 'walletguard-api',
        'timestamp': datetime.now(UTC).isoformat(),
        'message': 'wallet_analysis_completed' if error is None else 'wallet_analysis_failed',
        'address': address,
        'trace': [step.model_dump() for step in trace],
    }
    if report is not None:
        assessment = report.risk_assessment
        payload['risk_score'] = assessment.risk_score
        payload['is_fraudulent'] = assessment.is_fraudulent
        payload['confidence_level'] = assessment.confidence_level
        payload['transaction_count'] = report.explorer_snapshot.transaction_count
    if error is not None:
        payload['error'] = error
    return payload


async def send_analysis_trace_log(
    settings: Settings,
    address: str,
    trace: list[TraceStep],
    report: AnalysisReport | None = None,
    error: dict[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Ship one analysis summary to the Datadog log intake.

    Returns False without sending when logs are disabled. Delivery failures are
    logged and reported as False so they never fail the analysis itself.
    """
    if not settings.dd_api_key or not settings.dd_send_logs:
        return False

    payload = build_analysis_log(settings, address, trace, report=report, error=error)
    headers = {'Content-Type': 'application/json', 'DD-API-KEY': settings.dd_api_key}
    try:
        if client is not None:
            resp = await client.post(_intake_url(settings), headers=headers, json=[payload])
        else:
            async with httpx.AsyncClient(timeout=settings.timeout_seconds) as own_client:
                resp = await own_client.post(_intake_url(settings), headers=headers, json=[payload])
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning(f'Datadog log delivery failed: {exc}')
        return False
    return True

