import logging
from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from .assessment import parse_assessment
from .errors import AnalysisError
from .explorer_client import ExplorerClient
from .model_client import ModelClient, build_model_client
from .observability import TraceCollector
from .prompts import build_model_request
from .schemas import AnalysisReport
from .settings import Settings
from .validation import validate_address

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, dict | None], None]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _emit(on_event: EventCallback | None, event: str, data: dict | None = None) -> None:
    if on_event:
        on_event(event, data or {})


class WalletAnalyzer:
    """Runs validate → explorer → prompt → model → parse and assembles the report."""

    def __init__(
        self,
        explorer: ExplorerClient,
        model: ModelClient,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.explorer = explorer
        self.model = model
        self.clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> 'WalletAnalyzer':
        return cls(
            explorer=ExplorerClient(settings, client=http_client),
            model=build_model_client(settings, http_client=http_client),
        )

    async def analyze(
        self,
        address: str,
        on_event: EventCallback | None = None,
        trace: TraceCollector | None = None,
    ) -> AnalysisReport:
        trace = trace or TraceCollector()
        step = 'validation'
        try:
            with trace.step(step):
                wallet = validate_address(address)
            _emit(on_event, 'started', {'address': wallet})

            step = 'explorer_fetch'
            _emit(on_event, 'step_started', {'step': step})
            with trace.step(step):
                snapshot = await self.explorer.fetch_snapshot(wallet)
            _emit(
                on_event,
                'step_completed',
                {'step': step, 'transaction_count': snapshot.transaction_count},
            )

            step = 'model_completion'
            _emit(on_event, 'step_started', {'step': step})
            with trace.step(step):
                request = build_model_request(wallet, snapshot)
                raw = await self.model.complete(request)
            _emit(on_event, 'step_completed', {'step': step})

            step = 'assessment_parse'
            _emit(on_event, 'step_started', {'step': step})
            with trace.step(step):
                assessment = parse_assessment(raw)
            _emit(on_event, 'step_completed', {'step': step, 'risk_score': assessment.risk_score})
        except AnalysisError as exc:
            logger.warning(f'Wallet analysis failed at {exc.stage}: {exc.message}')
            _emit(on_event, 'error', {'step': step, **exc.as_dict()})
            raise

        report = AnalysisReport(
            address=wallet,
            is_valid=True,
            explorer_snapshot=snapshot,
            risk_assessment=assessment,
            timestamp=self.clock().isoformat(),
        )
        logger.info(f'Wallet analysis for {wallet} completed with risk score {assessment.risk_score}')
        _emit(on_event, 'completed', {'report': report.model_dump(mode='json', by_alias=True)})
        return report
