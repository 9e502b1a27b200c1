import logging
import time
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlparse

from .schemas import TraceStep
from .settings import Settings

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def build_tracer(settings: Settings) -> Any:
    if not settings.dd_trace_enabled:
        return None

    try:
        from ddtrace import tracer
    except ImportError as exc:
        raise RuntimeError(
            'DD_TRACE_ENABLED is set but ddtrace is not installed; '
            'install walletguard-api[datadog] or unset DD_TRACE_ENABLED'
        ) from exc

    if settings.dd_trace_agent_url:
        parsed = urlparse(settings.dd_trace_agent_url)
        if parsed.scheme in {'http', 'https'} and parsed.hostname:
            tracer.configure(
                hostname=parsed.hostname,
                port=parsed.port or 8126,
                https=(parsed.scheme == 'https'),
            )
        elif parsed.scheme == 'unix' and parsed.path:
            tracer.configure(uds_path=parsed.path)
    return tracer


class TraceCollector:
    def __init__(
        self,
        tracer: Any = None,
        service: str = 'walletguard-api',
        env: str = 'dev',
        version: str = '0.1.0',
    ) -> None:
        self.steps: list[TraceStep] = []
        self.tracer = tracer
        self.service = service
        self.env = env
        self.version = version

    @classmethod
    def from_settings(cls, settings: Settings, tracer: Any = None) -> 'TraceCollector':
        return cls(
            tracer=tracer,
            service=settings.dd_service,
            env=settings.dd_env,
            version=settings.dd_version,
        )

    @contextmanager
    def step(self, name: str, detail: str | None = None):
        started = time.perf_counter()
        dd_span = None
        if self.tracer is not None:
            dd_span = self.tracer.trace(
                f'walletguard.{name}',
                service=self.service,
                resource=name,
            )
            dd_span.set_tag('env', self.env)
            dd_span.set_tag('version', self.version)
            if detail:
                dd_span.set_tag('detail', detail)
        ok = True
        err_msg = None
        try:
            yield
        except Exception as exc:
            ok = False
            err_msg = str(exc)
            if dd_span is not None:
                dd_span.set_tag('error', 1)
                dd_span.set_tag('error.msg', err_msg)
            raise
        finally:
            duration_ms = int((time.perf_counter() - started) * 1000)
            self.steps.append(
                TraceStep(
                    step=name,
                    duration_ms=duration_ms,
                    ok=ok,
                    detail=detail if ok else err_msg,
                )
            )
            logger.debug(f'step {name} ok={ok} duration_ms={duration_ms}')
            if dd_span is not None:
                dd_span.finish()

    def as_list(self) -> list[TraceStep]:
        return self.steps
