import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse

from .analyzer import WalletAnalyzer
from .datadog_client import send_analysis_trace_log
from .errors import AnalysisError, InvalidAddressFormat
from .observability import TraceCollector, build_tracer, configure_logging
from .schemas import AnalysisReport, WalletAnalyzeRequest
from .settings import settings

configure_logging(settings)
logger = logging.getLogger(__name__)
# Built once at import; a missing ddtrace fails startup, not every request.
tracer = build_tracer(settings)

app = FastAPI(title='walletguard API', version='0.1.0')


def build_analyzer() -> WalletAnalyzer:
    return WalletAnalyzer.from_settings(settings)


def _status_code(exc: AnalysisError) -> int:
    return 400 if isinstance(exc, InvalidAddressFormat) else 502


@app.get('/health')
def health() -> dict[str, str]:
    return {'status': 'ok'}


@app.post('/v1/wallet/analyze', response_model=AnalysisReport)
async def wallet_analyze(payload: WalletAnalyzeRequest) -> AnalysisReport:
    trace = TraceCollector.from_settings(settings, tracer=tracer)
    try:
        report = await build_analyzer().analyze(payload.address, trace=trace)
    except AnalysisError as exc:
        await send_analysis_trace_log(
            settings, payload.address, trace.as_list(), error=exc.as_dict()
        )
        raise HTTPException(status_code=_status_code(exc), detail=exc.as_dict()) from exc

    await send_analysis_trace_log(settings, payload.address, trace.as_list(), report=report)
    return report


def _format_sse(event: str, data: dict) -> str:
    return f'event: {event}\ndata: {json.dumps(data, separators=(",", ":"))}\n\n'


@app.post('/v1/wallet/analyze/stream')
async def wallet_analyze_stream(payload: WalletAnalyzeRequest) -> StreamingResponse:
    request_id = str(uuid4())

    async def event_stream() -> AsyncGenerator[str, None]:
        queue: asyncio.Queue[dict | None] = asyncio.Queue()

        def on_event(event: str, data: dict | None) -> None:
            queue.put_nowait({'event': event, 'data': data or {}})

        async def worker() -> None:
            trace = TraceCollector.from_settings(settings, tracer=tracer)
            try:
                report = await build_analyzer().analyze(
                    payload.address, on_event=on_event, trace=trace
                )
                await send_analysis_trace_log(
                    settings, payload.address, trace.as_list(), report=report
                )
            except AnalysisError as exc:
                # The analyzer has already emitted the error event.
                await send_analysis_trace_log(
                    settings, payload.address, trace.as_list(), error=exc.as_dict()
                )
            except Exception as exc:
                logger.exception('Unexpected failure during streamed analysis')
                on_event('error', {'status_code': 500, 'detail': str(exc)})
            finally:
                queue.put_nowait(None)

        task = asyncio.create_task(worker())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                frame = {'request_id': request_id, **item['data']}
                yield _format_sse(item['event'], frame)
        finally:
            await task

    return StreamingResponse(
        event_stream(),
        media_type='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
            'X-Accel-Buffering': 'no',
        },
    )
