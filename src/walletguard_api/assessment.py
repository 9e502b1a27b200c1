from pydantic import ValidationError

from .errors import MalformedAssessment
from .schemas import RiskAssessment


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:5]:
        loc = '.'.join(str(p) for p in err.get('loc', ())) or '<root>'
        parts.append(f'{loc}: {err.get("msg")}')
    return '; '.join(parts)


def parse_assessment(raw: str) -> RiskAssessment:
    """Decode the model's raw reply into a RiskAssessment.

    The reply is validated strictly: no type coercion, no stripping of markdown
    fences, and any missing or out-of-range field rejects the whole payload.
    """
    if not isinstance(raw, str):
        raise MalformedAssessment('Model reply is not text', raw=repr(raw))
    try:
        return RiskAssessment.model_validate_json(raw, strict=True)
    except ValidationError as exc:
        raise MalformedAssessment(
            f'Failed to parse analysis response: {_describe(exc)}', raw=raw
        ) from exc
