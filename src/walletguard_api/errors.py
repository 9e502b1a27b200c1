class AnalysisError(RuntimeError):
    """Base class for every failure that aborts a wallet analysis."""

    stage = 'analysis'

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {'error': type(self).__name__, 'stage': self.stage, 'message': self.message}


class InvalidAddressFormat(AnalysisError):
    stage = 'validation'

    def __init__(self, value: object) -> None:
        super().__init__(f'Invalid Ethereum wallet address format: {value!r}')
        self.value = value


class ExplorerUnavailable(AnalysisError):
    stage = 'explorer'

    def __init__(self, message: str, action: str | None = None) -> None:
        super().__init__(message)
        self.action = action


class ModelUnavailable(AnalysisError):
    stage = 'model'


class ModelEmptyResponse(AnalysisError):
    stage = 'model'


class MalformedAssessment(AnalysisError):
    """Model output that does not decode into a valid risk assessment.

    ``raw`` keeps the untouched payload so callers can log what the model sent.
    """

    stage = 'parse'

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw
