from .analyzer import WalletAnalyzer
from .errors import (
    AnalysisError,
    ExplorerUnavailable,
    InvalidAddressFormat,
    MalformedAssessment,
    ModelEmptyResponse,
    ModelUnavailable,
)
from .schemas import AnalysisReport, ExplorerSnapshot, RiskAssessment
