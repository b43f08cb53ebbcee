from .errors import ConfigLoadError, DetectionError, DetectionTimeout, InspectorError
from .schemas import (
    UNKNOWN_LICENSE,
    AnalysisState,
    AnalyzedPackage,
    EvaluatedPackage,
    Evaluation,
    LicensedPackage,
    Package,
)

__all__ = [
    "UNKNOWN_LICENSE",
    "AnalysisState",
    "AnalyzedPackage",
    "EvaluatedPackage",
    "Evaluation",
    "LicensedPackage",
    "Package",
    "InspectorError",
    "ConfigLoadError",
    "DetectionError",
    "DetectionTimeout",
]
