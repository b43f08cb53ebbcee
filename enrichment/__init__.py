from .detector import DeclaredLicenseDetector, DetectionResult, Detector, call_detector, coerce_detection
from .stages import analyze, check_catalog, license_package

__all__ = [
    "DeclaredLicenseDetector",
    "DetectionResult",
    "Detector",
    "call_detector",
    "coerce_detection",
    "analyze",
    "license_package",
    "check_catalog",
]
