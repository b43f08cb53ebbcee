from __future__ import annotations

import logging
from typing import Optional

from contracts.errors import DetectionTimeout
from contracts.schemas import UNKNOWN_LICENSE, AnalysisState, AnalyzedPackage, LicensedPackage, Package
from license_catalog import LicenseCatalog

from .detector import Detector, call_detector

logger = logging.getLogger(__name__)


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__


def analyze(package: Package, detector: Detector, *, timeout: Optional[float] = None) -> AnalyzedPackage:
    """
    Analysis stage. Detector faults are reported as an Error record carrying
    one message; they are never raised.
    """
    fresh = AnalyzedPackage.from_package(package)
    try:
        detection = call_detector(detector, package, timeout)
    except Exception as e:
        if isinstance(e, DetectionTimeout):
            message = _describe(e)
        else:
            message = f"license detection failed: {_describe(e)}"
        logger.debug("Detection failed for %s: %s", package, message)
        return fresh.escalate(AnalysisState.ERROR, message)

    license_id = (detection.license_id or "").strip()
    analyzed = AnalyzedPackage(
        package=package,
        messages=detection.diagnostics,
        detected_license=license_id or None,
    )
    if not license_id:
        return analyzed.escalate(AnalysisState.ERROR, "detector returned no license identifier")
    return analyzed


def license_package(analyzed: AnalyzedPackage, detected_license_id: Optional[str] = None) -> LicensedPackage:
    """Licensing stage: attach the detected identifier, or the unknown sentinel."""
    license_id = (detected_license_id or analyzed.detected_license or "").strip()
    return analyzed.attach(license_id or UNKNOWN_LICENSE)


def check_catalog(licensed: LicensedPackage, catalog: LicenseCatalog) -> LicensedPackage:
    if licensed.state is AnalysisState.ERROR or licensed.license in catalog:
        return licensed
    return licensed.escalate(AnalysisState.ERROR, f"license '{licensed.license}' not found in license catalog")
