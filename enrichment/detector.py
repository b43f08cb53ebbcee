from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple

from contracts.errors import DetectionError, DetectionTimeout
from contracts.schemas import Package


@dataclass(frozen=True)
class DetectionResult:
    license_id: str
    diagnostics: Tuple[str, ...] = ()


Detector = Callable[[Package], Any]


def _checked(license_id: Any, diagnostics: Any) -> DetectionResult:
    if license_id is None:
        license_id = ""
    if not isinstance(license_id, str):
        raise DetectionError(f"detector returned a license identifier of type {type(license_id).__name__}")
    if isinstance(diagnostics, str):
        diagnostics = (diagnostics,)
    return DetectionResult(license_id=license_id, diagnostics=tuple(diagnostics or ()))


def coerce_detection(value: Any) -> DetectionResult:
    if isinstance(value, DetectionResult):
        return _checked(value.license_id, value.diagnostics)
    if isinstance(value, str):
        return DetectionResult(license_id=value)
    if isinstance(value, tuple) and len(value) == 2:
        return _checked(*value)
    raise DetectionError(f"detector returned unsupported value of type {type(value).__name__}")


def call_detector(detector: Detector, package: Package, timeout: Optional[float] = None) -> DetectionResult:
    """
    Run ``detector`` for ``package``; with a timeout the call runs on a daemon
    thread that is abandoned if it does not finish in time.
    """
    if timeout is None:
        return coerce_detection(detector(package))

    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = detector(package)
        except BaseException as e:  # re-raised on the calling thread
            outcome["error"] = e

    t = threading.Thread(target=target, name=f"detect:{package.id}", daemon=True)
    t.start()
    t.join(timeout)
    if t.is_alive():
        raise DetectionTimeout(
            f"license detection timed out after {timeout:g}s",
            context={"package": package.id, "timeout": timeout},
        )
    if "error" in outcome:
        raise outcome["error"]
    return coerce_detection(outcome.get("value"))


class DeclaredLicenseDetector:
    """
    Detector that reports the license declared for a package in its manifest
    entry. Packages without a declaration fail detection.
    """

    def __init__(self, declared: Mapping[Tuple[str, str, str], str]) -> None:
        self._declared = dict(declared)

    def __call__(self, package: Package) -> DetectionResult:
        license_id = (self._declared.get(package.key) or "").strip()
        if not license_id:
            raise DetectionError(
                f"no license declared for {package.id} {package.version}",
                context={"package": package.id, "version": package.version},
            )
        return DetectionResult(license_id=license_id)
