from __future__ import annotations

import threading
import unittest

from contracts.errors import DetectionError
from contracts.schemas import UNKNOWN_LICENSE, AnalysisState, Package
from enrichment import (
    DeclaredLicenseDetector,
    DetectionResult,
    analyze,
    check_catalog,
    coerce_detection,
    license_package,
)
from license_catalog import License, LicenseCatalog

PKG = Package("left-pad", "1.0.0", "WebApp")


class TestAnalysisStage(unittest.TestCase):
    def test_success_carries_detected_license_and_diagnostics(self) -> None:
        analyzed = analyze(PKG, lambda p: DetectionResult("MIT", ("dual-licensed, picked MIT",)))
        self.assertEqual(AnalysisState.OK, analyzed.state)
        self.assertEqual(("dual-licensed, picked MIT",), analyzed.messages)
        self.assertEqual("MIT", analyzed.detected_license)
        self.assertEqual(PKG, analyzed.package)

    def test_accepts_tuple_and_string_results(self) -> None:
        self.assertEqual(DetectionResult("MIT", ("a",)), coerce_detection(("MIT", ["a"])))
        self.assertEqual(DetectionResult("MIT", ("a",)), coerce_detection(("MIT", "a")))
        self.assertEqual(DetectionResult("MIT"), coerce_detection("MIT"))
        with self.assertRaises(DetectionError):
            coerce_detection(42)

    def test_string_diagnostics_stay_one_message(self) -> None:
        detection = coerce_detection(DetectionResult("MIT", "dual-licensed"))  # type: ignore[arg-type]
        self.assertEqual(("dual-licensed",), detection.diagnostics)

        analyzed = analyze(PKG, lambda p: DetectionResult("MIT", "dual-licensed"))  # type: ignore[arg-type]
        self.assertEqual(("dual-licensed",), analyzed.messages)

    def test_non_string_license_id_is_a_detection_failure(self) -> None:
        with self.assertRaises(DetectionError):
            coerce_detection((5, ()))

        analyzed = analyze(PKG, lambda p: (5, ()))
        self.assertEqual(AnalysisState.ERROR, analyzed.state)
        self.assertEqual(
            ("license detection failed: detector returned a license identifier of type int",),
            analyzed.messages,
        )

    def test_detector_failure_becomes_error_record(self) -> None:
        def broken(p: Package) -> DetectionResult:
            raise RuntimeError("unsupported archive format")

        analyzed = analyze(PKG, broken)
        self.assertEqual(AnalysisState.ERROR, analyzed.state)
        self.assertEqual(("license detection failed: unsupported archive format",), analyzed.messages)
        self.assertIsNone(analyzed.detected_license)

    def test_empty_license_is_an_error(self) -> None:
        analyzed = analyze(PKG, lambda p: "  ")
        self.assertEqual(AnalysisState.ERROR, analyzed.state)
        self.assertEqual(("detector returned no license identifier",), analyzed.messages)

    def test_timeout_becomes_error_record(self) -> None:
        release = threading.Event()

        def hung(p: Package) -> str:
            release.wait(5)
            return "MIT"

        try:
            analyzed = analyze(PKG, hung, timeout=0.05)
        finally:
            release.set()
        self.assertEqual(AnalysisState.ERROR, analyzed.state)
        self.assertEqual(("license detection timed out after 0.05s",), analyzed.messages)

    def test_timeout_not_hit_for_fast_detector(self) -> None:
        analyzed = analyze(PKG, lambda p: "MIT", timeout=5)
        self.assertEqual(AnalysisState.OK, analyzed.state)
        self.assertEqual("MIT", analyzed.detected_license)


class TestLicensingStage(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = LicenseCatalog.from_licenses([License("MIT", category="permissive")])

    def test_attaches_detected_license(self) -> None:
        licensed = license_package(analyze(PKG, lambda p: "MIT"))
        self.assertEqual("MIT", licensed.license)
        self.assertEqual("BSD-2-Clause", license_package(analyze(PKG, lambda p: "MIT"), "BSD-2-Clause").license)

    def test_error_record_gets_unknown_sentinel(self) -> None:
        analyzed = analyze(PKG, DeclaredLicenseDetector({}))
        licensed = license_package(analyzed)
        self.assertEqual(UNKNOWN_LICENSE, licensed.license)
        self.assertEqual(AnalysisState.ERROR, licensed.state)
        self.assertEqual(("license detection failed: no license declared for left-pad 1.0.0",), licensed.messages)

    def test_catalog_check_escalates_missing_license(self) -> None:
        licensed = license_package(analyze(PKG, lambda p: "WTFPL"))
        checked = check_catalog(licensed, self.catalog)
        self.assertEqual(AnalysisState.OK, licensed.state)
        self.assertEqual(AnalysisState.ERROR, checked.state)
        self.assertEqual(("license 'WTFPL' not found in license catalog",), checked.messages)
        self.assertEqual("WTFPL", checked.license)

    def test_catalog_check_passes_known_license_and_existing_errors(self) -> None:
        licensed = license_package(analyze(PKG, lambda p: "MIT"))
        self.assertIs(licensed, check_catalog(licensed, self.catalog))

        failed = license_package(analyze(PKG, DeclaredLicenseDetector({})))
        self.assertIs(failed, check_catalog(failed, self.catalog))

    def test_declared_detector_reads_manifest_license(self) -> None:
        detector = DeclaredLicenseDetector({PKG.key: "MIT"})
        self.assertEqual(DetectionResult("MIT"), detector(PKG))
        with self.assertRaises(DetectionError):
            detector(Package("left-pad", "2.0.0", "WebApp"))


if __name__ == "__main__":
    unittest.main()
