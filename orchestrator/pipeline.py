from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from contracts.schemas import (
    UNKNOWN_LICENSE,
    AnalysisState,
    AnalyzedPackage,
    EvaluatedPackage,
    Evaluation,
    Package,
)
from enrichment import Detector, analyze, check_catalog, license_package
from license_catalog import LicenseCatalog
from license_policy import PolicyTable, evaluate_package, is_failure

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_VIOLATION = 3
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class PipelineOptions:
    max_workers: int = 4
    detector_timeout: Optional[float] = None
    fail_on_error: Optional[bool] = None


@dataclass(frozen=True)
class PipelineResult:
    packages: Tuple[EvaluatedPackage, ...] = ()
    interrupted: bool = False
    fail_on_error: bool = False

    @property
    def violations(self) -> Tuple[EvaluatedPackage, ...]:
        return tuple(p for p in self.packages if p.result is Evaluation.VIOLATION)

    @property
    def errors(self) -> Tuple[EvaluatedPackage, ...]:
        return tuple(p for p in self.packages if p.state is AnalysisState.ERROR)

    def counts(self) -> dict[str, int]:
        by_result = Counter(p.result.value for p in self.packages)
        return {
            "total": len(self.packages),
            **{e.value: by_result.get(e.value, 0) for e in Evaluation},
            "Error": len(self.errors),
        }

    def exit_code(self, fail_on_error: Optional[bool] = None) -> int:
        effective = self.fail_on_error if fail_on_error is None else bool(fail_on_error)
        if any(is_failure(p, effective) for p in self.packages):
            return EXIT_VIOLATION
        if self.interrupted:
            return EXIT_INTERRUPTED
        return EXIT_OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "packages": [p.to_dict() for p in self.packages],
            "summary": self.counts(),
            "interrupted": self.interrupted,
        }


def _failed(package: Package, message: str) -> EvaluatedPackage:
    licensed = AnalyzedPackage(package, AnalysisState.ERROR, (message,)).attach(UNKNOWN_LICENSE)
    return EvaluatedPackage(licensed, Evaluation.VIOLATION, message)


def process_package(
    package: Package,
    detector: Detector,
    policies: PolicyTable,
    catalog: LicenseCatalog,
    timeout: Optional[float] = None,
) -> EvaluatedPackage:
    try:
        analyzed = analyze(package, detector, timeout=timeout)
        licensed = check_catalog(license_package(analyzed), catalog)
        return evaluate_package(licensed, policies, catalog)
    except Exception as e:
        logger.exception("Unexpected failure while processing %s.", package)
        return _failed(package, f"internal error while processing package: {e!r}")


def _dedupe(packages: Iterable[Package]) -> list[Package]:
    seen: set[Tuple[str, str, str]] = set()
    out: list[Package] = []
    for p in packages:
        if p.key in seen:
            continue
        seen.add(p.key)
        out.append(p)
    return out


def _report_order(p: EvaluatedPackage) -> Tuple[str, str, str, Tuple[str, str, str]]:
    # exact identity breaks ties between ids differing only by case
    return (p.origin_project.casefold(), p.id.casefold(), p.version, p.key)


def _record(results: dict, package: Package, evaluated: EvaluatedPackage) -> None:
    results[package.key] = evaluated
    if evaluated.state is AnalysisState.ERROR:
        logger.warning("%s (%s): %s", package, package.origin_project, evaluated.remark)


def run_pipeline(
    packages: Iterable[Package],
    detector: Detector,
    policies: PolicyTable,
    catalog: LicenseCatalog,
    options: PipelineOptions = PipelineOptions(),
) -> PipelineResult:
    """
    Evaluate every package, at most ``options.max_workers`` at a time.

    Output order is by origin project, then package id, then version. A
    KeyboardInterrupt stops dispatching and yields a partial result flagged
    ``interrupted``.
    """
    unique = _dedupe(packages)
    workers = max(1, int(options.max_workers))
    timeout = options.detector_timeout
    fail_on_error = policies.fail_on_error if options.fail_on_error is None else bool(options.fail_on_error)

    logger.info("Evaluating %d packages with %d workers.", len(unique), workers)

    results: dict[Tuple[str, str, str], EvaluatedPackage] = {}
    interrupted = False

    if workers == 1 or len(unique) <= 1:
        try:
            for pkg in unique:
                _record(results, pkg, process_package(pkg, detector, policies, catalog, timeout))
        except KeyboardInterrupt:
            interrupted = True
    else:
        ex = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="license-inspector")
        futures: dict[Future, Package] = {}
        pkg_iter = iter(unique)

        def submit_next() -> bool:
            try:
                pkg = next(pkg_iter)
            except StopIteration:
                return False
            futures[ex.submit(process_package, pkg, detector, policies, catalog, timeout)] = pkg
            return True

        def collect(fut: Future, pkg: Package) -> None:
            try:
                evaluated = fut.result()
            except Exception as e:
                evaluated = _failed(pkg, f"internal error while processing package: {e!r}")
            _record(results, pkg, evaluated)

        try:
            while len(futures) < workers and submit_next():
                continue
            while futures:
                done, _ = wait(futures, return_when=FIRST_COMPLETED)
                for fut in done:
                    collect(fut, futures.pop(fut))
                    submit_next()
        except KeyboardInterrupt:
            interrupted = True
            for fut, pkg in list(futures.items()):
                if fut.done() and not fut.cancelled():
                    collect(fut, pkg)
        finally:
            ex.shutdown(wait=not interrupted, cancel_futures=True)

    if interrupted:
        logger.warning("Interrupted: %d of %d packages evaluated.", len(results), len(unique))

    result = PipelineResult(
        packages=tuple(sorted(results.values(), key=_report_order)),
        interrupted=interrupted,
        fail_on_error=fail_on_error,
    )
    c = result.counts()
    logger.info(
        "Evaluated %d packages: %d ok, %d violations, %d ignored, %d errors.",
        c["total"],
        c["Ok"],
        c["Violation"],
        c["Ignored"],
        c["Error"],
    )
    return result
