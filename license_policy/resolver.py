from __future__ import annotations

from contracts.schemas import AnalysisState, EvaluatedPackage, Evaluation, LicensedPackage
from license_catalog import LicenseCatalog

from .policy import Classification, PolicyTable


def classify(licensed: LicensedPackage, policies: PolicyTable) -> Classification:
    return policies.classify(licensed.id, licensed.origin_project)


def evaluate_package(licensed: LicensedPackage, policies: PolicyTable, catalog: LicenseCatalog) -> EvaluatedPackage:
    """
    Decide the verdict for a licensed package.

    Precedence, first match wins:
      1. analysis Error -> Violation, remark lists the diagnostics
      2. license missing from the catalog -> Violation
      3. most specific package override for the package's classification
      4. category rule for the package's classification
      5. policy set default, else Violation
    """
    if licensed.state is AnalysisState.ERROR:
        return EvaluatedPackage(licensed, Evaluation.VIOLATION, "; ".join(licensed.messages))

    lic = catalog.get(licensed.license)
    if lic is None:
        return EvaluatedPackage(licensed, Evaluation.VIOLATION, f"unrecognized license '{licensed.license}'")

    classification = classify(licensed, policies)
    policy = policies.policy_for(classification)

    override = policy.override_for(licensed.id, licensed.version)
    if override is not None:
        remark = override.remark or f"package override for {override.id} {override.version.raw}"
        return EvaluatedPackage(licensed, override.result, remark)

    rule = policy.rule_for_category(lic.category)
    if rule is not None:
        return EvaluatedPackage(
            licensed,
            rule,
            f"{lic.category} license {lic.id} is {rule.value} for {classification.value} packages",
        )

    if policy.default is not None:
        return EvaluatedPackage(
            licensed,
            policy.default,
            f"no rule for license category '{lic.category}', {classification.value} policy default is {policy.default.value}",
        )

    return EvaluatedPackage(
        licensed,
        Evaluation.VIOLATION,
        f"no rule for license category '{lic.category}' in {classification.value} policy",
    )


def is_failure(evaluated: EvaluatedPackage, fail_on_error: bool = False) -> bool:
    if evaluated.result is Evaluation.IGNORED:
        return False
    if evaluated.result is Evaluation.VIOLATION:
        return True
    return fail_on_error and evaluated.state is AnalysisState.ERROR


def enforce_compliance(evaluated: EvaluatedPackage) -> EvaluatedPackage:
    if evaluated.result is Evaluation.VIOLATION:
        raise PermissionError(f"license violation: {evaluated.id} {evaluated.version}: {evaluated.remark}")
    return evaluated
