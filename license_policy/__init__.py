from .policy import (
    Classification,
    ClassificationRules,
    PackageOverride,
    PolicySet,
    PolicyTable,
    VersionSpec,
)
from .resolver import classify, enforce_compliance, evaluate_package, is_failure

__all__ = [
    "Classification",
    "ClassificationRules",
    "PackageOverride",
    "PolicySet",
    "PolicyTable",
    "VersionSpec",
    "classify",
    "evaluate_package",
    "enforce_compliance",
    "is_failure",
]
