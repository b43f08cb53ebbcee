from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from packaging.version import InvalidVersion, Version

from contracts.schemas import Evaluation


def _norm_patterns(values: Iterable[str]) -> Tuple[str, ...]:
    out: list[str] = []
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.append(s.casefold())
    return tuple(out)


class Classification(str, Enum):
    PUBLIC = "public"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ClassificationRules:
    """
    A package is internal when its origin project or its id matches one of
    the configured glob patterns (case-insensitive); otherwise it is public.
    """

    internal_projects: Tuple[str, ...] = ()
    internal_packages: Tuple[str, ...] = ()

    @classmethod
    def from_iterables(
        cls,
        *,
        internal_projects: Iterable[str] = (),
        internal_packages: Iterable[str] = (),
    ) -> "ClassificationRules":
        return cls(
            internal_projects=_norm_patterns(internal_projects),
            internal_packages=_norm_patterns(internal_packages),
        )

    def is_internal(self, package_id: str, origin_project: str) -> bool:
        project = (origin_project or "").casefold()
        pid = (package_id or "").casefold()
        if project and any(fnmatchcase(project, p) for p in self.internal_projects):
            return True
        return any(fnmatchcase(pid, p) for p in self.internal_packages)


def _as_version(value: str) -> Optional[Version]:
    try:
        return Version(value)
    except InvalidVersion:
        return None


def _versions_equal(a: str, b: str) -> bool:
    va, vb = _as_version(a), _as_version(b)
    if va is not None and vb is not None:
        return va == vb
    return a.strip().casefold() == b.strip().casefold()


@dataclass(frozen=True)
class VersionSpec:
    """
    Version selector for a package override.

    ``*`` (or empty) matches any version, ``1.2.0`` / ``[1.2.0]`` match one
    version and interval notation such as ``[1.0,2.0)`` or ``(,3.0]`` matches
    a range. Range bounds are compared as PEP 440 versions; a version that
    cannot be parsed never falls inside a range.
    """

    raw: str = "*"
    exact: Optional[str] = None
    lower: Optional[str] = None
    upper: Optional[str] = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True

    ANY = 0
    RANGE = 1
    EXACT = 2

    @classmethod
    def parse(cls, spec: Optional[str]) -> "VersionSpec":
        raw = "" if spec is None else str(spec).strip()
        if raw in ("", "*"):
            return cls(raw="*")

        if raw[0] not in "[(":
            return cls(raw=raw, exact=raw)

        if raw[-1] not in "])" or len(raw) < 3:
            raise ValueError(f"malformed version range {raw!r}")
        body = raw[1:-1]
        lower_inclusive = raw[0] == "["
        upper_inclusive = raw[-1] == "]"

        if "," not in body:
            if not (lower_inclusive and upper_inclusive) or not body.strip():
                raise ValueError(f"malformed version range {raw!r}")
            return cls(raw=raw, exact=body.strip())

        lo, _, hi = body.partition(",")
        lo, hi = lo.strip(), hi.strip()
        if not lo and not hi:
            raise ValueError(f"malformed version range {raw!r}")
        for bound in (lo, hi):
            if bound and _as_version(bound) is None:
                raise ValueError(f"invalid version bound {bound!r} in {raw!r}")
        if lo and hi:
            vlo, vhi = Version(lo), Version(hi)
            if vlo > vhi or (vlo == vhi and not (lower_inclusive and upper_inclusive)):
                raise ValueError(f"empty version range {raw!r}")
        return cls(
            raw=raw,
            lower=lo or None,
            upper=hi or None,
            lower_inclusive=lower_inclusive,
            upper_inclusive=upper_inclusive,
        )

    @property
    def specificity(self) -> int:
        if self.exact is not None:
            return self.EXACT
        if self.lower is None and self.upper is None:
            return self.ANY
        return self.RANGE

    def matches(self, version: str) -> bool:
        if self.exact is not None:
            return _versions_equal(self.exact, version or "")
        if self.lower is None and self.upper is None:
            return True

        v = _as_version(version or "")
        if v is None:
            return False
        if self.lower is not None:
            lo = Version(self.lower)
            if v < lo or (v == lo and not self.lower_inclusive):
                return False
        if self.upper is not None:
            hi = Version(self.upper)
            if v > hi or (v == hi and not self.upper_inclusive):
                return False
        return True


@dataclass(frozen=True)
class PackageOverride:
    id: str
    result: Evaluation
    version: VersionSpec = field(default_factory=VersionSpec)
    remark: str = ""

    def matches(self, package_id: str, version: str) -> bool:
        return self.id.casefold() == (package_id or "").casefold() and self.version.matches(version)


@dataclass(frozen=True)
class PolicySet:
    categories: Mapping[str, Evaluation] = field(default_factory=dict)
    packages: Tuple[PackageOverride, ...] = ()
    default: Optional[Evaluation] = None

    def __post_init__(self) -> None:
        folded = {str(k).casefold(): Evaluation.parse(v) for k, v in dict(self.categories).items()}
        object.__setattr__(self, "categories", MappingProxyType(folded))
        object.__setattr__(self, "packages", tuple(self.packages))

    def rule_for_category(self, category: str) -> Optional[Evaluation]:
        return self.categories.get((category or "").casefold())

    def override_for(self, package_id: str, version: str) -> Optional[PackageOverride]:
        best: Optional[PackageOverride] = None
        for override in self.packages:
            if not override.matches(package_id, version):
                continue
            # strictly greater keeps the first configured override on ties
            if best is None or override.version.specificity > best.version.specificity:
                best = override
        return best


@dataclass(frozen=True)
class PolicyTable:
    classification: ClassificationRules = field(default_factory=ClassificationRules)
    policies: Mapping[Classification, PolicySet] = field(default_factory=dict)
    fail_on_error: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "policies",
            MappingProxyType({Classification(k): v for k, v in dict(self.policies).items()}),
        )

    def classify(self, package_id: str, origin_project: str) -> Classification:
        if self.classification.is_internal(package_id, origin_project):
            return Classification.INTERNAL
        return Classification.PUBLIC

    def policy_for(self, classification: Classification) -> PolicySet:
        return self.policies.get(classification) or PolicySet()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PolicyTable":
        if not isinstance(raw, Mapping):
            raise ValueError("policy table must be a JSON object")

        cls_raw = raw.get("classification", {}) or {}
        if not isinstance(cls_raw, Mapping):
            raise ValueError("classification must be an object")
        rules = ClassificationRules.from_iterables(
            internal_projects=cls_raw.get("internal_projects", []),
            internal_packages=cls_raw.get("internal_packages", []),
        )

        policies_raw = raw.get("policies", {}) or {}
        if not isinstance(policies_raw, Mapping):
            raise ValueError("policies must be an object")
        policies: dict[Classification, PolicySet] = {}
        for name, set_raw in policies_raw.items():
            try:
                classification = Classification(str(name).strip().lower())
            except ValueError:
                raise ValueError(f"unknown policy classification {name!r}") from None
            policies[classification] = _build_policy_set(str(name), set_raw)

        return cls(
            classification=rules,
            policies=policies,
            fail_on_error=bool(raw.get("fail_on_error", False)),
        )


def _build_policy_set(name: str, raw: Any) -> PolicySet:
    if not isinstance(raw, Mapping):
        raise ValueError(f"policies.{name} must be an object")

    categories_raw = raw.get("categories", {}) or {}
    if not isinstance(categories_raw, Mapping):
        raise ValueError(f"policies.{name}.categories must be an object")
    categories = {str(k): Evaluation.parse(v) for k, v in categories_raw.items()}

    overrides: list[PackageOverride] = []
    for i, item in enumerate(raw.get("packages", []) or []):
        where = f"policies.{name}.packages[{i}]"
        if not isinstance(item, Mapping):
            raise ValueError(f"{where} must be an object")
        pid = str(item.get("id", "") or "").strip()
        if not pid:
            raise ValueError(f"{where}: id is required")
        if "result" not in item:
            raise ValueError(f"{where}: result is required")
        overrides.append(
            PackageOverride(
                id=pid,
                result=Evaluation.parse(item["result"]),
                version=VersionSpec.parse(item.get("version")),
                remark=str(item.get("remark", "") or ""),
            )
        )

    default = raw.get("default")
    return PolicySet(
        categories=categories,
        packages=tuple(overrides),
        default=Evaluation.parse(default) if default is not None else None,
    )
