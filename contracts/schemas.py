from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

UNKNOWN_LICENSE = "unknown"


class AnalysisState(str, Enum):
    """Whether analysis succeeded well enough to trust the detected license."""

    OK = "Ok"
    ERROR = "Error"

    @property
    def severity(self) -> int:
        return 1 if self is AnalysisState.ERROR else 0

    @classmethod
    def parse(cls, value: Any) -> "AnalysisState":
        return _parse_enum(cls, value)


class Evaluation(str, Enum):
    """Terminal compliance verdict for a package."""

    OK = "Ok"
    VIOLATION = "Violation"
    IGNORED = "Ignored"

    @classmethod
    def parse(cls, value: Any) -> "Evaluation":
        return _parse_enum(cls, value)


def _parse_enum(cls, value):
    if isinstance(value, cls):
        return value
    s = str(value).strip().lower()
    for member in cls:
        if member.value.lower() == s or member.name.lower() == s:
            return member
    raise ValueError(f"invalid {cls.__name__}: {value!r}")


def _norm_messages(messages: Iterable[str]) -> Tuple[str, ...]:
    return tuple(str(m) for m in messages if m is not None and str(m).strip())


@dataclass(frozen=True)
class Package:
    # Identity of a dependency as discovered in a build manifest.
    id: str
    version: str = ""
    origin_project: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("package id must be a non-empty string")

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.id, self.version, self.origin_project)

    def __str__(self) -> str:
        return f"{self.id} {self.version}"


@dataclass(frozen=True)
class AnalyzedPackage:
    """
    Result of attempting to resolve a package's license.

    Diagnostic history is append-only: ``escalate`` returns a new record with
    the message added after the existing ones and a state that never becomes
    less severe.
    """

    package: Package
    state: AnalysisState = AnalysisState.OK
    messages: Tuple[str, ...] = ()
    detected_license: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", AnalysisState.parse(self.state))
        object.__setattr__(self, "messages", _norm_messages(self.messages))
        if self.state is AnalysisState.ERROR and not self.messages:
            raise ValueError(f"{self.package}: Error state requires at least one message")

    @classmethod
    def from_package(cls, package: Package) -> "AnalyzedPackage":
        return cls(package=package)

    @property
    def id(self) -> str:
        return self.package.id

    @property
    def version(self) -> str:
        return self.package.version

    @property
    def origin_project(self) -> str:
        return self.package.origin_project

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.package.key

    @property
    def version_range(self) -> str:
        return "[" + self.version + "]"

    def escalate(self, state: AnalysisState, message: str) -> "AnalyzedPackage":
        state = AnalysisState.parse(state)
        effective = state if state.severity > self.state.severity else self.state
        return AnalyzedPackage(
            package=self.package,
            state=effective,
            messages=self.messages + _norm_messages([message]),
            detected_license=self.detected_license,
        )

    def attach(self, license_id: str) -> "LicensedPackage":
        return LicensedPackage(analyzed=self, license=license_id)

    def __str__(self) -> str:
        return str(self.package)


@dataclass(frozen=True)
class LicensedPackage:
    # A package with a license attached whose policy status is not yet known.
    analyzed: AnalyzedPackage
    license: str

    def __post_init__(self) -> None:
        if not isinstance(self.license, str) or not self.license.strip():
            raise ValueError(f"{self.analyzed}: license identifier must be a non-empty string")

    @property
    def package(self) -> Package:
        return self.analyzed.package

    @property
    def id(self) -> str:
        return self.analyzed.id

    @property
    def version(self) -> str:
        return self.analyzed.version

    @property
    def origin_project(self) -> str:
        return self.analyzed.origin_project

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.analyzed.key

    @property
    def state(self) -> AnalysisState:
        return self.analyzed.state

    @property
    def messages(self) -> Tuple[str, ...]:
        return self.analyzed.messages

    @property
    def version_range(self) -> str:
        return self.analyzed.version_range

    def escalate(self, state: AnalysisState, message: str) -> "LicensedPackage":
        return LicensedPackage(analyzed=self.analyzed.escalate(state, message), license=self.license)

    def copy(self) -> "LicensedPackage":
        return LicensedPackage(analyzed=self.analyzed, license=self.license)

    def __str__(self) -> str:
        return f"{self.analyzed} {self.license}"


@dataclass(frozen=True)
class EvaluatedPackage:
    licensed: LicensedPackage
    result: Evaluation
    remark: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "result", Evaluation.parse(self.result))
        object.__setattr__(self, "remark", "" if self.remark is None else str(self.remark))

    @property
    def package(self) -> Package:
        return self.licensed.package

    @property
    def id(self) -> str:
        return self.licensed.id

    @property
    def version(self) -> str:
        return self.licensed.version

    @property
    def origin_project(self) -> str:
        return self.licensed.origin_project

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.licensed.key

    @property
    def state(self) -> AnalysisState:
        return self.licensed.state

    @property
    def messages(self) -> Tuple[str, ...]:
        return self.licensed.messages

    @property
    def license(self) -> str:
        return self.licensed.license

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "originProject": self.origin_project,
            "state": self.state.value,
            "messages": list(self.messages),
            "license": self.license,
            "result": self.result.value,
            "remark": self.remark,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EvaluatedPackage":
        package = Package(
            id=raw.get("id", ""),
            version=str(raw.get("version", "")),
            origin_project=str(raw.get("originProject", "")),
        )
        analyzed = AnalyzedPackage(
            package=package,
            state=raw.get("state", AnalysisState.OK),
            messages=tuple(raw.get("messages", ()) or ()),
        )
        licensed = LicensedPackage(analyzed=analyzed, license=raw.get("license") or UNKNOWN_LICENSE)
        return cls(licensed=licensed, result=raw.get("result", ""), remark=raw.get("remark", ""))

    def __str__(self) -> str:
        return f"{self.licensed} {self.result.value}"
