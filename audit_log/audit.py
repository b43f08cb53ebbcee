from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Tuple

from contracts.schemas import EvaluatedPackage


@dataclass(frozen=True)
class AuditPolicy:
    include_messages: bool = True


@dataclass(frozen=True)
class AuditEvent:
    ts_utc: str
    run_id: str
    package_id: str
    version: str
    origin_project: str
    license: str
    state: str
    result: str
    remark: str
    messages: Tuple[str, ...] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ts_utc": self.ts_utc,
            "run_id": self.run_id,
            "package": {"id": self.package_id, "version": self.version, "originProject": self.origin_project},
            "license": self.license,
            "state": self.state,
            "result": self.result,
            "remark": self.remark,
            "messages": list(self.messages) if self.messages is not None else None,
        }


def build_audit_event(
    evaluated: EvaluatedPackage,
    policy: AuditPolicy = AuditPolicy(),
    run_id: str = "",
) -> AuditEvent:
    ts = datetime.now(timezone.utc).isoformat()

    return AuditEvent(
        ts_utc=ts,
        run_id=str(run_id),
        package_id=evaluated.id,
        version=evaluated.version,
        origin_project=evaluated.origin_project,
        license=evaluated.license,
        state=evaluated.state.value,
        result=evaluated.result.value,
        remark=evaluated.remark,
        messages=tuple(evaluated.messages) if policy.include_messages else None,
    )


def write_audit_event(path: str, event: AuditEvent) -> None:
    write_audit_events(path, [event])


def write_audit_events(path: str, events: Iterable[AuditEvent]) -> int:
    lines = [json.dumps(ev.to_dict(), sort_keys=True) for ev in events]
    if not lines:
        return 0
    with open(path, "a", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    return len(lines)
