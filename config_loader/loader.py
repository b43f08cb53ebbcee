from __future__ import annotations

import json
import sys
from typing import Any, Mapping, Optional, Tuple

from contracts.errors import ConfigLoadError
from contracts.schemas import Package
from license_catalog import LicenseCatalog
from license_policy import PolicyTable


def load_json(path: Optional[str]) -> Any:
    where = path or "<stdin>"
    try:
        if path:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        return json.load(sys.stdin)
    except OSError as e:
        raise ConfigLoadError(f"cannot read {where}: {e.strerror or e}", context={"path": where}) from e
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"malformed JSON in {where}: {e}", context={"path": where}) from e


def catalog_from_document(raw: Any, where: str = "<catalog>") -> LicenseCatalog:
    try:
        return LicenseCatalog.from_mapping(raw)
    except ValueError as e:
        raise ConfigLoadError(f"invalid license catalog {where}: {e}", context={"path": where}) from e


def policy_from_document(raw: Any, where: str = "<policy>") -> PolicyTable:
    try:
        return PolicyTable.from_mapping(raw)
    except ValueError as e:
        raise ConfigLoadError(f"invalid policy table {where}: {e}", context={"path": where}) from e


def packages_from_document(
    raw: Any, where: str = "<packages>"
) -> Tuple[Tuple[Package, ...], dict[Tuple[str, str, str], str]]:
    """
    Read a manifest document into deduplicated packages plus the licenses
    declared for them (keyed by identity triple).
    """
    items = raw.get("packages") if isinstance(raw, Mapping) else raw
    if not isinstance(items, list):
        raise ConfigLoadError(f"invalid package manifest {where}: expected a list of packages", context={"path": where})

    packages: list[Package] = []
    declared: dict[Tuple[str, str, str], str] = {}
    seen: set[Tuple[str, str, str]] = set()
    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ConfigLoadError(f"invalid package manifest {where}: packages[{i}] must be an object", context={"path": where})
        origin = item.get("originProject", item.get("origin_project", ""))
        try:
            pkg = Package(
                id=str(item.get("id", "") or "").strip(),
                version=str(item.get("version", "") or "").strip(),
                origin_project=str(origin or "").strip(),
            )
        except ValueError as e:
            raise ConfigLoadError(f"invalid package manifest {where}: packages[{i}]: {e}", context={"path": where}) from e
        if pkg.key in seen:
            continue
        seen.add(pkg.key)
        packages.append(pkg)
        lic = item.get("license")
        if lic:
            declared[pkg.key] = str(lic).strip()
    return tuple(packages), declared


def load_catalog(path: str) -> LicenseCatalog:
    return catalog_from_document(load_json(path), path)


def load_policy_table(path: str) -> PolicyTable:
    return policy_from_document(load_json(path), path)


def load_packages(path: Optional[str]) -> Tuple[Tuple[Package, ...], dict[Tuple[str, str, str], str]]:
    return packages_from_document(load_json(path), path or "<stdin>")
