from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from contracts.schemas import UNKNOWN_LICENSE


@dataclass(frozen=True)
class License:
    id: str
    name: str = ""
    category: str = ""


@dataclass(frozen=True)
class LicenseCatalog:
    """
    Read-only lookup of license identifiers to their metadata.

    Lookups are exact first, then case-insensitive ("mit" finds "MIT").
    The ``unknown`` sentinel is never a catalog member.
    """

    licenses: Mapping[str, License] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = MappingProxyType(dict(self.licenses))
        folded = MappingProxyType({k.casefold(): v for k, v in frozen.items()})
        object.__setattr__(self, "licenses", frozen)
        object.__setattr__(self, "_folded", folded)

    @classmethod
    def from_licenses(cls, licenses: Iterable[License]) -> "LicenseCatalog":
        return cls(licenses={lic.id: lic for lic in licenses})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "LicenseCatalog":
        if not isinstance(raw, Mapping):
            raise ValueError("license catalog must be a JSON object")

        entries: list[License] = []
        if "licenses" in raw and isinstance(raw["licenses"], list):
            for i, item in enumerate(raw["licenses"]):
                if not isinstance(item, Mapping):
                    raise ValueError(f"licenses[{i}] must be an object")
                entries.append(_build_license(item.get("id"), item, f"licenses[{i}]"))
        else:
            for license_id, item in raw.items():
                if not isinstance(item, Mapping):
                    raise ValueError(f"license {license_id!r} must map to an object")
                entries.append(_build_license(license_id, item, repr(license_id)))

        seen: set[str] = set()
        for lic in entries:
            folded = lic.id.casefold()
            if folded in seen:
                raise ValueError(f"duplicate license id {lic.id!r}")
            seen.add(folded)
        return cls.from_licenses(entries)

    def get(self, license_id: Optional[str]) -> Optional[License]:
        if not license_id or license_id == UNKNOWN_LICENSE:
            return None
        hit = self.licenses.get(license_id)
        if hit is not None:
            return hit
        return self._folded.get(license_id.casefold())  # type: ignore[attr-defined]

    def category_of(self, license_id: Optional[str]) -> Optional[str]:
        lic = self.get(license_id)
        return lic.category if lic is not None else None

    def ids(self) -> Tuple[str, ...]:
        return tuple(sorted(self.licenses))

    def __contains__(self, license_id: object) -> bool:
        return isinstance(license_id, str) and self.get(license_id) is not None

    def __len__(self) -> int:
        return len(self.licenses)


def _build_license(license_id: Any, item: Mapping[str, Any], where: str) -> License:
    lid = str(license_id).strip() if license_id is not None else ""
    if not lid:
        raise ValueError(f"{where}: license id is required")
    if lid == UNKNOWN_LICENSE:
        raise ValueError(f"{where}: {UNKNOWN_LICENSE!r} is reserved")
    category = str(item.get("category", "") or "").strip()
    if not category:
        raise ValueError(f"{where}: category is required for license {lid!r}")
    return License(id=lid, name=str(item.get("name", "") or lid).strip(), category=category)
