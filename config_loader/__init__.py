from .loader import (
    catalog_from_document,
    load_catalog,
    load_json,
    load_packages,
    load_policy_table,
    packages_from_document,
    policy_from_document,
)

__all__ = [
    "catalog_from_document",
    "load_catalog",
    "load_json",
    "load_packages",
    "load_policy_table",
    "packages_from_document",
    "policy_from_document",
]
