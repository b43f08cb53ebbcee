from __future__ import annotations

import unittest

from license_catalog import License, LicenseCatalog


class TestLicenseCatalog(unittest.TestCase):
    def test_from_list_document(self) -> None:
        catalog = LicenseCatalog.from_mapping(
            {
                "licenses": [
                    {"id": "MIT", "name": "MIT License", "category": "permissive"},
                    {"id": "GPL-3.0", "name": "GNU GPL v3", "category": "copyleft"},
                ]
            }
        )
        self.assertEqual(2, len(catalog))
        self.assertEqual(License("MIT", "MIT License", "permissive"), catalog.get("MIT"))
        self.assertEqual("copyleft", catalog.category_of("GPL-3.0"))
        self.assertEqual(("GPL-3.0", "MIT"), catalog.ids())

    def test_from_plain_mapping(self) -> None:
        catalog = LicenseCatalog.from_mapping({"Apache-2.0": {"category": "permissive"}})
        lic = catalog.get("Apache-2.0")
        self.assertIsNotNone(lic)
        self.assertEqual("Apache-2.0", lic.name)

    def test_lookup_falls_back_to_case_insensitive(self) -> None:
        catalog = LicenseCatalog.from_licenses([License("MIT", category="permissive")])
        self.assertIn("MIT", catalog)
        self.assertIn("mit", catalog)
        self.assertEqual("permissive", catalog.category_of("mit"))

    def test_unknown_sentinel_is_never_present(self) -> None:
        catalog = LicenseCatalog.from_licenses([License("MIT", category="permissive")])
        self.assertNotIn("unknown", catalog)
        self.assertIsNone(catalog.get(None))
        self.assertIsNone(catalog.category_of("BSD-3-Clause"))
        with self.assertRaises(ValueError):
            LicenseCatalog.from_mapping({"unknown": {"category": "permissive"}})

    def test_rejects_malformed_entries(self) -> None:
        with self.assertRaises(ValueError):
            LicenseCatalog.from_mapping({"licenses": [{"name": "no id", "category": "permissive"}]})
        with self.assertRaises(ValueError):
            LicenseCatalog.from_mapping({"licenses": [{"id": "MIT"}]})
        with self.assertRaises(ValueError):
            LicenseCatalog.from_mapping({"licenses": [{"id": "MIT", "category": "a"}, {"id": "mit", "category": "b"}]})
        with self.assertRaises(ValueError):
            LicenseCatalog.from_mapping(["MIT"])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
