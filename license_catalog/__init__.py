from .catalog import License, LicenseCatalog

__all__ = ["License", "LicenseCatalog"]
