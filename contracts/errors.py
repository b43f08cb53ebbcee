from __future__ import annotations

from typing import Any, Mapping


class InspectorError(Exception):
    code = "inspector_error"

    def __init__(self, message: str, *, code: str | None = None, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.context = dict(context or {})

    def as_log_fields(self) -> dict[str, Any]:
        return {
            "error_code": self.code,
            "error_message": self.message,
            "error_context": self.context,
        }


class ConfigLoadError(InspectorError):
    code = "config_load_error"


class DetectionError(InspectorError):
    code = "detection_error"


class DetectionTimeout(DetectionError):
    code = "detection_timeout"
