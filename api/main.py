from __future__ import annotations

import os
import uuid
from typing import Any, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from pydantic import BaseModel, Field

from config_loader import catalog_from_document, packages_from_document, policy_from_document
from contracts.errors import ConfigLoadError
from enrichment import DeclaredLicenseDetector
from orchestrator import PipelineOptions, run_pipeline


class EvaluateOptions(BaseModel):
    workers: int = Field(default=4, ge=1, le=64)
    timeout: Optional[float] = Field(default=None, gt=0)
    fail_on_error: Optional[bool] = None


class EvaluateRequest(BaseModel):
    catalog: dict[str, Any] = Field(default_factory=dict)
    policy: dict[str, Any] = Field(default_factory=dict)
    packages: list[dict[str, Any]] = Field(default_factory=list)
    options: EvaluateOptions = Field(default_factory=EvaluateOptions)


app = FastAPI(title="License Inspector API", version="0.1.0")


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["x-request-id"] = rid
    return response


def _require_api_key(x_api_key: Optional[str]) -> None:
    required = os.getenv("LICENSE_INSPECTOR_API_KEY", "")
    if not required:
        # no key set => auth disabled (dev-friendly)
        return
    if not x_api_key or x_api_key != required:
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/v1/evaluate")
def evaluate(request: Request, req: EvaluateRequest, x_api_key: Optional[str] = Header(default=None)) -> dict[str, Any]:
    _require_api_key(x_api_key)

    try:
        catalog = catalog_from_document(req.catalog, "catalog")
        policies = policy_from_document(req.policy, "policy")
        packages, declared = packages_from_document(req.packages, "packages")
    except ConfigLoadError as e:
        raise HTTPException(status_code=422, detail=e.message) from e

    options = PipelineOptions(
        max_workers=req.options.workers,
        detector_timeout=req.options.timeout,
        fail_on_error=req.options.fail_on_error,
    )
    result = run_pipeline(packages, DeclaredLicenseDetector(declared), policies, catalog, options)

    return {
        "request_id": getattr(request.state, "request_id", None),
        **result.to_dict(),
        "exit_code": result.exit_code(),
    }
