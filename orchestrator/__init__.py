from .pipeline import (
    EXIT_CONFIG_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_VIOLATION,
    PipelineOptions,
    PipelineResult,
    process_package,
    run_pipeline,
)

__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_INTERRUPTED",
    "EXIT_OK",
    "EXIT_VIOLATION",
    "PipelineOptions",
    "PipelineResult",
    "process_package",
    "run_pipeline",
]
