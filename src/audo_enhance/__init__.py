"""Public package exports for Audo_Enhance with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "AnalysisResult",
    "SpectralProfile",
    "Tag",
    "RenderPlan",
    "synthesize_render_plan",
    "LoudnessNormalizer",
    "EnhancementRequest",
    "EnhancementJobService",
    "RequestValidationError",
    "validate_enhancement_request",
    "build_job_service",
]

_EXPORT_MODULES: dict[str, str] = {
    "AnalysisResult": "audo_enhance.analysis",
    "SpectralProfile": "audo_enhance.analysis",
    "Tag": "audo_enhance.analysis",
    "RenderPlan": "audo_enhance.synthesis",
    "synthesize_render_plan": "audo_enhance.synthesis",
    "LoudnessNormalizer": "audo_enhance.normalization",
    "EnhancementRequest": "audo_enhance.domain.models",
    "EnhancementJobService": "audo_enhance.application.job_service",
    "RequestValidationError": "audo_enhance.request_validation",
    "validate_enhancement_request": "audo_enhance.request_validation",
    "build_job_service": "audo_enhance.bootstrap",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'audo_enhance' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
