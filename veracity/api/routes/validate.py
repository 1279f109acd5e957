"""
Validation Routes — POST /validate, POST /validate/minimal, POST /tech-debt

Validation never fails at the HTTP level: a pipeline failure comes back as a
200 with is_valid False and a failure banner in validated_text.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from veracity.api.dependencies import get_pipeline
from veracity.engine.pipeline import ValidationPipeline
from veracity.models.api_models import TextRequest, ValidateRequest
from veracity.models.validation_models import PipelineStats, ScanReport, ValidationResult
from veracity.scanners.tech_debt import evaluate_tech_debt

logger = logging.getLogger("veracity.api.validate")

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
async def validate(
    request: ValidateRequest,
    pipeline: ValidationPipeline = Depends(get_pipeline),
):
    return await pipeline.validate(request.text, request.context_label)


@router.post("/validate/minimal", response_model=ValidationResult)
async def validate_minimal(
    request: TextRequest,
    pipeline: ValidationPipeline = Depends(get_pipeline),
):
    return await pipeline.validate_minimal(request.text)


@router.get("/validate/stats", response_model=PipelineStats)
async def validation_stats(pipeline: ValidationPipeline = Depends(get_pipeline)):
    return pipeline.get_stats()


@router.post("/tech-debt", response_model=ScanReport)
async def tech_debt(request: TextRequest):
    report = evaluate_tech_debt(request.text)
    logger.info(f"Tech debt: {len(report.errors)} errors, {len(report.warnings)} warnings")
    return report
