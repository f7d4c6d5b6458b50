"""Normalization API endpoints - repair and validate LLM-generated workflows."""
from functools import lru_cache
from typing import Any, Optional

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from flowfix.errors import NormalizerError
from flowfix.n8n.extraction import extract_json
from flowfix.n8n.normalizer import WorkflowNormalizer
from flowfix.n8n.validator import validate_workflow

logger = structlog.get_logger()

router = APIRouter()


@lru_cache
def get_normalizer() -> WorkflowNormalizer:
    """Shared normalizer built from application settings."""
    return WorkflowNormalizer.from_settings()


class NormalizeRequest(BaseModel):
    """Request body for workflow normalization."""

    workflow: Optional[Any] = Field(
        None,
        description="Parsed candidate workflow JSON",
    )
    text: Optional[str] = Field(
        None,
        description="Raw LLM reply containing the workflow JSON",
        max_length=500_000,
    )

    @model_validator(mode="after")
    def require_one_source(self):
        """Exactly one of workflow/text must be provided."""
        if (self.workflow is None) == (self.text is None):
            raise ValueError("Provide exactly one of 'workflow' or 'text'")
        return self


class NormalizeResponse(BaseModel):
    """Response body for workflow normalization."""

    workflow: dict
    repairs: list[str]
    node_count: int
    connection_count: int


class ValidateRequest(BaseModel):
    """Request body for workflow validation."""

    workflow: dict = Field(..., description="n8n workflow JSON to check")


class ValidateResponse(BaseModel):
    """Response body for workflow validation."""

    valid: bool
    errors: list[str]


@router.post("/normalize", response_model=NormalizeResponse)
async def normalize_workflow(request: NormalizeRequest) -> NormalizeResponse:
    """
    Repair a candidate workflow into importable n8n JSON.

    Repairs applied:
    - Missing or duplicate node ids and names
    - Missing, unqualified or legacy node types
    - Zero or several trigger nodes
    - Connections to unknown nodes and unreachable nodes
    - Overlapping node positions
    """
    logger.info(
        "normalize_request",
        source="text" if request.text is not None else "workflow",
    )

    try:
        candidate = extract_json(request.text) if request.text is not None else request.workflow
        report = get_normalizer().repair_with_report(candidate)
    except NormalizerError as e:
        logger.warning("normalize_rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("normalize_error", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    workflow = report.workflow.to_n8n()
    logger.info(
        "normalize_success",
        node_count=len(report.workflow.nodes),
        repair_count=len(report.repairs),
    )

    return NormalizeResponse(
        workflow=workflow,
        repairs=report.repairs,
        node_count=len(report.workflow.nodes),
        connection_count=sum(
            len(outputs.targets()) for outputs in report.workflow.connections.values()
        ),
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate(request: ValidateRequest) -> ValidateResponse:
    """Check a workflow against the normalized-graph invariants without changing it."""
    errors = validate_workflow(request.workflow, get_normalizer().rules)
    logger.info("validate_request", valid=not errors, error_count=len(errors))
    return ValidateResponse(valid=not errors, errors=errors)
