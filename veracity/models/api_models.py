"""
API Models — request bodies for the HTTP surface.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ValidateRequest(BaseModel):
    text: str = Field(..., description="Response text to validate; may be empty")
    context_label: str = Field(default="AI Response", description="Label recorded with the run")


class TextRequest(BaseModel):
    text: str


class ToggleRequest(BaseModel):
    enabled: bool


class OverrideRequest(BaseModel):
    justification: str | None = None
