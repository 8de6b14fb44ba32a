"""
Command Schemas

Pydantic models for setup-script generation.
"""

import uuid
from typing import Annotated

from pydantic import BaseModel, Field


class GenerateCommandRequest(BaseModel):
    """Schema for a command generation request."""

    project_name: str = Field(..., pattern=r"^[A-Za-z0-9_-]{1,100}$", description="Directory name for the project")
    project_category: str = Field(..., min_length=1, max_length=100)
    package_manager_id: uuid.UUID
    selected_option_ids: list[uuid.UUID] = Field(default_factory=list)
    custom_options: list[Annotated[str, Field(min_length=1, max_length=200)]] = Field(
        default_factory=list,
        max_length=10,
        description="Extra shell commands, appended verbatim after placeholder substitution",
    )

    model_config = {"str_strip_whitespace": True}


class PackageManagerSummary(BaseModel):
    name: str
    display_name: str


class GenerationMetadata(BaseModel):
    project_name: str
    project_category: str
    package_manager: PackageManagerSummary
    options_used: int
    custom_options_used: int
    generation_time_ms: int


class GenerateCommandResponse(BaseModel):
    message: str
    generation_id: uuid.UUID
    command_text: str
    project_structure: list[str]
    metadata: GenerationMetadata
