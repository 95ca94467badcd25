"""Raw source record shapes, validated before mapping."""

from typing import Literal

from pydantic import BaseModel, Field


class ProjectRecord(BaseModel):
    """A portfolio project write-up."""

    id: str = Field(min_length=1)
    project_name: str = Field(min_length=1)
    objective: str
    system_architecture: str
    outcome: str
    metrics: dict[str, str] = Field(default_factory=dict)
    tech_stack: list[str] = Field(default_factory=list)
    visual_flow: str | None = None
    status: Literal["production", "development", "research", "archived"]


class BlueprintRecord(BaseModel):
    """An architectural-principle note from the blueprint."""

    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    parent_node: str | None = None
    category: Literal["core", "architecture", "mental", "implementation", "security"]
    description: str
    is_section_header: bool = False
    implementation: str | None = None
    examples: list[str] = Field(default_factory=list)


class InsightRecord(BaseModel):
    """A free-text insight with context keywords."""

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    context_keywords: list[str] = Field(default_factory=list)
    category: Literal["principle", "observation", "methodology", "philosophy"]


class TestimonialRecord(BaseModel):
    """A client testimonial."""

    __test__ = False  # not a pytest test class

    id: str = Field(min_length=1)
    quote: str = Field(min_length=1)
    author: str
    role: str
    company: str
    related_project_id: str | None = None
    related_expertise_id: str | None = None
    category: Literal["project", "expertise", "general"]
    impact: str | None = None
