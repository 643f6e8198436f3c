"""Request/Response models for API endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request model for chat endpoints."""

    message: str = Field(..., min_length=1, description="User's question")
    messages: list[dict[str, Any]] = Field(
        default_factory=list, description="Earlier messages of the conversation"
    )
    user: Optional[dict[str, Any]] = Field(None, description="Signed-in user profile")
    clinic: Optional[dict[str, Any]] = Field(None, description="Current clinic")
    subscription: Optional[dict[str, Any]] = Field(None, description="Current subscription plan")


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    response: str | None = Field(None, description="Answer text including annotations")
    cancelled: bool = Field(False, description="True when the run was aborted")
    phases: list[str] = Field(default_factory=list, description="Phases the run went through")


class HealthResponse(BaseModel):
    """Response model for health endpoint."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
