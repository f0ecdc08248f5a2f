"""Models and constants shared by every API router."""

from pydantic import BaseModel, Field

API_VERSION = "0.1.0"


class ErrorResponse(BaseModel):
    """Body FastAPI returns for an HTTPException."""

    detail: str = Field(..., description="Why the request was rejected")
