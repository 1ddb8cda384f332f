from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Schema for error responses"""
    detail: str = Field(..., description="Error message")
    status_code: int = Field(..., description="HTTP status code")
