"""
Pydantic models for API responses.
These define the contract between the API and external clients.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Response carrying only a human-readable message"""

    message: str


class CreateTransactionResponse(BaseModel):
    """Response for transaction creation"""

    message: str
    transaction_id: int


class HealthCheckResponse(BaseModel):
    status: str
    version: str
