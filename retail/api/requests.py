"""
Pydantic models for API requests.
These define the contract between the API and external clients.
"""

from typing import Optional
from pydantic import BaseModel

# CreateTransactionRequest lives in retail/domain.py because the use case
# consumes it directly.


class UpdateStatusRequest(BaseModel):
    """Request model for overwriting a transaction's status."""

    status: Optional[str] = None
