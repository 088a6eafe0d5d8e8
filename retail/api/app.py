"""
FastAPI application for retail transactions.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from retail.api.dependencies import (
    get_container,
    get_create_transaction_use_case,
    get_delete_transaction_use_case,
    get_get_transactions_use_case,
    get_update_status_use_case,
)
from retail.api.requests import UpdateStatusRequest
from retail.api.responses import (
    CreateTransactionResponse,
    HealthCheckResponse,
    MessageResponse,
)
from retail.domain import CreateTransactionRequest, Transaction
from retail.errors import (
    InsufficientStock,
    InvalidRequest,
    NotFound,
    StockConflict,
    StorageFailure,
    TransactionError,
)
from retail.usecase import (
    CreateTransactionUseCase,
    DeleteTransactionUseCase,
    GetTransactionsUseCase,
    UpdateTransactionStatusUseCase,
)


def setup_logging() -> None:
    """Configure logging based on environment variables"""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_format = os.environ.get(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Validate log level
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {log_level}, defaulting to INFO")
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        force=True,  # Override any existing configuration
    )


# Setup logging when module is imported
setup_logging()
logger = logging.getLogger(__name__)

STATUS_CODES = {
    InvalidRequest: 400,
    InsufficientStock: 400,
    NotFound: 404,
    StockConflict: 409,
    StorageFailure: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await get_container().close()


app = FastAPI(title="Retail Transactions API", lifespan=lifespan)


@app.exception_handler(TransactionError)
async def transaction_error_handler(
    request: Request, exc: TransactionError
) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 500)
    # StorageFailure messages are generic; the underlying fault was logged
    # where it was caught.
    if status_code < 500:
        logger.info(
            "Request rejected",
            extra={
                "path": request.url.path,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )
    return JSONResponse(status_code=status_code, content={"message": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid request",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint"""
    logger.debug("Health check requested")
    return HealthCheckResponse(status="ok", version="1.0.0")


@app.post(
    "/transactions",
    response_model=CreateTransactionResponse,
    status_code=201,
)
async def create_transaction(
    request: CreateTransactionRequest,
    use_case: CreateTransactionUseCase = Depends(
        get_create_transaction_use_case
    ),
) -> CreateTransactionResponse:
    """
    Create a pending transaction for a customer's item list.
    Stock is decremented in the same database transaction.
    """
    logger.info(
        "Transaction creation requested",
        extra={
            "customer_id": request.customer_id,
            "item_count": len(request.items or []),
        },
    )

    try:
        transaction_id = await use_case.create_transaction(request)
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to create transaction",
            extra={
                "customer_id": request.customer_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        # Return a generic error message to prevent information leakage
        raise StorageFailure(
            "An error occurred while creating the transaction"
        ) from e

    return CreateTransactionResponse(
        message="Transaction created successfully",
        transaction_id=transaction_id,
    )


@app.get("/transactions", response_model=List[Transaction])
async def list_transactions(
    use_case: GetTransactionsUseCase = Depends(get_get_transactions_use_case),
) -> List[Transaction]:
    """List every transaction; an empty store yields an empty list."""
    try:
        return await use_case.list_transactions()
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to list transactions",
            extra={"error_type": type(e).__name__, "error_message": str(e)},
            exc_info=True,
        )
        raise StorageFailure(
            "An error occurred while retrieving transactions"
        ) from e


@app.get("/transactions/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: int,
    use_case: GetTransactionsUseCase = Depends(get_get_transactions_use_case),
) -> Transaction:
    logger.debug(
        "Getting transaction", extra={"transaction_id": transaction_id}
    )

    try:
        return await use_case.get_transaction(transaction_id)
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to get transaction",
            extra={
                "transaction_id": transaction_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        raise StorageFailure(
            "An error occurred while retrieving the transaction"
        ) from e


@app.get(
    "/customers/{customer_id}/transactions",
    response_model=List[Transaction],
)
async def get_customer_transactions(
    customer_id: str,
    use_case: GetTransactionsUseCase = Depends(get_get_transactions_use_case),
) -> List[Transaction]:
    """All transactions of one customer, oldest first."""
    logger.debug(
        "Getting customer transactions", extra={"customer_id": customer_id}
    )

    try:
        return await use_case.get_transactions_by_customer(customer_id)
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to get customer transactions",
            extra={
                "customer_id": customer_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        raise StorageFailure(
            "An error occurred while retrieving customer transactions"
        ) from e


@app.put(
    "/transactions/{transaction_id}/status", response_model=MessageResponse
)
async def update_transaction_status(
    transaction_id: int,
    request: UpdateStatusRequest,
    use_case: UpdateTransactionStatusUseCase = Depends(
        get_update_status_use_case
    ),
) -> MessageResponse:
    logger.info(
        "Transaction status update requested",
        extra={"transaction_id": transaction_id, "status": request.status},
    )

    try:
        await use_case.update_status(transaction_id, request.status)
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to update transaction status",
            extra={
                "transaction_id": transaction_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        raise StorageFailure(
            "An error occurred while updating the transaction status"
        ) from e

    return MessageResponse(message="Transaction status updated successfully")


@app.delete("/transactions/{transaction_id}", response_model=MessageResponse)
async def delete_transaction(
    transaction_id: int,
    use_case: DeleteTransactionUseCase = Depends(
        get_delete_transaction_use_case
    ),
) -> MessageResponse:
    logger.info(
        "Transaction deletion requested",
        extra={"transaction_id": transaction_id},
    )

    try:
        await use_case.delete_transaction(transaction_id)
    except TransactionError:
        raise
    except Exception as e:
        logger.error(
            "Failed to delete transaction",
            extra={
                "transaction_id": transaction_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        raise StorageFailure(
            "An error occurred while deleting the transaction"
        ) from e

    return MessageResponse(message="Transaction deleted successfully")
