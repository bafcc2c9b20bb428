import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.database import commit_or_fail
from app.core.exceptions import StoreFailureError
from app.services.order_service import OrderService


@pytest.mark.asyncio
async def test_commit_or_fail_commits():
    mock_session = AsyncMock()

    await commit_or_fail(mock_session, "create order")

    mock_session.commit.assert_awaited_once()
    mock_session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_commit_or_fail_wraps_store_errors():
    """The driver message stays in the log and the exception chain, never in the detail."""
    mock_session = AsyncMock()
    cause = IntegrityError("INSERT INTO orders ...", {}, Exception("duplicate key secret_constraint"))
    mock_session.commit.side_effect = cause

    with pytest.raises(StoreFailureError) as exc_info:
        await commit_or_fail(mock_session, "create order")

    mock_session.rollback.assert_awaited_once()
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Internal error while trying to create order."
    assert "secret_constraint" not in exc_info.value.detail
    assert exc_info.value.__cause__ is cause


@pytest.mark.asyncio
async def test_unhandled_store_error_returns_generic_500(client, monkeypatch):
    failing = AsyncMock(side_effect=OperationalError("SELECT ...", {}, Exception("connection reset by peer")))
    monkeypatch.setattr(OrderService, "list_orders", failing)

    response = await client.get("/api/orders")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal error while accessing the data store."}
    assert "connection reset" not in response.text
