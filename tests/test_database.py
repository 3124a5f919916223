import contextlib
from unittest.mock import AsyncMock, patch

import pytest

from src.core.database import get_db, transaction


@pytest.mark.asyncio
async def test_get_db_success() -> None:
    mock_session = AsyncMock()

    with patch("src.core.database.async_session_factory") as mock_factory:
        mock_factory.return_value.__aenter__.return_value = mock_session

        gen = get_db()
        session = await anext(gen)

        assert session == mock_session

        # Generator closing simulates successful yielded context exit
        with contextlib.suppress(StopAsyncIteration):
            await anext(gen)

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_called()


@pytest.mark.asyncio
async def test_get_db_exception() -> None:
    mock_session = AsyncMock()

    with patch("src.core.database.async_session_factory") as mock_factory:
        mock_factory.return_value.__aenter__.return_value = mock_session

        gen = get_db()
        await anext(gen)

        # Inject an exception into the generator to simulate error in route
        with pytest.raises(ValueError):
            await gen.athrow(ValueError("Test exception"))

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_transaction_commits() -> None:
    mock_session = AsyncMock()

    async with transaction(mock_session) as session:
        assert session is mock_session

    mock_session.commit.assert_awaited_once()
    mock_session.rollback.assert_not_called()


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error() -> None:
    mock_session = AsyncMock()

    with pytest.raises(RuntimeError):
        async with transaction(mock_session):
            raise RuntimeError("boom")

    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_not_called()
