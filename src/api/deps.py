from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.redis import get_redis
from src.core.security import throttle_writes

DbSession = Annotated[AsyncSession, Depends(get_db)]

# Re-export for convenient imports
__all__ = ["DbSession", "get_db", "get_redis", "throttle_writes"]
