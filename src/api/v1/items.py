from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import DbSession
from src.models.item import Item
from src.schemas import ItemCreate, ItemRead, ItemUpdate, PaginatedResponse
from src.services.exceptions import DuplicateKey

router = APIRouter()


async def _sku_taken(db: AsyncSession, sku: str, exclude_id: uuid.UUID | None = None) -> bool:
    stmt = select(Item.id).where(Item.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Item.id != exclude_id)
    return await db.scalar(stmt) is not None


async def _commit_item(db: AsyncSession, item: Item) -> None:
    """Commit, reporting a SKU claimed concurrently as ``DuplicateKey``."""
    sku = item.sku
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        message = str(e.orig).lower()
        if "unique" not in message and "duplicate" not in message:
            raise
        raise DuplicateKey("sku", sku) from e
    await db.refresh(item)


@router.get("/", response_model=PaginatedResponse[ItemRead])
async def list_items(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ItemRead]:
    """List items with their current stock."""
    total = await db.scalar(select(func.count()).select_from(Item)) or 0

    stmt = select(Item).order_by(Item.name).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(stmt)
    items = result.scalars().all()

    return PaginatedResponse(
        items=[ItemRead.model_validate(i) for i in items],
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size if total > 0 else 0,
    )


@router.get("/search", response_model=list[ItemRead])
async def search_items(
    db: DbSession,
    q: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=50),
) -> list[ItemRead]:
    """Name/SKU lookup for line-item autocomplete."""
    stmt = select(Item)
    if q.strip():
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(or_(Item.name.ilike(pattern), Item.sku.ilike(pattern)))
    stmt = stmt.order_by(Item.name).limit(limit)
    result = await db.execute(stmt)
    return [ItemRead.model_validate(i) for i in result.scalars().all()]


@router.post("/", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(body: ItemCreate, db: DbSession) -> ItemRead:
    """Register an item with its opening stock."""
    if body.sku and await _sku_taken(db, body.sku):
        raise DuplicateKey("sku", body.sku)

    item = Item(**body.model_dump())
    db.add(item)
    await _commit_item(db, item)

    return ItemRead.model_validate(item)


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: uuid.UUID, db: DbSession) -> ItemRead:
    item = await db.get(Item, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemRead.model_validate(item)


@router.patch("/{item_id}", response_model=ItemRead)
async def update_item(item_id: uuid.UUID, body: ItemUpdate, db: DbSession) -> ItemRead:
    """Edit item details. Stock cannot be set here."""
    item = await db.get(Item, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")

    update_data = body.model_dump(exclude_unset=True)
    sku = update_data.get("sku")
    if sku and await _sku_taken(db, sku, exclude_id=item.id):
        raise DuplicateKey("sku", sku)

    for field, value in update_data.items():
        setattr(item, field, value)

    await _commit_item(db, item)

    return ItemRead.model_validate(item)
