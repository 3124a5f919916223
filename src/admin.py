from __future__ import annotations

import hmac

from fastapi import FastAPI
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.requests import Request

from src.core.config import settings
from src.models import Item, SalesOrder


class AdminAuth(AuthenticationBackend):
    """Single back-office account taken from settings."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = str(form.get("username", ""))
        password = str(form.get("password", ""))
        valid = hmac.compare_digest(username, settings.admin_username) and hmac.compare_digest(
            password, settings.admin_password
        )
        if valid:
            request.session.update({"admin": username})
        return valid

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return "admin" in request.session


class ItemAdmin(ModelView, model=Item):
    name = "Item"
    name_plural = "Items"
    icon = "fa-solid fa-box"
    column_list = [Item.name, Item.sku, Item.unit, Item.price, Item.stock, Item.updated_at]
    column_searchable_list = [Item.name, Item.sku]
    column_sortable_list = [Item.name, Item.stock, Item.updated_at]
    form_excluded_columns = [Item.created_at, Item.updated_at]
    # Opening stock is set on create; afterwards only orders move it
    form_edit_rules = ["name", "sku", "type", "unit", "price"]


class SalesOrderAdmin(ModelView, model=SalesOrder):
    name = "Sales Order"
    name_plural = "Sales Orders"
    icon = "fa-solid fa-file-invoice"
    can_create = False
    can_edit = False
    can_delete = False
    column_list = [
        SalesOrder.sales_order_no,
        SalesOrder.reference_no,
        SalesOrder.status,
        SalesOrder.fulfillment_status,
        SalesOrder.confirmed_at,
        SalesOrder.created_at,
    ]
    column_searchable_list = [SalesOrder.sales_order_no, SalesOrder.reference_no]
    column_sortable_list = [SalesOrder.created_at, SalesOrder.status]


def mount_admin(app: FastAPI, engine: AsyncEngine) -> Admin:
    admin = Admin(
        app,
        engine,
        title="Salesdesk Admin",
        authentication_backend=AdminAuth(secret_key=settings.app_secret_key),
    )
    admin.add_view(ItemAdmin)
    admin.add_view(SalesOrderAdmin)
    return admin
