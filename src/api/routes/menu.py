"""Menu routes - public browsing and admin catalog management."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from src.api.deps import get_catalog_service, require_roles
from src.api.schemas.menu import (
    CategoryCreate,
    CategoryItem,
    CategoryNode,
    CategoryTreeResponse,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemsResponse,
    MenuItemUpdate,
)
from src.core.auth import Role
from src.domain import Principal
from src.domain.errors import CatalogError, CatalogNotFoundError
from src.domain.services.catalog import CatalogService

router = APIRouter(prefix="/menu", tags=["menu"])
admin_only = require_roles([Role.ADMIN])


def _catalog_http_error(exc: CatalogError) -> HTTPException:
    if isinstance(exc, CatalogNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/categories", response_model=CategoryTreeResponse, summary="Category tree")
async def list_categories(
    service: CatalogService = Depends(get_catalog_service),
) -> CategoryTreeResponse:
    tree = await service.category_tree()
    return CategoryTreeResponse(
        categories=[
            CategoryNode(
                **CategoryItem.from_category(parent).model_dump(),
                subcategories=[CategoryItem.from_category(child) for child in children],
            )
            for parent, children in tree
        ]
    )


@router.post(
    "/categories",
    response_model=CategoryItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    payload: CategoryCreate,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> CategoryItem:
    try:
        category = await service.create_category(
            name=payload.name,
            description=payload.description,
            parent_category=payload.parent_category,
        )
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc
    return CategoryItem.from_category(category)


@router.patch("/categories/{category_id}", response_model=CategoryItem)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> CategoryItem:
    try:
        category = await service.update_category(category_id, payload.changes())
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc
    return CategoryItem.from_category(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> None:
    try:
        await service.delete_category(category_id)
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc


@router.get("/items", response_model=MenuItemsResponse, summary="Browse the menu")
async def list_items(
    category: str | None = Query(None),
    subcategory: str | None = Query(None),
    search: str | None = Query(None, max_length=100),
    service: CatalogService = Depends(get_catalog_service),
) -> MenuItemsResponse:
    items = await service.list_items(category=category, subcategory=subcategory, search=search)
    return MenuItemsResponse(items=[MenuItemResponse.from_item(item) for item in items])


@router.post("/items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: MenuItemCreate,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> MenuItemResponse:
    item = await service.create_item(payload.document())
    return MenuItemResponse.from_item(item)


@router.patch("/items/{item_id}", response_model=MenuItemResponse)
async def update_item(
    item_id: str,
    payload: MenuItemUpdate,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> MenuItemResponse:
    try:
        item = await service.update_item(item_id, payload.changes())
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc
    return MenuItemResponse.from_item(item)


@router.post("/items/{item_id}/toggle-visibility", response_model=MenuItemResponse)
async def toggle_item_visibility(
    item_id: str,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> MenuItemResponse:
    try:
        item = await service.toggle_visibility(item_id)
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc
    return MenuItemResponse.from_item(item)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    service: CatalogService = Depends(get_catalog_service),
    _: Principal = Depends(admin_only),
) -> None:
    try:
        await service.delete_item(item_id)
    except CatalogError as exc:
        raise _catalog_http_error(exc) from exc
