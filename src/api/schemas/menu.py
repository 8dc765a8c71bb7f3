from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from src.domain import Category, MenuItem


class CategoryItem(BaseModel):
    id: str
    name: str
    description: str = ""
    parent_category: str = ""

    @classmethod
    def from_category(cls, category: Category) -> CategoryItem:
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            parent_category=category.parent_category,
        )


class CategoryNode(CategoryItem):
    subcategories: list[CategoryItem] = Field(default_factory=list)


class CategoryTreeResponse(BaseModel):
    categories: list[CategoryNode]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    description: str = ""
    parent_category: str = Field(default="", max_length=64)


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=64)
    description: str | None = None
    parent_category: str | None = Field(None, max_length=64)

    def changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_none=True)
        if "parent_category" in changes:
            changes["parentCategory"] = changes.pop("parent_category")
        return changes


class MenuItemResponse(BaseModel):
    id: str
    name: str
    price: float
    category: str
    subcategory: str = ""
    description: str = ""
    is_visible: bool = True
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_item(cls, item: MenuItem) -> MenuItemResponse:
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            category=item.category,
            subcategory=item.subcategory,
            description=item.description,
            is_visible=item.is_visible,
            extra=item.extra,
        )


class MenuItemsResponse(BaseModel):
    items: list[MenuItemResponse]


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=64)
    subcategory: str = ""
    description: str = ""
    is_visible: bool = True
    is_vegetarian: bool = False
    is_spicy: bool = False
    image_url: str = ""

    def document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "isVisible": self.is_visible,
            "isVegetarian": self.is_vegetarian,
            "isSpicy": self.is_spicy,
            "image": self.image_url,
        }


class MenuItemUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    price: float | None = Field(None, ge=0)
    category: str | None = None
    subcategory: str | None = None
    description: str | None = None
    is_visible: bool | None = None

    def changes(self) -> dict[str, Any]:
        renamed = {"is_visible": "isVisible"}
        return {
            renamed.get(field, field): value
            for field, value in self.model_dump(exclude_none=True).items()
        }
