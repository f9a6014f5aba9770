"""Application service: Add Product use case."""

from __future__ import annotations

import uuid

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.product import Product
from luzistock.domain.model.value_objects import Money
from luzistock.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        vendor_id: str | None = None,
        category_id: str | None = None,
        product_id: str | None = None,
    ) -> Product:
        """Add a new product to the catalog with its opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if stock < 0:
            raise ValidationError("Stock cannot be negative")

        product_id = product_id or str(uuid.uuid4())
        if self._product_repo.get_by_id(product_id) is not None:
            raise ValidationError(f"Product '{product_id}' already exists")

        product = Product(
            id=product_id,
            name=name.strip(),
            price=Money.of(price),
            stock=stock,
            vendor_id=vendor_id,
            category_id=category_id,
        )
        self._product_repo.save(product)
        return product
