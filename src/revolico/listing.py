"""Listing view-model: pure functions from a document to what the UI shows."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import BaseModel

from .models import Business, CatalogDocument, DeliveryType, Product, parse_marker

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ListingRow(BaseModel):
    """A product flattened together with the business that sells it."""

    product: Product
    business_id: int
    business_name: str
    business_address: str


class OrderQuote(BaseModel):
    """Price breakdown shown before an order is submitted."""

    business: Business
    products: list[Product]
    subtotal: float
    delivery_fee: float
    total: float


def list_products(
    document: CatalogDocument,
    search: str = "",
    category: str = "",
    newest_first: bool = True,
) -> list[ListingRow]:
    """Flatten, filter and sort every product in the catalog.

    Args:
        document: Catalog to list.
        search: Case-insensitive substring of name or description.
        category: Exact category, empty for all.
        newest_first: Sort by publish time, newest first (else oldest first).
    """
    needle = search.strip().lower()
    rows = [
        ListingRow(
            product=product,
            business_id=business.id,
            business_name=business.name,
            business_address=business.address,
        )
        for business in document.businesses
        for product in business.products
        if (
            not needle
            or needle in product.name.lower()
            or needle in product.description.lower()
        )
        and (not category or product.category == category)
    ]
    rows.sort(
        key=lambda row: parse_marker(row.product.published_at) or _EPOCH,
        reverse=newest_first,
    )
    return rows


def categories(document: CatalogDocument) -> list[str]:
    """Distinct product categories in first-seen order."""
    seen: dict[str, None] = {}
    for business in document.businesses:
        for product in business.products:
            if product.category:
                seen.setdefault(product.category, None)
    return list(seen)


def order_quote(
    document: CatalogDocument,
    business_id: int,
    product_ids: Iterable[int],
    delivery_type: DeliveryType = DeliveryType.PICKUP,
) -> Optional[OrderQuote]:
    """Price an order. Delivery fee applies to home delivery only.

    Returns:
        The quote, or None if the business or a product is unknown.
    """
    business = document.find_business(business_id)
    if business is None:
        return None

    products = []
    for pid in product_ids:
        product = business.find_product(pid)
        if product is None:
            return None
        products.append(product)

    subtotal = sum(p.price for p in products)
    fee = business.delivery_fee if DeliveryType(delivery_type) == DeliveryType.DELIVERY else 0.0
    return OrderQuote(
        business=business,
        products=products,
        subtotal=subtotal,
        delivery_fee=fee,
        total=subtotal + fee,
    )
