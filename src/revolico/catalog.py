"""
Catalog operations -- register businesses, add products, take orders.

Each operation edits a working copy of the cached document and pushes
the whole thing through the write gateway. When the push fails the
edit is still kept in the local cache (with its old change marker),
so the caller can carry on with a local-only copy.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .context import ClientContext
from .gateway import WriteGateway
from .models import (
    Business,
    CatalogDocument,
    DeliveryType,
    Order,
    Product,
    next_id,
    utc_now_iso,
)

logger = logging.getLogger("revolico.catalog")


def _commit(ctx: ClientContext, gateway: WriteGateway, document: CatalogDocument) -> bool:
    if gateway.write(document):
        return True
    with ctx.lock:
        ctx.document = document
    logger.warning("Change kept locally only")
    return False


def register_business(
    ctx: ClientContext,
    gateway: WriteGateway,
    name: str,
    address: str,
    delivery_fee: float = 0.0,
) -> tuple[Business, bool]:
    """Add a business with no products.

    Returns:
        The new business and whether the store accepted the write.
    """
    document = ctx.working_copy()
    business = Business(
        id=next_id(b.id for b in document.businesses),
        name=name,
        address=address,
        delivery_fee=delivery_fee or 0.0,
        created_at=utc_now_iso(),
    )
    document.businesses.append(business)
    logger.info("Registering business %s (%d)", business.name, business.id)
    return business, _commit(ctx, gateway, document)


def add_product(
    ctx: ClientContext,
    gateway: WriteGateway,
    business_id: int,
    name: str,
    price: float,
    stock: int = 0,
    category: str = "",
    description: str = "",
    on_offer: bool = False,
) -> tuple[Product, bool]:
    """Add a product to an existing business.

    Raises:
        LookupError: If the business is not in the cached document.
    """
    document = ctx.working_copy()
    business = document.find_business(business_id)
    if business is None:
        raise LookupError(f"No business with id {business_id}")

    product = Product(
        id=next_id(p.id for p in business.products),
        name=name,
        description=description,
        price=price,
        stock=stock,
        category=category,
        on_offer=on_offer,
        published_at=utc_now_iso(),
    )
    business.products.append(product)
    logger.info("Adding product %s to business %d", product.name, business_id)
    return product, _commit(ctx, gateway, document)


def submit_order(
    ctx: ClientContext,
    gateway: WriteGateway,
    business_id: int,
    product_ids: Iterable[int],
    delivery_type: DeliveryType = DeliveryType.PICKUP,
    contact_email: str = "",
    delivery_address: Optional[str] = None,
    notes: str = "",
) -> tuple[Order, bool]:
    """Append an order to the document.

    The delivery address is only kept for home delivery.

    Raises:
        LookupError: If the business or any product is unknown.
    """
    document = ctx.working_copy()
    business = document.find_business(business_id)
    if business is None:
        raise LookupError(f"No business with id {business_id}")

    ids = list(product_ids)
    missing = [pid for pid in ids if business.find_product(pid) is None]
    if missing:
        raise LookupError(f"Unknown products for business {business_id}: {missing}")

    delivery_type = DeliveryType(delivery_type)
    order = Order(
        id=next_id(o.id for o in document.orders),
        business_id=business_id,
        product_ids=ids,
        delivery_type=delivery_type.value,
        delivery_address=delivery_address if delivery_type == DeliveryType.DELIVERY else None,
        contact_email=contact_email,
        notes=notes,
        created_at=utc_now_iso(),
    )
    document.orders.append(order)
    logger.info("Order %d for business %d (%d products)", order.id, business_id, len(ids))
    return order, _commit(ctx, gateway, document)
