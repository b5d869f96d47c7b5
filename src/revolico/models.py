"""
Pydantic models for the Catalog Document and everything inside it.

The whole marketplace is one JSON object living in a Gist. These
models decode it leniently (missing lists become empty, documents
written by the first Spanish-keyed client still load) and always
encode it back with the English camelCase keys.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import DecodeError

# Keys written by the original client. Read, never written.
LEGACY_KEYS = {"ultimaActualizacion", "negocios", "pedidos"}


def _wire(name: str, *legacy: str) -> dict[str, Any]:
    """Field kwargs accepting ``name`` or any legacy key, dumping as ``name``."""
    return {
        "validation_alias": AliasChoices(name, *legacy),
        "serialization_alias": name,
    }


def _empty_if_none(value: Any) -> Any:
    return [] if value is None else value


def _zero_if_none(value: Any) -> Any:
    return 0 if value is None else value


class DeliveryType(str, Enum):
    """How an order reaches the customer."""

    PICKUP = "pickup"
    DELIVERY = "delivery"


# Anything other than these reads as pickup, as in the first client.
_DELIVERY_VALUES = {
    "delivery": DeliveryType.DELIVERY.value,
    "domicilio": DeliveryType.DELIVERY.value,
}


class WireModel(BaseModel):
    """Base for document entities: populate by field name or wire key."""

    model_config = ConfigDict(populate_by_name=True)


class Product(WireModel):
    """A product listed by a business."""

    id: int
    name: str = Field(default="", **_wire("name", "nombre"))
    description: str = Field(default="", **_wire("description", "descripcion"))
    price: float = Field(default=0.0, **_wire("price", "precio"))
    stock: int = 0
    category: str = Field(default="", **_wire("category", "categoria"))
    on_offer: bool = Field(default=False, **_wire("onOffer", "esOferta"))
    published_at: Optional[str] = Field(
        default=None, **_wire("publishedAt", "fechaPublicacion")
    )

    # Empty form fields reach the document as null.
    @field_validator("price", "stock", mode="before")
    @classmethod
    def _normalize_numbers(cls, value: Any) -> Any:
        return _zero_if_none(value)


class Business(WireModel):
    """A seller and its product list."""

    id: int
    name: str = Field(default="", **_wire("name", "nombre"))
    address: str = Field(default="", **_wire("address", "direccion"))
    delivery_fee: float = Field(
        default=0.0, **_wire("deliveryFee", "precioDomicilio")
    )
    created_at: Optional[str] = Field(
        default=None, **_wire("createdAt", "fechaCreacion")
    )
    products: list[Product] = Field(
        default_factory=list, **_wire("products", "productos")
    )

    @field_validator("products", mode="before")
    @classmethod
    def _normalize_products(cls, value: Any) -> Any:
        return _empty_if_none(value)

    @field_validator("delivery_fee", mode="before")
    @classmethod
    def _normalize_fee(cls, value: Any) -> Any:
        return _zero_if_none(value)

    def find_product(self, product_id: int) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)


class Order(WireModel):
    """A customer order. Append-only from the client's point of view."""

    id: int
    business_id: Optional[int] = Field(
        default=None, **_wire("businessId", "negocioId")
    )
    product_ids: list[int] = Field(
        default_factory=list, **_wire("productIds", "productosIds")
    )
    delivery_type: str = Field(
        default=DeliveryType.PICKUP.value, **_wire("deliveryType", "tipoEntrega")
    )
    delivery_address: Optional[str] = Field(
        default=None, **_wire("deliveryAddress", "direccionEntrega")
    )
    contact_email: str = Field(default="", **_wire("contactEmail", "usuarioEmail"))
    notes: str = Field(default="", **_wire("notes", "notas"))
    created_at: Optional[str] = Field(default=None, **_wire("createdAt", "fecha"))

    @field_validator("product_ids", mode="before")
    @classmethod
    def _normalize_product_ids(cls, value: Any) -> Any:
        return _empty_if_none(value)

    @field_validator("delivery_type", mode="before")
    @classmethod
    def _normalize_delivery_type(cls, value: Any) -> Any:
        if isinstance(value, DeliveryType):
            return value.value
        text = str(value or "").strip().lower()
        return _DELIVERY_VALUES.get(text, DeliveryType.PICKUP.value)


class AdminRecord(WireModel):
    """Admin credentials shared through the document.

    ``password_hash`` is base64, not a hash. ``encrypted_token`` is the
    upstream credential under the static passphrase. Neither keeps
    anything secret from someone holding the client config.
    """

    password_hash: Optional[str] = Field(
        default=None, **_wire("passwordHash", "password")
    )
    encrypted_token: Optional[str] = Field(
        default=None, **_wire("encryptedToken")
    )


class CatalogDocument(WireModel):
    """The single root entity stored in the Gist."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    last_updated: Optional[str] = Field(
        default=None, **_wire("lastUpdated", "ultimaActualizacion")
    )
    admin: Optional[AdminRecord] = None
    businesses: list[Business] = Field(
        default_factory=list, **_wire("businesses", "negocios")
    )
    orders: list[Order] = Field(default_factory=list, **_wire("orders", "pedidos"))

    @field_validator("businesses", "orders", mode="before")
    @classmethod
    def _normalize_lists(cls, value: Any) -> Any:
        return _empty_if_none(value)

    def find_business(self, business_id: int) -> Optional[Business]:
        return next((b for b in self.businesses if b.id == business_id), None)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with English keys, dropping legacy duplicates."""
        data = self.model_dump(mode="json", by_alias=True)
        for key in LEGACY_KEYS:
            data.pop(key, None)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), indent=2, ensure_ascii=False)


def normalize_document(raw: Any) -> CatalogDocument:
    """Decode raw JSON content into a CatalogDocument.

    Missing or null lists normalize to empty. ``None`` yields an empty
    document.

    Raises:
        DecodeError: If ``raw`` is not an object or does not validate.
    """
    if raw is None:
        return CatalogDocument()
    if not isinstance(raw, dict):
        raise DecodeError(
            f"Catalog document must be a JSON object, got {type(raw).__name__}"
        )
    try:
        return CatalogDocument.model_validate(raw)
    except ValidationError as exc:
        raise DecodeError(f"Malformed catalog document: {exc}") from exc


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_marker(marker: Optional[str]) -> Optional[datetime]:
    """Parse an ISO change marker, tolerating the JS ``...Z`` suffix."""
    if not marker:
        return None
    text = marker.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_marker(previous: Optional[str]) -> str:
    """Mint a change marker strictly later than ``previous``."""
    now = datetime.now(timezone.utc)
    prev = parse_marker(previous)
    if prev is not None and now <= prev:
        now = prev + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")


def next_id(existing: Iterable[int]) -> int:
    """Time-based id in milliseconds, bumped past any id already in use."""
    now_ms = int(time.time() * 1000)
    ids = list(existing)
    if ids:
        return max(now_ms, max(ids) + 1)
    return now_ms
