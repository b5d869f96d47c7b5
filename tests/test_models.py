"""Tests for catalog document models and normalization."""

from __future__ import annotations

import json

import pytest

from revolico.errors import DecodeError
from revolico.models import (
    CatalogDocument,
    DeliveryType,
    next_id,
    next_marker,
    normalize_document,
    parse_marker,
)


class TestNormalize:
    """Documents missing lists must load, never crash."""

    def test_empty_object(self):
        doc = normalize_document({})
        assert doc.businesses == []
        assert doc.orders == []
        assert doc.last_updated is None
        assert doc.admin is None

    def test_none_is_empty_document(self):
        doc = normalize_document(None)
        assert doc.businesses == []
        assert doc.orders == []

    def test_null_lists(self):
        doc = normalize_document(
            {"businesses": None, "orders": None, "lastUpdated": "2025-01-01T00:00:00Z"}
        )
        assert doc.businesses == []
        assert doc.orders == []
        assert doc.last_updated == "2025-01-01T00:00:00Z"

    def test_business_without_products(self):
        doc = normalize_document({"businesses": [{"id": 1, "name": "Shop"}]})
        assert doc.businesses[0].products == []
        assert doc.businesses[0].delivery_fee == 0.0

    def test_non_object_rejected(self):
        with pytest.raises(DecodeError):
            normalize_document([1, 2, 3])

    def test_invalid_entity_rejected(self):
        with pytest.raises(DecodeError):
            normalize_document({"businesses": [{"name": "no id"}]})


class TestLegacyKeys:
    """Documents from the Spanish-keyed client still load."""

    @pytest.fixture
    def legacy(self) -> dict:
        return {
            "ultimaActualizacion": "2024-05-01T10:00:00.000Z",
            "admin": {"password": "YWRtaW4xMjM="},
            "negocios": [
                {
                    "id": 10,
                    "nombre": "Tienda",
                    "direccion": "Zona 1",
                    "precioDomicilio": 15,
                    "fechaCreacion": "2024-04-01T00:00:00.000Z",
                    "productos": [
                        {
                            "id": 11,
                            "nombre": "Pan",
                            "descripcion": "Pan dulce",
                            "precio": 5.5,
                            "stock": 3,
                            "categoria": "Comida",
                            "esOferta": True,
                            "fechaPublicacion": "2024-04-02T00:00:00.000Z",
                        }
                    ],
                }
            ],
            "pedidos": [
                {
                    "id": 20,
                    "negocioId": 10,
                    "productosIds": [11],
                    "tipoEntrega": "domicilio",
                    "direccionEntrega": "Casa",
                    "usuarioEmail": "a@b.c",
                    "notas": "",
                    "fecha": "2024-04-03T00:00:00.000Z",
                }
            ],
        }

    def test_reads_spanish_keys(self, legacy):
        doc = normalize_document(legacy)
        assert doc.last_updated == "2024-05-01T10:00:00.000Z"
        assert doc.admin.password_hash == "YWRtaW4xMjM="
        business = doc.businesses[0]
        assert business.name == "Tienda"
        assert business.delivery_fee == 15
        assert business.products[0].on_offer is True
        assert business.products[0].category == "Comida"
        order = doc.orders[0]
        assert order.business_id == 10
        assert order.product_ids == [11]
        assert order.delivery_type == DeliveryType.DELIVERY.value

    def test_writes_english_keys(self, legacy):
        wire = normalize_document(legacy).to_wire()
        assert "negocios" not in wire
        assert "pedidos" not in wire
        assert wire["lastUpdated"] == "2024-05-01T10:00:00.000Z"
        assert wire["admin"]["passwordHash"] == "YWRtaW4xMjM="
        business = wire["businesses"][0]
        assert business["deliveryFee"] == 15
        assert business["products"][0]["onOffer"] is True
        assert wire["orders"][0]["businessId"] == 10

    def test_null_numbers_from_empty_form_fields(self):
        doc = normalize_document({
            "negocios": [
                {
                    "id": 10,
                    "nombre": "Tienda",
                    "precioDomicilio": None,
                    "productos": [{"id": 11, "nombre": "Pan", "precio": None, "stock": None}],
                }
            ],
            "pedidos": [{"id": 20, "negocioId": None, "productosIds": None}],
        })
        business = doc.businesses[0]
        assert business.delivery_fee == 0.0
        assert business.products[0].price == 0.0
        assert business.products[0].stock == 0
        assert doc.orders[0].business_id is None
        assert doc.orders[0].product_ids == []

    @pytest.mark.parametrize("raw", ["recoger", "Retiro en tienda", "", None])
    def test_other_delivery_values_read_as_pickup(self, raw):
        doc = normalize_document({"orders": [{"id": 1, "tipoEntrega": raw}]})
        assert doc.orders[0].delivery_type == DeliveryType.PICKUP.value
        assert DeliveryType(doc.orders[0].delivery_type) is DeliveryType.PICKUP

    def test_unknown_top_level_keys_survive(self):
        doc = normalize_document({"businesses": [], "theme": "dark"})
        assert json.loads(doc.to_json())["theme"] == "dark"


class TestMarkers:
    """Change markers and id minting."""

    def test_parse_js_iso(self):
        parsed = parse_marker("2024-05-01T10:00:00.000Z")
        assert parsed is not None
        assert parsed.tzinfo is not None

    def test_parse_garbage(self):
        assert parse_marker("yesterday") is None
        assert parse_marker(None) is None

    def test_next_marker_strictly_increases(self):
        future = "2999-01-01T00:00:00+00:00"
        following = next_marker(future)
        assert parse_marker(following) > parse_marker(future)

    def test_next_marker_without_previous(self):
        assert parse_marker(next_marker(None)) is not None

    def test_next_id_skips_existing(self):
        huge = 10**15
        assert next_id([huge]) == huge + 1

    def test_next_id_is_time_based(self):
        assert next_id([]) > 1_600_000_000_000

    def test_find_business(self):
        doc = CatalogDocument.model_validate({"businesses": [{"id": 7, "name": "A"}]})
        assert doc.find_business(7).name == "A"
        assert doc.find_business(8) is None
