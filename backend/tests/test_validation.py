import pytest

from salesdesk.services.inventory_service import clean_product_payload, to_json
from salesdesk.validation import (
    MAX_PRICE_CENTS,
    ValidationError,
    coerce_int,
    normalize_id,
    validate_sale_quantity,
)
from datetime import datetime


class TestProductPayload:

    def test_create_requires_all_fields(self):
        with pytest.raises(ValidationError, match="Missing required fields: cost_cents, stock"):
            clean_product_payload({"name": "A", "price_cents": 1}, partial=False)

    def test_strips_name(self):
        patch = clean_product_payload({"name": "  Lamp  "}, partial=True)
        assert patch == {"name": "Lamp"}

    def test_price_ceiling(self):
        with pytest.raises(ValidationError):
            clean_product_payload({"price_cents": MAX_PRICE_CENTS + 1}, partial=True)

    def test_null_not_allowed(self):
        with pytest.raises(ValidationError, match="cannot be null"):
            clean_product_payload({"stock": None}, partial=True)

    def test_name_length(self):
        with pytest.raises(ValidationError, match="max length"):
            clean_product_payload({"name": "x" * 256}, partial=True)

    def test_not_a_dict(self):
        with pytest.raises(ValidationError):
            clean_product_payload(["name"], partial=True)

    @pytest.mark.parametrize("field", ["id", "created_at", "updated_at"])
    def test_server_managed_fields_rejected(self, field):
        with pytest.raises(ValidationError, match=f"Field not allowed: {field}"):
            clean_product_payload({field: "2026-10-17T12:00:00Z"}, partial=True)


class TestCoercion:

    @pytest.mark.parametrize("value,expected", [(3, 3), ("7", 7), (" 12 ", 12), ("-4", -4)])
    def test_coerce_int(self, value, expected):
        assert coerce_int("n", value) == expected

    @pytest.mark.parametrize("value", [True, 2.0, "2.0", "1e2", "", "abc", [1]])
    def test_coerce_int_rejects(self, value):
        with pytest.raises(ValidationError):
            coerce_int("n", value)

    def test_quantity(self):
        assert validate_sale_quantity("5") == 5
        with pytest.raises(ValidationError, match="> 0"):
            validate_sale_quantity(0)

    def test_ids(self):
        assert normalize_id("product_id", "9") == 9
        with pytest.raises(ValidationError):
            normalize_id("product_id", "")
        with pytest.raises(ValidationError):
            normalize_id("product_id", -1)


def test_to_json_renders_datetimes():
    row = {"id": 1, "sold_at": datetime(2026, 10, 17, 8, 30, 15, 999)}
    assert to_json(row) == {"id": 1, "sold_at": "2026-10-17T08:30:15Z"}
