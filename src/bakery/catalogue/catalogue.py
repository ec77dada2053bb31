"""Menu catalogue aggregates: product types, flavors, cake shapes and the
product/flavor availability matrix.

The ordering core only reads these. Prices here are the live menu prices;
orders copy them into line item snapshots at creation time.
"""

import json
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text

from bakery.domain import bakery


class PricingMethod(Enum):
    PER_UNIT = "perunit"
    PER_KG = "perkg"


@bakery.aggregate
class ProductType:
    """A sellable product (cupcakes, birthday cake, ...) and how it is priced.

    Per-unit products carry ``unit_price`` and optional quantity bounds;
    per-kg products carry ``price_per_kg`` and optional weight bounds.
    ``shape_ids`` is a JSON list; when non-empty every order line for the
    product has to pick one of those shapes.
    """

    name: String(required=True, max_length=150)
    description: String(max_length=1000)
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)
    pricing_method: String(choices=PricingMethod, default=PricingMethod.PER_UNIT.value)
    unit_price: Float(min_value=0.0)
    min_quantity: Integer(min_value=0)
    max_quantity: Integer(min_value=0)
    price_per_kg: Float(min_value=0.0)
    min_weight: Float(min_value=0.0)
    max_weight: Float(min_value=0.0)
    shape_ids: Text(default="[]")

    @invariant.post
    def price_matches_pricing_method(self):
        if self.pricing_method == PricingMethod.PER_UNIT.value and self.unit_price is None:
            raise ValidationError({"unit_price": ["Unit price is required for per-unit products"]})
        if self.pricing_method == PricingMethod.PER_KG.value and self.price_per_kg is None:
            raise ValidationError({"price_per_kg": ["Price per kg is required for per-kg products"]})

    @property
    def allowed_shape_ids(self) -> list[str]:
        return [str(shape_id) for shape_id in json.loads(self.shape_ids or "[]")]


@bakery.aggregate
class FlavorType:
    """A flavor that can be combined with products, optionally at a surcharge."""

    name: String(required=True, max_length=150, unique=True)
    description: String(max_length=1000, default="")
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)
    has_extra_price: Boolean(default=False)
    extra_price_per_unit: Float(min_value=0.0)
    extra_price_per_kg: Float(min_value=0.0)


@bakery.aggregate
class CakeShape:
    name: String(required=True, max_length=150)
    description: String(max_length=1000)
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)


@bakery.aggregate
class ProductFlavor:
    """Availability of one flavor for one product type (one row per pair)."""

    product_type_id: Identifier(required=True)
    flavor_id: Identifier(required=True)
    is_available: Boolean(default=True)
    notes: String(max_length=500, default="")
