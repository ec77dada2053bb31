"""Pricing calculator.

Turns requested order items into priced line items against the live menu.
Every check runs in a fixed order per item and the first failure aborts the
whole batch, so a partially priced cart never reaches the assembler.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError

from bakery.catalogue.catalogue import PricingMethod
from bakery.catalogue.lookup import CatalogueLookup
from bakery.shared.money import round2

MAX_SPECIAL_INSTRUCTIONS_LENGTH = 1000


# ---------------------------------------------------------------------------
# Measures
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PerUnit:
    quantity: int


@dataclass(frozen=True)
class PerKg:
    weight: float


@dataclass(frozen=True)
class RequestedItem:
    product_type_id: str
    flavor_id: str
    cake_shape_id: str | None = None
    quantity: int | None = None
    weight: float | None = None
    special_instructions: str | None = None


@dataclass(frozen=True)
class PricedLineItem:
    product_type_id: str
    product_type_name: str
    flavor_id: str
    flavor_name: str
    cake_shape_id: str | None
    cake_shape_name: str
    pricing_method: str
    measure: PerUnit | PerKg
    unit_base_price: float
    flavor_extra_price: float
    line_total: float
    special_instructions: str = ""

    @property
    def quantity(self) -> int | None:
        return self.measure.quantity if isinstance(self.measure, PerUnit) else None

    @property
    def weight(self) -> float | None:
        return self.measure.weight if isinstance(self.measure, PerKg) else None


@dataclass(frozen=True)
class PricedCart:
    items: list[PricedLineItem]
    sub_total: float


def _field(index: int, name: str) -> str:
    return f"items.{index}.{name}"


def _resolve(loader, identifier, label):
    try:
        return loader(identifier)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"{label} not found: {identifier}") from exc


def _resolve_shape(index, item, product, catalogue):
    allowed = product.allowed_shape_ids
    if not allowed:
        return None

    if not item.cake_shape_id:
        raise ValidationError({_field(index, "cake_shape_id"): [f"Cake shape is required for {product.name}"]})
    if str(item.cake_shape_id) not in allowed:
        raise ValidationError(
            {_field(index, "cake_shape_id"): [f"Selected cake shape is not available for {product.name}"]}
        )
    return _resolve(catalogue.get_cake_shape, item.cake_shape_id, "Cake shape")


def _measure_for(index, item, product):
    """Pick the measure the product's pricing method calls for and check its bounds.

    Zero or unset bounds mean unbounded.
    """
    if product.pricing_method == PricingMethod.PER_UNIT.value:
        quantity = item.quantity or 0
        if quantity <= 0:
            raise ValidationError({_field(index, "quantity"): [f"Quantity is required for {product.name}"]})
        if product.min_quantity and quantity < product.min_quantity:
            raise ValidationError(
                {_field(index, "quantity"): [f"Quantity must be at least {product.min_quantity} for {product.name}"]}
            )
        if product.max_quantity and quantity > product.max_quantity:
            raise ValidationError(
                {_field(index, "quantity"): [f"Quantity must be at most {product.max_quantity} for {product.name}"]}
            )
        return PerUnit(quantity=int(quantity))

    weight = item.weight or 0
    if weight <= 0:
        raise ValidationError({_field(index, "weight"): [f"Weight is required for {product.name}"]})
    if product.min_weight and weight < product.min_weight:
        raise ValidationError(
            {_field(index, "weight"): [f"Weight must be at least {product.min_weight}kg for {product.name}"]}
        )
    if product.max_weight and weight > product.max_weight:
        raise ValidationError(
            {_field(index, "weight"): [f"Weight must be at most {product.max_weight}kg for {product.name}"]}
        )
    return PerKg(weight=float(weight))


def _prices_for(measure, product, flavor) -> tuple[float, float]:
    if isinstance(measure, PerUnit):
        base = round2((product.unit_price or 0.0) * measure.quantity)
        extra_rate = (flavor.extra_price_per_unit or 0.0) if flavor.has_extra_price else 0.0
        return base, round2(extra_rate * measure.quantity)

    base = round2((product.price_per_kg or 0.0) * measure.weight)
    extra_rate = (flavor.extra_price_per_kg or 0.0) if flavor.has_extra_price else 0.0
    return base, round2(extra_rate * measure.weight)


def price_item(index: int, item: RequestedItem, catalogue: CatalogueLookup) -> PricedLineItem:
    product = _resolve(catalogue.get_product_type, item.product_type_id, "Product type")
    flavor = _resolve(catalogue.get_flavor_type, item.flavor_id, "Flavor")
    shape = _resolve_shape(index, item, product, catalogue)

    if not catalogue.is_flavor_available_for_product(item.product_type_id, item.flavor_id):
        raise ValidationError({_field(index, "flavor_id"): [f"Flavor is not available for product {product.name}"]})

    instructions = item.special_instructions or ""
    if len(instructions) > MAX_SPECIAL_INSTRUCTIONS_LENGTH:
        raise ValidationError(
            {
                _field(index, "special_instructions"): [
                    f"Special instructions must be at most {MAX_SPECIAL_INSTRUCTIONS_LENGTH} characters"
                ]
            }
        )

    measure = _measure_for(index, item, product)
    unit_base_price, flavor_extra_price = _prices_for(measure, product, flavor)

    return PricedLineItem(
        product_type_id=str(product.id),
        product_type_name=product.name,
        flavor_id=str(flavor.id),
        flavor_name=flavor.name,
        cake_shape_id=str(shape.id) if shape else None,
        cake_shape_name=shape.name if shape else "",
        pricing_method=product.pricing_method,
        measure=measure,
        unit_base_price=unit_base_price,
        flavor_extra_price=flavor_extra_price,
        line_total=round2(unit_base_price + flavor_extra_price),
        special_instructions=instructions,
    )


def price_line_items(items: list[RequestedItem], catalogue: CatalogueLookup) -> PricedCart:
    """Price every requested item; the first failing item aborts the batch."""
    if not items:
        raise ValidationError({"items": ["At least one order item is required"]})

    priced = [price_item(index, item, catalogue) for index, item in enumerate(items)]
    return PricedCart(items=priced, sub_total=round2(sum(line.line_total for line in priced)))
