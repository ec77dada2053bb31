"""Catalogue seeding — commands and handler.

Full menu management lives in the admin back office; these commands are the
minimum needed to put products, flavors and shapes in front of the order
assembler.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from bakery.catalogue.catalogue import CakeShape, FlavorType, ProductFlavor, ProductType
from bakery.domain import bakery


@bakery.command(part_of="ProductType")
class RegisterProductType:
    name: String(required=True, max_length=150)
    description: String(max_length=1000)
    pricing_method: String(required=True, max_length=10)
    unit_price: Float()
    min_quantity: Integer()
    max_quantity: Integer()
    price_per_kg: Float()
    min_weight: Float()
    max_weight: Float()
    shape_ids: Text()  # JSON list of cake shape ids
    sort_order: Integer(default=0)


@bakery.command(part_of="FlavorType")
class RegisterFlavorType:
    name: String(required=True, max_length=150)
    description: String(max_length=1000)
    has_extra_price: Boolean(default=False)
    extra_price_per_unit: Float()
    extra_price_per_kg: Float()
    sort_order: Integer(default=0)


@bakery.command(part_of="CakeShape")
class RegisterCakeShape:
    name: String(required=True, max_length=150)
    description: String(max_length=1000)
    sort_order: Integer(default=0)


@bakery.command(part_of="ProductFlavor")
class SetFlavorAvailability:
    """Mark a flavor as available (or not) for a product type."""

    product_type_id: Identifier(required=True)
    flavor_id: Identifier(required=True)
    is_available: Boolean(default=True)
    notes: String(max_length=500)


@bakery.command_handler(part_of=ProductType)
class RegisterProductTypeHandler:
    @handle(RegisterProductType)
    def register_product_type(self, command):
        product = ProductType(
            name=command.name,
            description=command.description,
            pricing_method=command.pricing_method,
            unit_price=command.unit_price,
            min_quantity=command.min_quantity,
            max_quantity=command.max_quantity,
            price_per_kg=command.price_per_kg,
            min_weight=command.min_weight,
            max_weight=command.max_weight,
            shape_ids=command.shape_ids or json.dumps([]),
            sort_order=command.sort_order or 0,
        )
        current_domain.repository_for(ProductType).add(product)
        return str(product.id)


@bakery.command_handler(part_of=FlavorType)
class RegisterFlavorTypeHandler:
    @handle(RegisterFlavorType)
    def register_flavor_type(self, command):
        flavor = FlavorType(
            name=command.name,
            description=command.description or "",
            has_extra_price=bool(command.has_extra_price),
            extra_price_per_unit=command.extra_price_per_unit,
            extra_price_per_kg=command.extra_price_per_kg,
            sort_order=command.sort_order or 0,
        )
        current_domain.repository_for(FlavorType).add(flavor)
        return str(flavor.id)


@bakery.command_handler(part_of=CakeShape)
class RegisterCakeShapeHandler:
    @handle(RegisterCakeShape)
    def register_cake_shape(self, command):
        shape = CakeShape(
            name=command.name,
            description=command.description,
            sort_order=command.sort_order or 0,
        )
        current_domain.repository_for(CakeShape).add(shape)
        return str(shape.id)


@bakery.command_handler(part_of=ProductFlavor)
class SetFlavorAvailabilityHandler:
    @handle(SetFlavorAvailability)
    def set_flavor_availability(self, command):
        # Product and flavor must both exist before they can be paired
        current_domain.repository_for(ProductType).get(command.product_type_id)
        current_domain.repository_for(FlavorType).get(command.flavor_id)

        repo = current_domain.repository_for(ProductFlavor)
        existing = repo._dao.query.filter(
            product_type_id=str(command.product_type_id),
            flavor_id=str(command.flavor_id),
        ).all()

        if existing.items:
            pair = existing.items[0]
            pair.is_available = bool(command.is_available)
            if command.notes is not None:
                pair.notes = command.notes
        else:
            pair = ProductFlavor(
                product_type_id=command.product_type_id,
                flavor_id=command.flavor_id,
                is_available=bool(command.is_available),
                notes=command.notes or "",
            )
        repo.add(pair)
        return str(pair.id)
