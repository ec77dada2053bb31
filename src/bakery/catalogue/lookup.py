"""Catalogue lookup port and its repository-backed adapter.

The pricing calculator depends only on ``CatalogueLookup`` so it can be
exercised against an in-memory menu without touching repositories.
"""

from abc import ABC, abstractmethod

from protean.utils.globals import current_domain

from bakery.catalogue.catalogue import CakeShape, FlavorType, ProductFlavor, ProductType


class CatalogueLookup(ABC):
    """Read-only view of the menu used while pricing an order.

    The ``get_*`` methods raise ``ObjectNotFoundError`` for unknown ids.
    """

    @abstractmethod
    def get_product_type(self, product_type_id: str) -> ProductType: ...

    @abstractmethod
    def get_flavor_type(self, flavor_id: str) -> FlavorType: ...

    @abstractmethod
    def get_cake_shape(self, cake_shape_id: str) -> CakeShape: ...

    @abstractmethod
    def is_flavor_available_for_product(self, product_type_id: str, flavor_id: str) -> bool: ...


class RepositoryCatalogue(CatalogueLookup):
    """Catalogue lookups served from the domain's repositories."""

    def get_product_type(self, product_type_id: str) -> ProductType:
        return current_domain.repository_for(ProductType).get(product_type_id)

    def get_flavor_type(self, flavor_id: str) -> FlavorType:
        return current_domain.repository_for(FlavorType).get(flavor_id)

    def get_cake_shape(self, cake_shape_id: str) -> CakeShape:
        return current_domain.repository_for(CakeShape).get(cake_shape_id)

    def is_flavor_available_for_product(self, product_type_id: str, flavor_id: str) -> bool:
        pairs = (
            current_domain.repository_for(ProductFlavor)
            ._dao.query.filter(
                product_type_id=str(product_type_id),
                flavor_id=str(flavor_id),
                is_available=True,
            )
            .all()
        )
        return bool(pairs.items)
