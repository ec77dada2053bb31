"""Customer aggregate root with its Address book."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, String

from bakery.domain import bakery


@bakery.entity(part_of="Customer")
class Address:
    """A delivery address stored on a customer's address book."""

    label: String(max_length=50)
    line1: String(required=True, max_length=255)
    line2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(required=True, max_length=20)
    notes: String(max_length=500)


@bakery.aggregate
class Customer:
    """A bakery customer. Orders copy name, phone and email at creation time
    and are not re-synced when the customer is edited later."""

    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    phone: String(required=True, max_length=30)
    notes: String(max_length=2000)
    addresses: HasMany(Address)
    registered_at: DateTime(default=lambda: datetime.now(UTC))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def add_address(self, line1, city, postal_code, label=None, line2=None, state=None, notes=None):
        address = Address(
            label=label,
            line1=line1,
            line2=line2,
            city=city,
            state=state,
            postal_code=postal_code,
            notes=notes,
        )
        self.add_addresses(address)
        return address

    def find_address(self, address_id):
        """Return the address with this id, or ``None``."""
        return next((a for a in self.addresses or [] if str(a.id) == str(address_id)), None)

    def require_address(self, address_id):
        address = self.find_address(address_id) if address_id else None
        if address is None:
            raise ValidationError(
                {"delivery_address_id": ["Selected delivery address not found for customer"]}
            )
        return address
