"""Customer registration and address book — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from bakery.customer.customer import Customer
from bakery.domain import bakery


@bakery.command(part_of="Customer")
class RegisterCustomer:
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    phone: String(required=True, max_length=30)
    notes: String(max_length=2000)


@bakery.command(part_of="Customer")
class AddCustomerAddress:
    customer_id: Identifier(required=True)
    label: String(max_length=50)
    line1: String(required=True, max_length=255)
    line2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(required=True, max_length=20)
    notes: String(max_length=500)


@bakery.command_handler(part_of=Customer)
class CustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        customer = Customer(
            first_name=command.first_name,
            last_name=command.last_name,
            email=command.email,
            phone=command.phone,
            notes=command.notes,
        )
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)

    @handle(AddCustomerAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        address = customer.add_address(
            label=command.label,
            line1=command.line1,
            line2=command.line2,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            notes=command.notes,
        )
        repo.add(customer)
        return str(address.id)
