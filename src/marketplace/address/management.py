"""Address book management — commands and handler.

Adding or editing an address flagged as default (or a user's first address)
clears the default flag on the user's other addresses in the same unit of
work.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from marketplace.address.address import POSTAL_FIELDS, Address, addresses_of
from marketplace.domain import marketplace
from marketplace.shared.access import assert_owner
from marketplace.shared.errors import NotFoundError


@marketplace.command(part_of="Address")
class AddAddress:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)


@marketplace.command(part_of="Address")
class UpdateAddress:
    address_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    name = String(max_length=100)
    line1 = String(max_length=255)
    line2 = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    is_default = Boolean()


@marketplace.command(part_of="Address")
class SetDefaultAddress:
    address_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command(part_of="Address")
class RemoveAddress:
    address_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


def _clear_default(user_id: str, keep_id: str | None = None) -> None:
    repo = current_domain.repository_for(Address)
    for address in addresses_of(user_id):
        if address.is_default and str(address.id) != keep_id:
            address.is_default = False
            repo.add(address)


def _load_owned(address_id: str, caller_id: str, caller_role: str | None) -> Address:
    address = current_domain.repository_for(Address).get_or_none(address_id)
    if address is None:
        raise NotFoundError(f"Address {address_id} does not exist")
    assert_owner(address.user_id, caller_id, caller_role, "You can only manage your own addresses")
    return address


@marketplace.command_handler(part_of=Address)
class AddressCommandHandler:
    @handle(AddAddress)
    def add_address(self, command):
        make_default = command.is_default or not addresses_of(command.user_id)
        if make_default:
            _clear_default(command.user_id)

        address = Address.create(
            user_id=command.user_id,
            name=command.name,
            line1=command.line1,
            line2=command.line2,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            country=command.country,
            is_default=make_default,
        )
        current_domain.repository_for(Address).add(address)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        address = _load_owned(command.address_id, command.caller_id, command.caller_role)
        address.update_details(**{name: getattr(command, name) for name in POSTAL_FIELDS})
        if command.is_default:
            _clear_default(address.user_id, keep_id=str(address.id))
            address.is_default = True
        current_domain.repository_for(Address).add(address)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        address = _load_owned(command.address_id, command.caller_id, command.caller_role)
        _clear_default(address.user_id, keep_id=str(address.id))
        address.is_default = True
        current_domain.repository_for(Address).add(address)

    @handle(RemoveAddress)
    def remove_address(self, command):
        address = _load_owned(command.address_id, command.caller_id, command.caller_role)
        current_domain.repository_for(Address)._dao.delete(address)
