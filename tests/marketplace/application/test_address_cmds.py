"""Application tests for the address book."""

import pytest
from marketplace.address.address import Address, addresses_of
from marketplace.address.management import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from marketplace.shared.errors import NotFoundError, UnauthorizedError
from protean import current_domain


def _add(user_id, line1, is_default=False):
    return current_domain.process(
        AddAddress(
            user_id=user_id,
            name="Home",
            line1=line1,
            city="Springfield",
            postal_code="62701",
            country="US",
            is_default=is_default,
        ),
        asynchronous=False,
    )


def _default_of(user_id):
    return [str(a.id) for a in addresses_of(user_id) if a.is_default]


class TestAddAddress:
    def test_first_address_becomes_default(self):
        address_id = _add("user-1", "1 First Street")
        assert _default_of("user-1") == [address_id]

    def test_second_address_is_not_default(self):
        first = _add("user-1", "1 First Street")
        _add("user-1", "2 Second Street")
        assert _default_of("user-1") == [first]

    def test_new_default_replaces_old(self):
        _add("user-1", "1 First Street")
        second = _add("user-1", "2 Second Street", is_default=True)
        assert _default_of("user-1") == [second]
        assert str(addresses_of("user-1")[0].id) == second

    def test_defaults_are_per_user(self):
        first = _add("user-1", "1 First Street")
        other = _add("user-2", "5 Other Street")
        assert _default_of("user-1") == [first]
        assert _default_of("user-2") == [other]


class TestSetDefaultAddress:
    def test_owner_switches_default(self):
        _add("user-1", "1 First Street")
        second = _add("user-1", "2 Second Street")
        current_domain.process(
            SetDefaultAddress(address_id=second, caller_id="user-1", caller_role="buyer"),
            asynchronous=False,
        )
        assert _default_of("user-1") == [second]

    def test_other_user_rejected(self):
        address_id = _add("user-1", "1 First Street")
        with pytest.raises(UnauthorizedError):
            current_domain.process(
                SetDefaultAddress(address_id=address_id, caller_id="user-2", caller_role="buyer"),
                asynchronous=False,
            )


class TestUpdateAddress:
    def test_owner_edits_fields(self):
        address_id = _add("user-1", "1 First Street")
        current_domain.process(
            UpdateAddress(address_id=address_id, caller_id="user-1", caller_role="buyer", line1="5 Fifth Street"),
            asynchronous=False,
        )
        address = current_domain.repository_for(Address).get(address_id)
        assert address.line1 == "5 Fifth Street"
        assert address.city == "Springfield"
        assert address.is_default is True

    def test_flagging_as_default_moves_the_default(self):
        _add("user-1", "1 First Street")
        second = _add("user-1", "2 Second Street")
        current_domain.process(
            UpdateAddress(address_id=second, caller_id="user-1", caller_role="buyer", is_default=True),
            asynchronous=False,
        )
        assert _default_of("user-1") == [second]

    def test_other_user_rejected(self):
        address_id = _add("user-1", "1 First Street")
        with pytest.raises(UnauthorizedError):
            current_domain.process(
                UpdateAddress(address_id=address_id, caller_id="user-2", caller_role="buyer", city="Elsewhere"),
                asynchronous=False,
            )
        assert current_domain.repository_for(Address).get(address_id).city == "Springfield"


class TestRemoveAddress:
    def test_owner_removes_address(self):
        address_id = _add("user-1", "1 First Street")
        current_domain.process(
            RemoveAddress(address_id=address_id, caller_id="user-1", caller_role="buyer"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Address).get_or_none(address_id) is None

    def test_unknown_address_not_found(self):
        with pytest.raises(NotFoundError):
            current_domain.process(
                RemoveAddress(address_id="missing", caller_id="user-1", caller_role="buyer"),
                asynchronous=False,
            )
