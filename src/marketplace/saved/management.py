"""Saved products — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.ledger import load_product
from marketplace.saved.saved import SavedProduct, saved_entry
from marketplace.shared.access import assert_owner
from marketplace.shared.errors import NotFoundError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="SavedProduct")
class SaveProduct:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="SavedProduct")
class RemoveSavedProduct:
    saved_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command_handler(part_of=SavedProduct)
class SavedProductCommandHandler:
    @handle(SaveProduct)
    def save_product(self, command):
        load_product(command.product_id)

        existing = saved_entry(command.user_id, command.product_id)
        if existing is not None:
            return str(existing.id)

        saved = SavedProduct.create(user_id=command.user_id, product_id=command.product_id)
        current_domain.repository_for(SavedProduct).add(saved)
        logger.info("Product saved", user_id=str(command.user_id), product_id=str(command.product_id))
        return str(saved.id)

    @handle(RemoveSavedProduct)
    def remove_saved_product(self, command):
        repo = current_domain.repository_for(SavedProduct)
        saved = repo.get_or_none(command.saved_id)
        if saved is None:
            raise NotFoundError(f"Saved product {command.saved_id} does not exist")
        assert_owner(
            saved.user_id,
            command.caller_id,
            command.caller_role,
            "You can only manage your own saved products",
        )
        repo._dao.delete(saved)
