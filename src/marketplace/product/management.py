"""Product listing management — commands and handler.

Any seller may list a product. Editing and removing a listing is limited to
the seller who owns it (admins bypass the check).
"""

from protean import handle
from protean.fields import Boolean, Date, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.ledger import load_product
from marketplace.product.product import Product, ProductPriority
from marketplace.shared.access import Role, assert_owner, assert_role


@marketplace.command(part_of="Product")
class AddProduct:
    seller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    category = String(max_length=100)
    available_quantity = Integer(default=0, min_value=0)
    perishable = Boolean(default=False)
    expiry_date = Date()
    priority = String(choices=ProductPriority, default=ProductPriority.MEDIUM.value)


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)
    name = String(max_length=255)
    description = Text()
    price = Float(min_value=0.0)
    category = String(max_length=100)
    available_quantity = Integer(min_value=0)
    perishable = Boolean()
    expiry_date = Date()
    priority = String(choices=ProductPriority)


@marketplace.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(max_length=20)


@marketplace.command(part_of="Product")
class RecordProductView:
    product_id = Identifier(required=True)
    viewer_id = Identifier()


@marketplace.command_handler(part_of=Product)
class ProductCommandHandler:
    @handle(AddProduct)
    def add_product(self, command):
        assert_role(command.caller_role, {Role.SELLER}, "Only sellers can list products")
        product = Product.create(
            seller_id=command.seller_id,
            name=command.name,
            price=command.price,
            available_quantity=command.available_quantity or 0,
            description=command.description,
            category=command.category,
            perishable=command.perishable,
            expiry_date=command.expiry_date,
            priority=command.priority,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        product = load_product(command.product_id)
        assert_owner(
            product.seller_id,
            command.caller_id,
            command.caller_role,
            "You can only update your own products",
        )
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            perishable=command.perishable,
            expiry_date=command.expiry_date,
            priority=command.priority,
        )
        if command.available_quantity is not None:
            product.restock(command.available_quantity)
        current_domain.repository_for(Product).add(product)

    @handle(RemoveProduct)
    def remove_product(self, command):
        product = load_product(command.product_id)
        assert_owner(
            product.seller_id,
            command.caller_id,
            command.caller_role,
            "You can only delete your own products",
        )
        current_domain.repository_for(Product)._dao.delete(product)

    @handle(RecordProductView)
    def record_product_view(self, command):
        product = load_product(command.product_id)
        # Sellers looking at their own listing are not interesting to them
        if command.viewer_id and str(command.viewer_id) == str(product.seller_id):
            return
        product.record_view(viewer_id=command.viewer_id)
        current_domain.repository_for(Product).add(product)
