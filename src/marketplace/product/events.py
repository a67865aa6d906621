"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A seller put a new product on the marketplace."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    available_quantity = Integer(required=True)
    listed_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductViewed:
    """Someone opened a product page. Anonymous views carry no viewer."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    product_name = String(required=True)
    viewer_id = Identifier()
    viewed_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDonated:
    """A seller donated units of a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    product_name = String(required=True)
    quantity = Integer(required=True)
    donation_id = Identifier(required=True)
    donated_at = DateTime(required=True)
