"""Message templates — one per notification type.

Each template renders the inbox text from the context of the triggering
event. Product names fall back to "your product" and quantities are
pluralised.
"""

from marketplace.notification.notification import NotificationType

DEFAULT_PRODUCT_NAME = "your product"


def _units(quantity: int) -> str:
    return "units" if quantity > 1 else "unit"


def _product_name(context: dict) -> str:
    return context.get("product_name") or DEFAULT_PRODUCT_NAME


def _quantity(context: dict) -> int:
    return int(context.get("quantity") or 1)


class ViewTemplate:
    notification_type = NotificationType.VIEW.value

    @staticmethod
    def render(context: dict) -> str:
        return f"Someone viewed {_product_name(context)}"


class CartTemplate:
    notification_type = NotificationType.CART.value

    @staticmethod
    def render(context: dict) -> str:
        quantity = _quantity(context)
        return f"Someone added {quantity} {_units(quantity)} of {_product_name(context)} to their cart"


class PurchaseTemplate:
    notification_type = NotificationType.PURCHASE.value

    @staticmethod
    def render(context: dict) -> str:
        quantity = _quantity(context)
        return f"New order! Someone purchased {quantity} {_units(quantity)} of {_product_name(context)}"


class DonationTemplate:
    notification_type = NotificationType.DONATION.value

    @staticmethod
    def render(context: dict) -> str:
        quantity = _quantity(context)
        return f"Someone donated {quantity} {_units(quantity)} of {_product_name(context)}"


class ActivityTemplate:
    """Fallback for event types without a dedicated template."""

    notification_type = None

    @staticmethod
    def render(context: dict) -> str:
        return f"Activity on {_product_name(context)}"


TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.VIEW.value: ViewTemplate,
    NotificationType.CART.value: CartTemplate,
    NotificationType.PURCHASE.value: PurchaseTemplate,
    NotificationType.DONATION.value: DonationTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    return TEMPLATE_REGISTRY.get(notification_type, ActivityTemplate)


def render_message(notification_type: str, context: dict) -> str:
    return get_template(notification_type).render(context)
