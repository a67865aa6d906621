"""Address aggregate (CQRS) — a user's postal address book entry.

Buyers pick one as the delivery address at checkout; sellers need one on file
before they can hand orders to logistics. Each user has at most one default
address, maintained by the commands that set it.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace


POSTAL_FIELDS = ("name", "line1", "line2", "city", "state", "postal_code", "country")


@marketplace.aggregate
class Address:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)
    created_at = DateTime()

    @classmethod
    def create(
        cls,
        user_id: str,
        name: str,
        line1: str,
        city: str,
        postal_code: str,
        country: str,
        line2: str | None = None,
        state: str | None = None,
        is_default: bool = False,
    ):
        return cls(
            user_id=user_id,
            name=name,
            line1=line1,
            line2=line2,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country,
            is_default=is_default,
            created_at=datetime.now(UTC),
        )

    def update_details(self, **changes) -> None:
        for field_name in POSTAL_FIELDS:
            if changes.get(field_name) is not None:
                setattr(self, field_name, changes[field_name])

    def as_snapshot(self) -> dict:
        """The postal fields only, for copying into orders and tracking records."""
        return {
            "name": self.name,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }


def addresses_of(user_id: str) -> list:
    """All addresses of a user, default first, then oldest first."""
    results = current_domain.repository_for(Address)._dao.query.filter(user_id=user_id).all().items
    return sorted(results, key=lambda a: (not a.is_default, a.created_at))
