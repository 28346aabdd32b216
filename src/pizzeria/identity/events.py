"""Domain events for user accounts."""

from protean.fields import Boolean, DateTime, Identifier, String

from pizzeria.domain import pizzeria


@pizzeria.event(part_of="User")
class UserRegistered:
    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@pizzeria.event(part_of="User")
class EmailVerified:
    __version__ = 1

    user_id = Identifier(required=True)
    verified_at = DateTime(required=True)


@pizzeria.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    changed_at = DateTime(required=True)


@pizzeria.event(part_of="User")
class UserActivationChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    is_active = Boolean()
