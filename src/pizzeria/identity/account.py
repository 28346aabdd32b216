"""Account maintenance commands: profile edits, activation, login bookkeeping."""

import json

from protean import handle
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from pizzeria.domain import logger, pizzeria
from pizzeria.identity.user import User


@pizzeria.command(part_of="User")
class UpdateProfile:
    user_id: Identifier(required=True)
    name: String(max_length=50)
    phone: String(max_length=10)
    address: Text()  # JSON: {street, city, state, zip_code}


@pizzeria.command(part_of="User")
class SetUserActive:
    user_id: Identifier(required=True)
    is_active: Boolean(required=True)


@pizzeria.command(part_of="User")
class RecordLogin:
    user_id: Identifier(required=True)
    logged_in_at: DateTime()


@pizzeria.command_handler(part_of=User)
class AccountCommandHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_profile(
            name=command.name,
            phone=command.phone,
            address=json.loads(command.address) if command.address else None,
        )
        repo.add(user)

    @handle(SetUserActive)
    def set_active(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.set_active(command.is_active)
        repo.add(user)
        logger.info("user_activation_changed", user_id=str(user.id), is_active=user.is_active)

    @handle(RecordLogin)
    def record_login(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.record_login(command.logged_in_at)
        repo.add(user)
