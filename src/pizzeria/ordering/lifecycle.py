"""Order lifecycle commands: payment confirmation, status changes, cancellation, refunds, rating."""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from pizzeria.domain import logger, pizzeria
from pizzeria.ordering.order import Order


@pizzeria.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    gateway_payment_id = String(required=True, max_length=100)
    gateway_signature = String(required=True, max_length=255)
    actor = String(max_length=100)


@pizzeria.command(part_of="Order")
class ConfirmCashOnDelivery:
    order_id = Identifier(required=True)
    actor = String(max_length=100)


@pizzeria.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor = String(max_length=100)
    notes = Text()


@pizzeria.command(part_of="Order")
class CancelOrder:
    """Customer-initiated cancellation; stricter than an admin status change."""

    order_id = Identifier(required=True)
    actor = String(max_length=100)
    reason = Text()


@pizzeria.command(part_of="Order")
class RecordRefund:
    order_id = Identifier(required=True)
    gateway_refund_id = String(max_length=100)


@pizzeria.command(part_of="Order")
class RateOrder:
    order_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    review = Text()


@pizzeria.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.complete_payment(command.gateway_payment_id, command.gateway_signature, actor=command.actor)
        repo.add(order)
        logger.info("payment_confirmed", order_id=str(order.id), order_number=order.order_number)

    @handle(ConfirmCashOnDelivery)
    def confirm_cash_on_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm_cash_on_delivery(actor=command.actor)
        repo.add(order)
        logger.info("cod_confirmed", order_id=str(order.id), order_number=order.order_number)

    @handle(ChangeOrderStatus)
    def change_status(self, command):
        """Returns the status the order had before the change."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.transition_to(command.status, actor=command.actor, notes=command.notes)
        repo.add(order)
        logger.info("order_status_changed", order_id=str(order.id), previous=previous, status=order.status)
        return previous

    @handle(CancelOrder)
    def cancel(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel_by_customer(actor=command.actor, reason=command.reason)
        repo.add(order)
        logger.info("order_cancelled", order_id=str(order.id), by=command.actor)

    @handle(RecordRefund)
    def record_refund(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_refund(command.gateway_refund_id)
        repo.add(order)

    @handle(RateOrder)
    def rate(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.rate(command.rating, command.review)
        repo.add(order)
