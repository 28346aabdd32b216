"""BDD tests for the order status lifecycle."""

from pytest_bdd import parsers, scenarios, then

scenarios("features/order_status.feature")


@then(parsers.cfparse('the status history reads "{statuses}"'))
def history_reads(placed, statuses):
    from pizzeria.ordering import workflows

    order = workflows.find_order(placed["order"].order_number)
    recorded = [h.status for h in sorted(order.status_history, key=lambda h: h.timestamp)]
    assert recorded == [s.strip() for s in statuses.split(",")]


@then(parsers.cfparse('the customer is told "{message}"'))
def customer_told(broadcasts, customer, message):
    updates = broadcasts.emitted("orderStatusUpdate", room=f"user-{customer.id}")
    assert updates[-1]["payload"]["message"] == message
