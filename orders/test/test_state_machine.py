"""
Tests for order and payment status transitions.
"""
from uuid import uuid4

from django.test import SimpleTestCase

from orders.domain.exceptions import InvalidTransition
from orders.domain.order import CustomerInfo, Order, OrderItem, OrderStatus, PaymentStatus
from orders.domain.state_machine import ORDER_TRANSITIONS, PAYMENT_TRANSITIONS, OrderStateMachine


def make_order(**kwargs):
    customer = CustomerInfo(name="Moussa Fall", email="moussa@example.sn", phone="+221700000000")
    item = OrderItem(product_id=uuid4(), product_name="Lait Frais (1L)", product_price="1200", quantity=1)
    return Order(customer=customer, items=[item], **kwargs)


class OrderStateMachineTest(SimpleTestCase):
    """Tests for OrderStateMachine."""

    def setUp(self):
        self.machine = OrderStateMachine()

    def test_order_happy_path(self):
        order = make_order()
        for target in (OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.COMPLETED):
            change = self.machine.transition(order, target)
            self.assertEqual(change.dimension, "order_status")
            self.assertEqual(change.current, target.value)
        self.assertEqual(order.order_status, OrderStatus.COMPLETED)
        self.assertIsNotNone(order.completed_at)

    def test_every_non_terminal_status_can_be_cancelled(self):
        for status in (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY):
            with self.subTest(status=status):
                order = make_order(order_status=status)
                change = self.machine.transition(order, OrderStatus.CANCELLED)
                self.assertEqual(change.previous, status.value)
                self.assertEqual(order.order_status, OrderStatus.CANCELLED)
                self.assertIsNone(order.completed_at)

    def test_terminal_statuses_reject_everything(self):
        for status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
            self.assertTrue(self.machine.is_terminal(status))
            for target in OrderStatus:
                with self.subTest(status=status, target=target):
                    order = make_order(order_status=status)
                    with self.assertRaises(InvalidTransition):
                        self.machine.transition(order, target)
                    self.assertEqual(order.order_status, status)

    def test_skipping_a_step_is_rejected(self):
        order = make_order()
        with self.assertRaises(InvalidTransition):
            self.machine.transition(order, OrderStatus.READY)
        self.assertEqual(order.order_status, OrderStatus.PENDING)

    def test_same_status_is_not_a_transition(self):
        order = make_order(order_status=OrderStatus.CONFIRMED)
        with self.assertRaises(InvalidTransition):
            self.machine.transition(order, OrderStatus.CONFIRMED)

    def test_payment_transitions(self):
        order = make_order()
        self.machine.transition(order, PaymentStatus.FAILED)
        self.machine.transition(order, PaymentStatus.PENDING)
        change = self.machine.transition(order, PaymentStatus.COMPLETED)
        self.assertEqual(change.dimension, "payment_status")
        self.assertTrue(order.is_paid)
        self.machine.transition(order, PaymentStatus.REFUNDED)
        self.assertTrue(self.machine.is_terminal(order.payment_status))

    def test_completed_payment_cannot_fail(self):
        order = make_order(payment_status=PaymentStatus.COMPLETED)
        with self.assertRaises(InvalidTransition):
            self.machine.transition(order, PaymentStatus.FAILED)

    def test_dimensions_do_not_mix(self):
        self.assertFalse(self.machine.can_transition(OrderStatus.PENDING, PaymentStatus.COMPLETED))

    def test_tables_cover_every_status(self):
        self.assertEqual(set(ORDER_TRANSITIONS), set(OrderStatus))
        self.assertEqual(set(PAYMENT_TRANSITIONS), set(PaymentStatus))
