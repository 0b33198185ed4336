"""
Tests for structured logging and PII masking.
"""
import json
import logging

from django.test import SimpleTestCase

from orders.infra.pii_masker import mask_email, mask_name, mask_phone, mask_pii_in_dict
from orders.utils.logging import JsonFormatter


class PIIMaskerTest(SimpleTestCase):

    def test_maskers(self):
        self.assertEqual(mask_email("awa.diop@example.sn"), "aw******@example.sn")
        self.assertEqual(mask_phone("+221771234567"), "+2*********67")
        self.assertEqual(mask_name("Awa Diop"), "A******p")

    def test_mask_nested_dict(self):
        masked = mask_pii_in_dict({
            "order_id": "abc",
            "customer": {"customer_name": "Awa Diop", "customer_phone": "+221771234567"},
            "items": [{"name": "Moussa"}],
            "delivery_address": "Rue 10, Médina",
        })
        self.assertEqual(masked["order_id"], "abc")
        self.assertNotIn("Diop", json.dumps(masked))
        self.assertNotIn("771234", json.dumps(masked))
        self.assertEqual(masked["items"][0]["name"], "M****a")
        self.assertEqual(masked["delivery_address"], "********")


class JsonFormatterTest(SimpleTestCase):

    def test_format_includes_extra_fields(self):
        record = logging.LogRecord(
            name="orders.services.orders",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="order_created",
            args=(),
            exc_info=None,
        )
        record.order_id = "1234"
        record.quantity = 2
        record.unrelated = "dropped"

        line = json.loads(JsonFormatter().format(record))

        self.assertEqual(line["message"], "order_created")
        self.assertEqual(line["level"], "INFO")
        self.assertEqual(line["order_id"], "1234")
        self.assertEqual(line["quantity"], 2)
        self.assertNotIn("unrelated", line)
        self.assertTrue(line["timestamp"].endswith("Z"))
