import unittest

from archnet_bot.services import callbacks
from archnet_bot.services.purchase import (
    BackToPayments,
    BackToPlans,
    BackToQuantity,
    BrowsePlans,
    CancelOrder,
    ChoosePayment,
    ChooseQuantity,
    ConfirmOrder,
    LeavePlans,
    PickPlan,
)


class CallbackCodecTests(unittest.TestCase):
    def test_builders_follow_domain_action_param_layout(self):
        self.assertEqual(callbacks.plan_page(2), "plan:page:2")
        self.assertEqual(callbacks.plan_select(15), "plan:select:15")
        self.assertEqual(callbacks.qty_months(3), "qty:months:3")
        self.assertEqual(callbacks.pay_select(7, "Card"), "pay:select:7:Card")
        self.assertEqual(callbacks.order_confirm(), "order:confirm")
        self.assertEqual(callbacks.lang_select("fa"), "lang:fa")

    def test_wizard_buttons_decode_to_events(self):
        cases = {
            "plan:page:3": BrowsePlans(page=3),
            "plan:page:-1": BrowsePlans(page=-1),
            "plan:select:9": PickPlan(plan_id=9),
            "plan:back": LeavePlans(),
            "qty:months:6": ChooseQuantity(quantity=6),
            "qty:back": BackToPlans(),
            "pay:select:7:Card": ChoosePayment(payment_id=7, payment_name="Card"),
            "pay:back": BackToQuantity(),
            "order:confirm": ConfirmOrder(),
            "order:back": BackToPayments(),
            "order:cancel": CancelOrder(),
        }
        for data, expected in cases.items():
            with self.subTest(data=data):
                self.assertEqual(callbacks.decode_wizard_event(data), expected)

    def test_payment_name_may_contain_separator(self):
        event = callbacks.decode_wizard_event("pay:select:3:Crypto: USDT")
        self.assertEqual(event, ChoosePayment(payment_id=3, payment_name="Crypto: USDT"))

    def test_malformed_payloads_are_ignored(self):
        for data in (None, "", "plan", "plan:", ":page", "plan:page:x", "qty:months:0", "pay:select:abc:Card", "order:refund", "shop:open"):
            with self.subTest(data=data):
                self.assertIsNone(callbacks.decode_wizard_event(data))

    def test_long_payment_names_are_cut_to_fit_telegram_limit(self):
        data = callbacks.pay_select(12345, "Пополнение через банковскую карту любого банка")
        self.assertLessEqual(len(data.encode("utf-8")), callbacks.MAX_CALLBACK_BYTES)
        self.assertTrue(data.startswith("pay:select:12345:Пополнение"))
        event = callbacks.decode_wizard_event(data)
        self.assertEqual(event.payment_id, 12345)

    def test_pack_refuses_oversized_payloads(self):
        with self.assertRaises(ValueError):
            callbacks.pack("plan", "select", "x" * 80)


if __name__ == "__main__":
    unittest.main()
