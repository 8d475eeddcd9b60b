import unittest

from archnet_bot.models.api import DiscountTier
from archnet_bot.models.wizard import WizardState
from archnet_bot.services.purchase import (
    BackToQuantity,
    BrowsePlans,
    CancelOrder,
    ChoosePayment,
    ChooseQuantity,
    ConfirmOrder,
    PlaceOrder,
    PlanLoaded,
    RecoverToPlans,
    ShowCancelled,
    ShowConfirmation,
    ShowPayments,
    ShowPlans,
    ShowQuantities,
    build_quantity_options,
    clamp_page,
    transition,
)
from archnet_bot.states.purchase import WizardStep

from fakes import BASIC_PLAN


class QuantityOptionTests(unittest.TestCase):
    def test_single_month_is_first_and_backend_order_is_kept(self):
        tiers = [DiscountTier(6, 20), DiscountTier(1, 5), DiscountTier(3, 10)]
        options = build_quantity_options(tiers)
        self.assertEqual(
            [(o.quantity, o.discount) for o in options],
            [(1, 0), (6, 20), (3, 10)],
        )

    def test_plan_without_tiers_offers_one_month(self):
        self.assertEqual(build_quantity_options([]), [DiscountTier(1, 0)])

    def test_clamp_page(self):
        self.assertEqual(clamp_page(-4, 3), 0)
        self.assertEqual(clamp_page(1, 3), 1)
        self.assertEqual(clamp_page(9, 3), 2)
        self.assertEqual(clamp_page(2, 0), 0)


class TransitionTests(unittest.TestCase):
    def setUp(self):
        self.fresh = WizardState.from_plan(BASIC_PLAN)

    def test_plan_selection_seeds_state(self):
        result = transition(None, PlanLoaded(plan=BASIC_PLAN))
        self.assertEqual(result.state.plan_id, 1)
        self.assertIsNone(result.state.quantity)
        self.assertEqual(result.state.step, WizardStep.SELECTING_QUANTITY)
        self.assertIsInstance(result.effects[0], ShowQuantities)

    def test_new_plan_selection_overwrites_progress(self):
        advanced = transition(self.fresh, ChooseQuantity(3)).state
        result = transition(advanced, PlanLoaded(plan=BASIC_PLAN))
        self.assertIsNone(result.state.quantity)

    def test_changing_quantity_clears_payment(self):
        state = transition(self.fresh, ChooseQuantity(3)).state
        state = transition(state, ChoosePayment(7, "Card")).state
        self.assertEqual(state.step, WizardStep.CONFIRMING_ORDER)

        result = transition(state, ChooseQuantity(1))
        self.assertEqual(result.state.quantity, 1)
        self.assertIsNone(result.state.payment_id)
        self.assertEqual(result.effects, (ShowPayments(plan_name="Basic", quantity=1),))

    def test_unoffered_quantity_reshows_options(self):
        result = transition(self.fresh, ChooseQuantity(12))
        self.assertIs(result.state, self.fresh)
        self.assertIsInstance(result.effects[0], ShowQuantities)

    def test_payment_before_quantity_goes_back_to_quantity(self):
        result = transition(self.fresh, ChoosePayment(7, "Card"))
        self.assertIsNone(result.state.payment_id)
        self.assertIsInstance(result.effects[0], ShowQuantities)

    def test_payment_selection_moves_to_confirmation(self):
        state = transition(self.fresh, ChooseQuantity(3)).state
        result = transition(state, ChoosePayment(7, "Card"))
        self.assertEqual(result.state.payment_name, "Card")
        self.assertEqual(result.effects, (ShowConfirmation(state=result.state),))

    def test_confirm_clears_state_before_order_is_placed(self):
        state = transition(self.fresh, ChooseQuantity(3)).state
        state = transition(state, ChoosePayment(7, "Card")).state
        result = transition(state, ConfirmOrder())
        self.assertIsNone(result.state)
        (effect,) = result.effects
        self.assertIsInstance(effect, PlaceOrder)
        self.assertEqual((effect.state.plan_id, effect.state.quantity, effect.state.payment_id), (1, 3, 7))

    def test_continuations_without_state_recover_to_catalog(self):
        for event in (ChooseQuantity(1), ChoosePayment(7, "Card"), BackToQuantity(), ConfirmOrder()):
            with self.subTest(event=event):
                result = transition(None, event)
                self.assertIsNone(result.state)
                self.assertIsInstance(result.effects[0], RecoverToPlans)

    def test_cancel_deletes_state(self):
        result = transition(self.fresh, CancelOrder())
        self.assertIsNone(result.state)
        self.assertEqual(result.effects, (ShowCancelled(),))

    def test_browsing_keeps_state(self):
        result = transition(self.fresh, BrowsePlans(page=2))
        self.assertIs(result.state, self.fresh)
        self.assertEqual(result.effects, (ShowPlans(page=2),))


if __name__ == "__main__":
    unittest.main()
