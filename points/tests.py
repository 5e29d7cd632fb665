from decimal import Decimal
from io import StringIO
from unittest import mock

from django.conf import settings
from django.contrib.auth.models import User
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, override_settings

from points.audit import AuditTrailStore
from points.dual import DualBalanceLedger, RevokeResult
from points.engine import PointsEngine
from points.ledger import CurrencyLedger
from points.models import AwardAudit, PointsAccount, PointsLedgerEntry
from points.providers import DivisorPointsProvider, FixedPointsProvider, get_provider
from points.router import TriggerRouter, item_guard
from points.selectors import item_history, leaderboard, user_rank
from submissions import services
from submissions.models import Submission


def points_config(**overrides):
    return {**settings.POINTS, **overrides}


real_add = CurrencyLedger.add
real_deduct = CurrencyLedger.deduct_up_to


def balances(user):
    return DualBalanceLedger().get_user_balances(user)


def audit_for(item):
    return AuditTrailStore().peek(item)


class PointsTestMixin:
    def setUp(self):
        self.user = User.objects.create_user("pavel", email="pavel@example.com", password="x")

    def make_item(self, category="realization", status="pending", **fields):
        item = Submission.objects.create(owner=self.user, category=category, status=status, **fields)
        item.refresh_from_db()
        return item

    def make_invoice(self, value, status="pending"):
        return self.make_item(category="invoice", status=status, invoice_value=Decimal(value))

    def spend(self, user, amount):
        CurrencyLedger().add(user, -amount, "purchase", "Shop order", point_type="spendable")


class ProviderTests(TestCase):
    def test_fixed_provider_returns_constant(self):
        item = Submission(category="realization")
        self.assertEqual(FixedPointsProvider(default=2500).compute(item), 2500)

    def test_fixed_provider_honours_stored_override(self):
        item = Submission(category="realization", points_assigned=3000)
        self.assertEqual(FixedPointsProvider(default=2500).compute(item), 3000)
        no_override = FixedPointsProvider(default=2500, allow_override=False)
        self.assertEqual(no_override.compute(item), 2500)

    def test_divisor_provider_floors(self):
        provider = DivisorPointsProvider(field="invoice_value", divisor=10)
        self.assertEqual(provider.compute(Submission(invoice_value=Decimal("25009.99"))), 2500)
        self.assertEqual(provider.compute(Submission(invoice_value=Decimal("9.99"))), 0)

    def test_divisor_provider_never_negative(self):
        provider = DivisorPointsProvider(field="invoice_value", divisor=10)
        self.assertEqual(provider.compute(Submission(invoice_value=None)), 0)
        self.assertEqual(provider.compute(Submission(invoice_value=Decimal("-500"))), 0)

    def test_divisor_must_be_positive(self):
        with self.assertRaises(ValueError):
            DivisorPointsProvider(field="invoice_value", divisor=0)

    def test_providers_come_from_settings(self):
        self.assertIsInstance(get_provider("realization"), FixedPointsProvider)
        self.assertIsInstance(get_provider("invoice"), DivisorPointsProvider)
        with self.assertRaises(KeyError):
            get_provider("unknown")


class DualBalanceLedgerTests(PointsTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.dual = DualBalanceLedger()

    def test_award_hits_both_tracks(self):
        self.assertTrue(self.dual.award(self.user, 500, "approval_of_realization", "memo", "realization:1"))
        self.assertEqual(balances(self.user), {"spendable": 500, "cumulative": 500})
        refs = set(PointsLedgerEntry.objects.values_list("reference", flat=True))
        self.assertEqual(refs, {"approval_of_realization", "leaderboard_approval_of_realization"})

    def test_zero_amounts_are_noops(self):
        self.assertTrue(self.dual.award(self.user, 0, "ref"))
        self.assertTrue(self.dual.revoke(self.user, 0, "ref"))
        self.assertFalse(PointsLedgerEntry.objects.exists())

    def test_negative_amounts_are_refused(self):
        self.assertFalse(self.dual.award(self.user, -5, "ref"))
        self.assertFalse(self.dual.revoke(self.user, -5, "ref"))
        self.assertFalse(PointsLedgerEntry.objects.exists())

    def test_failed_cumulative_award_is_compensated(self):
        def failing_add(ledger, user, amount, reference, memo="", item_ref="", point_type=None):
            if point_type == "cumulative" and amount > 0:
                return False
            return real_add(ledger, user, amount, reference, memo, item_ref, point_type)

        with mock.patch.object(CurrencyLedger, "add", new=failing_add):
            self.assertFalse(self.dual.award(self.user, 700, "approval_of_invoice", "memo", "invoice:3"))

        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})
        self.assertTrue(
            PointsLedgerEntry.objects.filter(reference="approval_of_invoice_rollback", delta=-700).exists()
        )

    def test_revoke_never_drives_spendable_negative(self):
        self.dual.award(self.user, 1000, "ref")
        self.spend(self.user, 900)

        result = self.dual.revoke(self.user, 1000, "ref")

        self.assertTrue(result.success)
        self.assertEqual(result.spendable, 100)
        self.assertEqual(result.cumulative, 1000)
        self.assertEqual(result.shortfall, 900)
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_revoke_with_empty_spendable_still_claws_back_cumulative(self):
        self.dual.award(self.user, 400, "ref")
        self.spend(self.user, 400)

        result = self.dual.revoke(self.user, 400, "ref")

        self.assertEqual((result.spendable, result.cumulative), (0, 400))
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_full_policy_can_take_cumulative_below_zero(self):
        CurrencyLedger().add(self.user, 100, "seed", point_type="spendable")
        CurrencyLedger().add(self.user, 100, "seed", point_type="cumulative")

        result = self.dual.revoke(self.user, 300, "ref")

        self.assertEqual(result.cumulative, 300)
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": -200})

    def test_clamp_policy_stops_cumulative_at_zero(self):
        CurrencyLedger().add(self.user, 100, "seed", point_type="spendable")
        CurrencyLedger().add(self.user, 100, "seed", point_type="cumulative")

        with override_settings(POINTS=points_config(CUMULATIVE_REVOKE_POLICY="clamp")):
            result = self.dual.revoke(self.user, 300, "ref")

        self.assertEqual((result.spendable, result.cumulative), (100, 100))
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_failed_spendable_revoke_leaves_both_tracks(self):
        self.dual.award(self.user, 500, "ref")

        def failing_deduct(ledger, user, amount, reference, memo="", item_ref="", point_type=None):
            raise DatabaseError("lock wait timeout")

        with mock.patch.object(CurrencyLedger, "deduct_up_to", new=failing_deduct):
            result = self.dual.revoke(self.user, 500, "ref")

        self.assertFalse(result.success)
        self.assertEqual((result.spendable, result.cumulative), (0, 0))
        self.assertEqual(balances(self.user), {"spendable": 500, "cumulative": 500})

    def test_failed_cumulative_revoke_puts_spendable_back(self):
        self.dual.award(self.user, 500, "ref")

        def failing_add(ledger, user, amount, reference, memo="", item_ref="", point_type=None):
            if point_type == "cumulative" and amount < 0:
                return False
            return real_add(ledger, user, amount, reference, memo, item_ref, point_type)

        with mock.patch.object(CurrencyLedger, "add", new=failing_add):
            result = self.dual.revoke(self.user, 500, "ref", "memo", "realization:9")

        self.assertFalse(result.success)
        self.assertEqual(balances(self.user), {"spendable": 500, "cumulative": 500})
        self.assertTrue(
            PointsLedgerEntry.objects.filter(reference="revoke_ref_rollback", delta=500).exists()
        )

    def test_spendable_amount_is_decided_under_the_row_lock(self):
        CurrencyLedger().add(self.user, 100, "seed", point_type="spendable")
        CurrencyLedger().add(self.user, 100, "seed", point_type="cumulative")

        def purchase_then_deduct(ledger, user, amount, reference, memo="", item_ref="", point_type=None):
            # a purchase from another request commits just before the lock is taken
            if point_type == "spendable":
                real_add(ledger, user, -100, "purchase", "Shop order", "", "spendable")
            return real_deduct(ledger, user, amount, reference, memo, item_ref, point_type)

        with mock.patch.object(CurrencyLedger, "deduct_up_to", new=purchase_then_deduct):
            result = self.dual.revoke(self.user, 100, "ref")

        self.assertTrue(result.success)
        self.assertEqual(result.spendable, 0)
        self.assertEqual(result.shortfall, 100)
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_deduct_up_to_stops_at_zero(self):
        ledger = CurrencyLedger()
        ledger.add(self.user, 30, "seed", point_type="spendable")

        self.assertEqual(ledger.deduct_up_to(self.user, 50, "revoke_ref", point_type="spendable"), 30)
        self.assertEqual(ledger.deduct_up_to(self.user, 50, "revoke_ref", point_type="spendable"), 0)
        self.assertEqual(ledger.get_balance(self.user, "spendable"), 0)
        self.assertEqual(PointsLedgerEntry.objects.filter(reference="revoke_ref").count(), 1)

    def test_unavailable_ledger_fails_without_writes(self):
        with override_settings(POINTS=points_config(LEDGER_ENABLED=False)):
            self.assertFalse(self.dual.award(self.user, 100, "ref"))
            self.assertFalse(self.dual.revoke(self.user, 100, "ref"))
        with override_settings(POINTS=points_config(REGISTERED_TYPES=["spendable"])):
            self.assertFalse(self.dual.award(self.user, 100, "ref"))
        self.assertFalse(PointsLedgerEntry.objects.exists())

    def test_shortfall_is_logged_as_info(self):
        self.dual.award(self.user, 50, "ref")
        self.spend(self.user, 50)
        with self.assertLogs("points.dual", level="INFO") as logs:
            self.dual.revoke(self.user, 50, "ref")
        self.assertTrue(any("No-debt policy" in line for line in logs.output))

    def test_revoke_result_is_falsy_on_failure(self):
        self.assertFalse(RevokeResult(False, 10))
        self.assertEqual(RevokeResult(False, 10).shortfall, 0)


class EngineScenarioTests(PointsTestMixin, TestCase):
    """End-to-end award/revoke flows driven through the submission entry points."""

    def test_publish_awards_both_tracks(self):
        item = self.make_invoice("25000")

        services.approve(item)

        self.assertEqual(balances(self.user), {"spendable": 2500, "cumulative": 2500})
        self.assertEqual(audit_for(item).last_awarded_points, 2500)

    def test_value_change_while_published_awards_only_the_delta(self):
        item = self.make_invoice("25000")
        services.approve(item)
        item.refresh_from_db()

        services.save_fields(item, invoice_value=Decimal("30000"))

        self.assertEqual(balances(self.user), {"spendable": 3000, "cumulative": 3000})
        self.assertEqual(audit_for(item).last_awarded_points, 3000)
        deltas = list(
            PointsLedgerEntry.objects.filter(account__point_type="spendable", item_ref=f"invoice:{item.pk}")
            .order_by("id").values_list("delta", flat=True)
        )
        self.assertEqual(deltas, [2500, 500])

    def test_value_decrease_while_published_revokes_the_difference(self):
        item = self.make_invoice("30000")
        services.approve(item)
        item.refresh_from_db()

        services.save_fields(item, invoice_value=Decimal("25000"))

        self.assertEqual(balances(self.user), {"spendable": 2500, "cumulative": 2500})
        self.assertEqual(audit_for(item).last_awarded_points, 2500)

    def test_admin_override_on_published_realization(self):
        item = self.make_item()
        services.approve(item)
        item.refresh_from_db()

        services.save_fields(item, points_assigned=3000)

        self.assertEqual(balances(self.user)["spendable"], 3000)
        self.assertEqual(audit_for(item).last_awarded_points, 3000)

    def test_reject_after_spending_respects_no_debt(self):
        item = self.make_item()
        services.approve(item)
        self.spend(self.user, 2300)

        services.reject(item, reason="Photos missing")

        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})
        audit = audit_for(item)
        self.assertEqual(audit.last_awarded_points, 0)
        self.assertEqual(audit.unrecovered_points, 2300)

    def test_duplicate_signals_award_once(self):
        item = self.make_item()

        # editor path: full save emits a status change and then fields_finalized
        services.save_fields(item, status="publish")
        TriggerRouter().fields_finalized(item.pk)
        TriggerRouter().lifecycle_state_changed(item.pk, "pending", "publish")

        entries = PointsLedgerEntry.objects.filter(
            account__point_type="spendable", item_ref=f"realization:{item.pk}"
        )
        self.assertEqual(list(entries.values_list("delta", flat=True)), [2500])
        self.assertEqual(balances(self.user)["spendable"], 2500)

    def test_round_trip_publish_reject_publish(self):
        CurrencyLedger().add(self.user, 1000, "seed", point_type="spendable")
        item = self.make_item()

        services.approve(item)
        self.assertEqual(balances(self.user)["spendable"], 3500)
        services.reject(item)
        self.assertEqual(balances(self.user)["spendable"], 1000)
        services.approve(item)
        self.assertEqual(balances(self.user)["spendable"], 3500)
        self.assertEqual(audit_for(item).last_awarded_points, 2500)

    def test_convergence_over_status_sequence(self):
        item = self.make_item()
        for status in ["publish", "pending", "publish", "trash", "draft", "publish", "publish", "rejected"]:
            services.change_status(item, status)
            expected = 2500 if status == "publish" else 0
            self.assertEqual(audit_for(item).last_awarded_points, expected, status)
            self.assertEqual(balances(self.user), {"spendable": expected, "cumulative": expected}, status)

    def test_spendable_never_negative_over_mixed_operations(self):
        first = self.make_item()
        second = self.make_invoice("12345")
        steps = [
            (services.approve, first), (services.approve, second),
            (self.spend, 3000), (services.reject, first),
            (services.approve, first), (self.spend, 2000),
            (services.trash, second), (services.destroy, first),
        ]
        for action, arg in steps:
            if action == self.spend:
                spendable = balances(self.user)["spendable"]
                self.spend(self.user, min(arg, spendable))
            else:
                action(arg)
            self.assertGreaterEqual(balances(self.user)["spendable"], 0)

    def test_self_heal_populates_stored_value(self):
        item = self.make_item()
        self.assertEqual(item.points_assigned, 2500)

        invoice = self.make_invoice("4321")
        self.assertEqual(invoice.points_assigned, 432)

    def test_pending_items_hold_no_points(self):
        item = self.make_item()
        services.save_fields(item, title="Terrace")
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})
        self.assertEqual(audit_for(item).last_awarded_points, 0)

    def test_deleting_published_item_revokes_and_finalizes(self):
        item = self.make_item()
        services.approve(item)
        item_pk = item.pk
        audit_pk = audit_for(item).pk

        services.destroy(item)

        self.assertFalse(Submission.objects.filter(pk=item_pk).exists())
        audit = AwardAudit.objects.get(pk=audit_pk)
        self.assertEqual(audit.last_awarded_points, 0)
        self.assertTrue(audit.is_finalized)
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_deleting_trashed_item_does_not_double_revoke(self):
        item = self.make_item()
        services.approve(item)
        services.trash(item)
        audit_pk = audit_for(item).pk

        services.destroy(item)

        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})
        self.assertTrue(AwardAudit.objects.get(pk=audit_pk).is_finalized)

    def test_queryset_delete_revokes_each_item(self):
        self.make_item(status="publish")
        self.make_item(status="publish")
        self.assertEqual(balances(self.user)["spendable"], 5000)

        Submission.objects.filter(owner=self.user).delete()

        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})


class EngineUnitTests(PointsTestMixin, TestCase):
    def test_second_synchronize_issues_no_ledger_calls(self):
        item = self.make_item(status="publish")
        engine = PointsEngine()

        with mock.patch.object(DualBalanceLedger, "award") as award, \
                mock.patch.object(DualBalanceLedger, "revoke") as revoke:
            self.assertTrue(engine.synchronize(item))
            self.assertTrue(engine.synchronize(item))

        award.assert_not_called()
        revoke.assert_not_called()
        self.assertEqual(audit_for(item).last_awarded_points, 2500)

    def test_unavailable_ledger_leaves_audit_and_retries_later(self):
        item = self.make_item()

        with override_settings(POINTS=points_config(LEDGER_ENABLED=False)):
            self.assertTrue(services.approve(item))
        item.refresh_from_db()
        self.assertEqual(item.status, "publish")
        self.assertEqual(audit_for(item).last_awarded_points, 0)

        # the next signal for the item picks the award up
        TriggerRouter().fields_finalized(item.pk)
        self.assertEqual(audit_for(item).last_awarded_points, 2500)
        self.assertEqual(balances(self.user)["spendable"], 2500)

    def test_failed_revoke_keeps_audit(self):
        item = self.make_item(status="publish")
        with mock.patch.object(DualBalanceLedger, "revoke", return_value=RevokeResult(False, 2500)):
            self.assertFalse(PointsEngine().revoke(item, "rejected"))
        self.assertEqual(audit_for(item).last_awarded_points, 2500)

    def test_retry_after_failed_revoke_takes_only_this_items_points(self):
        first = self.make_item(status="publish")
        self.make_item(status="publish")
        self.assertEqual(balances(self.user), {"spendable": 5000, "cumulative": 5000})

        def failing_add(ledger, user, amount, reference, memo="", item_ref="", point_type=None):
            if point_type == "cumulative" and amount < 0:
                return False
            return real_add(ledger, user, amount, reference, memo, item_ref, point_type)

        with mock.patch.object(CurrencyLedger, "add", new=failing_add):
            services.reject(first)

        self.assertEqual(balances(self.user), {"spendable": 5000, "cumulative": 5000})
        self.assertEqual(audit_for(first).last_awarded_points, 2500)

        first.refresh_from_db()
        self.assertTrue(PointsEngine().synchronize(first))

        self.assertEqual(balances(self.user), {"spendable": 2500, "cumulative": 2500})
        self.assertEqual(audit_for(first).last_awarded_points, 0)

    def test_audit_mirrors_value_stored_on_item(self):
        item = self.make_invoice("25000")
        self.assertEqual(audit_for(item).recorded_points, 2500)

        services.approve(item)
        item.refresh_from_db()
        services.save_fields(item, invoice_value=Decimal("30000"))

        # the stored value lags the computed one
        audit = audit_for(item)
        self.assertEqual(audit.last_awarded_points, 3000)
        self.assertEqual(audit.recorded_points, 2500)

        item.refresh_from_db()
        services.save_fields(item, points_assigned=3000)
        self.assertEqual(audit_for(item).recorded_points, 3000)

        services.reject(item)
        audit = audit_for(item)
        self.assertEqual(audit.last_awarded_points, 0)
        self.assertEqual(audit.recorded_points, 3000)

    def test_invalid_computed_value_is_refused(self):
        with override_settings(POINTS=points_config(MAX_POINTS=1000)):
            item = self.make_item(status="publish")
            self.assertFalse(PointsEngine().synchronize(item))

        self.assertIsNone(item.points_assigned)
        self.assertEqual(balances(self.user), {"spendable": 0, "cumulative": 0})
        self.assertFalse(PointsLedgerEntry.objects.exists())

    def test_negative_provider_value_is_refused(self):
        item = self.make_item(status="pending")
        negative = mock.Mock()
        negative.compute.return_value = -5
        engine = PointsEngine(provider_for=lambda category: negative)

        with mock.patch.object(DualBalanceLedger, "award") as award:
            item.status = "publish"
            self.assertFalse(engine.synchronize(item))
        award.assert_not_called()

    def test_synchronize_on_inactive_item_revokes_leftovers(self):
        item = self.make_item(status="publish")
        # status flipped without any signal reaching the engine
        Submission.objects.filter(pk=item.pk).update(status="rejected")
        item.refresh_from_db()

        self.assertTrue(PointsEngine().synchronize(item))

        self.assertEqual(audit_for(item).last_awarded_points, 0)
        self.assertEqual(balances(self.user)["spendable"], 0)

    def test_memo_names_the_item(self):
        item = self.make_item(title="Roof in Brno")
        services.approve(item)
        entry = PointsLedgerEntry.objects.filter(account__point_type="spendable").first()
        self.assertIn("Roof in Brno", entry.memo)

    def test_memo_falls_back_to_category_and_id(self):
        item = self.make_item()
        services.approve(item)
        entry = PointsLedgerEntry.objects.filter(account__point_type="spendable").first()
        self.assertIn(f"Realization #{item.pk}", entry.memo)


class RouterTests(PointsTestMixin, TestCase):
    def test_guard_blocks_nested_entry(self):
        with item_guard("submissions.submission:1") as outer:
            with item_guard("submissions.submission:1") as inner:
                self.assertTrue(outer)
                self.assertFalse(inner)
            with item_guard("submissions.submission:2") as other:
                self.assertTrue(other)
        with item_guard("submissions.submission:1") as again:
            self.assertTrue(again)

    def test_nested_signal_for_same_item_is_ignored(self):
        item = self.make_item()
        engine = mock.Mock()
        router = TriggerRouter(engine=engine)

        with item_guard(router._key(item.pk)):
            self.assertTrue(router.fields_finalized(item.pk))
            self.assertTrue(router.lifecycle_state_changed(item.pk, "pending", "publish"))

        engine.synchronize.assert_not_called()
        engine.revoke.assert_not_called()

    def test_router_uses_stored_status_not_payload(self):
        item = self.make_item(status="publish")
        engine = mock.Mock()

        TriggerRouter(engine=engine).lifecycle_state_changed(item.pk, "publish", "rejected")

        engine.synchronize.assert_called_once()
        engine.revoke.assert_not_called()

    def test_leaving_publish_revokes_with_reason(self):
        item = self.make_item(status="pending")
        engine = mock.Mock()

        TriggerRouter(engine=engine).lifecycle_state_changed(item.pk, "publish", "pending")

        engine.revoke.assert_called_once()
        self.assertEqual(engine.revoke.call_args.kwargs["reason"], "pending")

    def test_inactive_to_inactive_synchronizes(self):
        item = self.make_item(status="draft")
        engine = mock.Mock()

        TriggerRouter(engine=engine).lifecycle_state_changed(item.pk, "draft", "pending")

        engine.synchronize.assert_called_once()

    def test_fields_signal_for_missing_item_is_noop(self):
        engine = mock.Mock()
        self.assertTrue(TriggerRouter(engine=engine).fields_finalized(999999))
        engine.synchronize.assert_not_called()


class SelectorTests(PointsTestMixin, TestCase):
    def test_leaderboard_orders_by_cumulative(self):
        other = User.objects.create_user("jana", password="x")
        dual = DualBalanceLedger()
        dual.award(self.user, 100, "ref")
        dual.award(other, 300, "ref")

        board = list(leaderboard())
        self.assertEqual([a.user for a in board], [other, self.user])
        self.assertEqual(user_rank(other), 1)
        self.assertEqual(user_rank(self.user), 2)

    def test_user_without_points_has_no_rank(self):
        self.assertIsNone(user_rank(self.user))

    def test_item_history_lists_entries_oldest_first(self):
        item = self.make_item()
        services.approve(item)
        services.reject(item)

        deltas = [e.delta for e in item_history(f"realization:{item.pk}") if e.account.point_type == "spendable"]
        self.assertEqual(deltas, [2500, -2500])


class ReconcileCommandTests(PointsTestMixin, TestCase):
    def test_reconcile_fixes_out_of_date_items(self):
        item = self.make_invoice("10000", status="publish")
        Submission.objects.filter(pk=item.pk).update(invoice_value=Decimal("20000"))

        out = StringIO()
        call_command("reconcile_points", stdout=out)

        self.assertEqual(audit_for(item).last_awarded_points, 2000)
        self.assertEqual(balances(self.user)["spendable"], 2000)
        self.assertIn("1 changed", out.getvalue())

    def test_dry_run_does_not_touch_the_ledger(self):
        item = self.make_invoice("10000", status="publish")
        Submission.objects.filter(pk=item.pk).update(invoice_value=Decimal("20000"))

        out = StringIO()
        call_command("reconcile_points", "--dry-run", stdout=out)

        self.assertEqual(balances(self.user)["spendable"], 1000)
        self.assertIn("1 would change", out.getvalue())

    def test_category_filter(self):
        self.make_item(status="publish")
        out = StringIO()
        call_command("reconcile_points", "--category", "invoice", stdout=out)
        self.assertIn("Checked 0 submissions", out.getvalue())
