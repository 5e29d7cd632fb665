from decimal import Decimal

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from points.selectors import get_user_balances
from . import services
from .models import Submission
from .signals import fields_finalized
from .validators import run_publish_gate, validate_invoice_value


def always_refuse(submission):
    raise ValidationError("Closed for review.")


class PublishGateTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("eva", password="x")

    def test_invoice_without_value_stays_pending(self):
        item = Submission.objects.create(owner=self.user, category="invoice", status="pending")

        self.assertFalse(services.approve(item))

        item.refresh_from_db()
        self.assertEqual(item.status, "pending")
        self.assertEqual(get_user_balances(self.user), {"spendable": 0, "cumulative": 0})

    def test_invoice_with_value_publishes(self):
        item = Submission.objects.create(
            owner=self.user, category="invoice", status="pending", invoice_value=Decimal("5000")
        )
        self.assertTrue(services.approve(item))
        item.refresh_from_db()
        self.assertTrue(item.is_published)
        self.assertEqual(get_user_balances(self.user)["spendable"], 500)

    def test_inactive_owner_is_refused(self):
        self.user.is_active = False
        self.user.save()
        item = Submission.objects.create(owner=self.user, category="realization", status="draft")

        self.assertFalse(services.approve(item))
        item.refresh_from_db()
        self.assertEqual(item.status, "draft")

    def test_creating_as_published_is_gated(self):
        item = Submission.objects.create(owner=self.user, category="invoice", status="publish")
        item.refresh_from_db()
        self.assertEqual(item.status, "pending")

    def test_already_published_item_is_not_regated(self):
        item = Submission.objects.create(
            owner=self.user, category="invoice", status="publish", invoice_value=Decimal("100")
        )
        Submission.objects.filter(pk=item.pk).update(invoice_value=None)
        item.refresh_from_db()

        services.save_fields(item, title="Updated")

        item.refresh_from_db()
        self.assertEqual(item.status, "publish")

    @override_settings(SUBMISSIONS_PUBLISH_VALIDATORS=["submissions.tests.always_refuse"])
    def test_validators_come_from_settings(self):
        item = Submission(owner=self.user, category="realization")
        self.assertEqual(run_publish_gate(item), ["Closed for review."])

    def test_gate_collects_messages(self):
        item = Submission(owner=self.user, category="invoice", invoice_value=Decimal("-1"))
        self.assertEqual(len(run_publish_gate(item)), 1)
        with self.assertRaises(ValidationError):
            validate_invoice_value(item)


class SubmissionServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("tomas", password="x")
        self.item = Submission.objects.create(owner=self.user, category="realization", status="pending")

    def test_save_fields_rejects_unknown_fields(self):
        with self.assertRaises(ValueError):
            services.save_fields(self.item, owner=None)

    def test_save_fields_sends_fields_finalized(self):
        received = []

        def listener(sender, submission_id, **kwargs):
            received.append(submission_id)

        fields_finalized.connect(listener)
        try:
            services.save_fields(self.item, title="Garden")
        finally:
            fields_finalized.disconnect(listener)

        self.assertEqual(received, [self.item.pk])
        self.item.refresh_from_db()
        self.assertEqual(self.item.title, "Garden")

    def test_change_status_rejects_unknown_status(self):
        with self.assertRaises(ValueError):
            services.change_status(self.item, "archived")

    def test_reject_stores_reason(self):
        services.reject(self.item, reason="Blurry photos")
        self.item.refresh_from_db()
        self.assertEqual(self.item.status, "rejected")
        self.assertEqual(self.item.rejection_reason, "Blurry photos")

    def test_trash_and_destroy(self):
        self.assertTrue(services.trash(self.item))
        pk = self.item.pk
        services.destroy(self.item)
        self.assertFalse(Submission.objects.filter(pk=pk).exists())

    def test_display_title_falls_back_to_category(self):
        self.assertEqual(self.item.display_title(), f"Realization #{self.item.pk}")
