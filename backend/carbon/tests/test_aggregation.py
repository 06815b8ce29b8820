from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from kombu.exceptions import OperationalError

from authentication.models import User
from carbon.aggregation_service import ActivitySnapshot, AggregationOutcome, AggregationService
from carbon.choices import APPROVED, PENDING, GENERIC_SUGGESTION_TEXT
from carbon.models import Activity, CreditAggregation, Suggestion
from carbon.tasks import aggregate_activity, requeue_unaggregated_activities
from carbon.verification_service import ActivityVerificationService
from farmers.models import Farmer


class AggregationTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(username='farmer1', password='test123!@#')
        self.service = AggregationService()

    def create_activity(self, **kwargs):
        fields = {
            'user': self.user,
            'activity_type': 'Zero Tillage',
            'area': 10,
            'status': APPROVED,
            'calculated_credits': 4.25,
            'climate_impact_analysis': 'Less tillage, more soil carbon.',
        }
        fields.update(kwargs)
        return Activity.objects.create(**fields)

    def total_credits(self):
        return Farmer.objects.get(user=self.user).total_carbon_credits


class AggregationServiceTests(AggregationTestMixin, TestCase):
    def test_applies_credits_and_creates_suggestion(self):
        Farmer.objects.create(user=self.user, total_carbon_credits=2.0)
        activity = self.create_activity()

        outcome = self.service.aggregate(ActivitySnapshot.from_activity(activity))

        self.assertEqual(outcome, AggregationOutcome.APPLIED)
        self.assertEqual(self.total_credits(), 6.25)
        suggestion = Suggestion.objects.get(related_activity=activity)
        self.assertEqual(suggestion.user, self.user)
        self.assertEqual(suggestion.suggestion_text, 'Less tillage, more soil carbon.')

    def test_creates_profile_when_missing(self):
        activity = self.create_activity(calculated_credits=3.5)

        self.service.aggregate(ActivitySnapshot.from_activity(activity))

        self.assertEqual(self.total_credits(), 3.5)

    def test_pending_activity_is_skipped(self):
        activity = self.create_activity(status=PENDING)

        outcome = self.service.aggregate(ActivitySnapshot.from_activity(activity))

        self.assertEqual(outcome, AggregationOutcome.SKIPPED)
        self.assertFalse(Farmer.objects.filter(user=self.user).exists())
        self.assertFalse(Suggestion.objects.exists())
        self.assertFalse(CreditAggregation.objects.exists())

    def test_activity_without_credits_is_skipped(self):
        for credits in (None, 0):
            activity = self.create_activity(calculated_credits=credits)
            outcome = self.service.aggregate(ActivitySnapshot.from_activity(activity))
            self.assertEqual(outcome, AggregationOutcome.SKIPPED)

        self.assertFalse(Suggestion.objects.exists())
        self.assertFalse(Farmer.objects.filter(user=self.user).exists())

    def test_double_delivery_increments_once(self):
        Farmer.objects.create(user=self.user, total_carbon_credits=1.0)
        snapshot = ActivitySnapshot.from_activity(self.create_activity(calculated_credits=2.5))

        first = self.service.aggregate(snapshot)
        second = self.service.aggregate(snapshot)

        self.assertEqual(first, AggregationOutcome.APPLIED)
        self.assertEqual(second, AggregationOutcome.ALREADY_APPLIED)
        self.assertEqual(self.total_credits(), 3.5)
        self.assertEqual(Suggestion.objects.filter(related_activity_id=snapshot.activity_id).count(), 1)
        self.assertEqual(CreditAggregation.objects.count(), 1)

    def test_generic_suggestion_without_climate_impact_text(self):
        activity = self.create_activity(climate_impact_analysis=None)

        self.service.aggregate(ActivitySnapshot.from_activity(activity))

        self.assertEqual(
            Suggestion.objects.get(related_activity=activity).suggestion_text,
            GENERIC_SUGGESTION_TEXT
        )

    def test_suggestion_failure_is_retried_on_redelivery(self):
        snapshot = ActivitySnapshot.from_activity(self.create_activity(calculated_credits=2.0))

        with patch.object(AggregationService, 'create_suggestion', side_effect=DatabaseError("write failed")):
            with self.assertRaises(DatabaseError):
                self.service.aggregate(snapshot)

        self.assertEqual(self.total_credits(), 2.0)
        self.assertFalse(Suggestion.objects.exists())

        outcome = self.service.aggregate(snapshot)

        self.assertEqual(outcome, AggregationOutcome.ALREADY_APPLIED)
        self.assertEqual(self.total_credits(), 2.0)
        self.assertEqual(Suggestion.objects.count(), 1)

    def test_snapshot_round_trips_through_task_payload(self):
        activity = self.create_activity()
        snapshot = ActivitySnapshot.from_activity(activity)

        self.assertEqual(ActivitySnapshot.from_dict(snapshot.as_dict()), snapshot)
        self.assertEqual(snapshot.activity_id, str(activity.id))


class AggregationTriggerTests(AggregationTestMixin, TestCase):
    def test_new_activity_is_aggregated_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            activity = self.create_activity(calculated_credits=5.0)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(self.total_credits(), 5.0)
        self.assertTrue(Suggestion.objects.filter(related_activity=activity).exists())

    def test_updates_do_not_trigger_aggregation(self):
        activity = self.create_activity(status=PENDING)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            activity.notes = 'Updated notes'
            activity.save()

        self.assertEqual(callbacks, [])

    def test_task_applies_snapshot(self):
        activity = self.create_activity(calculated_credits=1.25)

        result = aggregate_activity(ActivitySnapshot.from_activity(activity).as_dict())

        self.assertEqual(result, AggregationOutcome.APPLIED.value)
        self.assertEqual(self.total_credits(), 1.25)

    def test_task_redelivery_is_a_no_op(self):
        payload = ActivitySnapshot.from_activity(self.create_activity(calculated_credits=1.25)).as_dict()

        aggregate_activity(payload)
        result = aggregate_activity(payload)

        self.assertEqual(result, AggregationOutcome.ALREADY_APPLIED.value)
        self.assertEqual(self.total_credits(), 1.25)


class AdminApprovalAggregationTests(AggregationTestMixin, TestCase):
    def test_admin_approval_is_not_aggregated_by_default(self):
        activity = self.create_activity(status=PENDING)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            ActivityVerificationService().approve_activity(activity.pk)

        self.assertEqual(callbacks, [])
        self.assertFalse(Farmer.objects.filter(user=self.user).exists())

    @override_settings(CARBON_AGGREGATE_ADMIN_APPROVALS=True)
    def test_admin_approval_aggregates_when_enabled(self):
        activity = self.create_activity(status=PENDING, calculated_credits=2.0)

        with self.captureOnCommitCallbacks(execute=True):
            ActivityVerificationService().approve_activity(activity.pk)

        self.assertEqual(self.total_credits(), 2.0)
        self.assertEqual(Suggestion.objects.filter(related_activity=activity).count(), 1)


class RequeueUnaggregatedActivitiesTests(AggregationTestMixin, TestCase):
    def create_stale_activity(self, **kwargs):
        activity = self.create_activity(**kwargs)
        Activity.objects.filter(pk=activity.pk).update(created_at=timezone.now() - timedelta(hours=1))
        return activity

    def test_requeues_activity_whose_notification_was_lost(self):
        activity = self.create_stale_activity(calculated_credits=2.5)

        queued = requeue_unaggregated_activities()

        self.assertEqual(queued, 1)
        self.assertEqual(self.total_credits(), 2.5)
        self.assertTrue(CreditAggregation.objects.filter(activity=activity).exists())
        self.assertEqual(Suggestion.objects.filter(related_activity=activity).count(), 1)

        self.assertEqual(requeue_unaggregated_activities(), 0)
        self.assertEqual(self.total_credits(), 2.5)

    def test_recent_activities_are_left_to_the_trigger(self):
        self.create_activity()

        self.assertEqual(requeue_unaggregated_activities(), 0)

    def test_pending_and_uncredited_activities_are_ignored(self):
        self.create_stale_activity(status=PENDING)
        self.create_stale_activity(calculated_credits=0)
        self.create_stale_activity(calculated_credits=None)

        self.assertEqual(requeue_unaggregated_activities(), 0)
        self.assertFalse(Farmer.objects.filter(user=self.user).exists())

    def test_verifier_approvals_are_not_swept_by_default(self):
        activity = self.create_stale_activity(status=PENDING)
        ActivityVerificationService().approve_activity(activity.pk)

        self.assertEqual(requeue_unaggregated_activities(), 0)
        self.assertFalse(CreditAggregation.objects.exists())

    @override_settings(CARBON_AGGREGATE_ADMIN_APPROVALS=True)
    def test_verifier_approvals_are_swept_when_enabled(self):
        activity = self.create_stale_activity(status=PENDING, calculated_credits=3.0)
        ActivityVerificationService().approve_activity(activity.pk)

        self.assertEqual(requeue_unaggregated_activities(), 1)
        self.assertEqual(self.total_credits(), 3.0)


@pytest.mark.django_db(transaction=True)
def test_broker_outage_keeps_submission_and_sweep_applies_credits(auth_client, farmer_user, settings):
    settings.AI_GATEWAY_URL = ''
    settings.CARBON_AGGREGATION_SWEEP_GRACE_MINUTES = 0

    with patch('carbon.tasks.aggregate_activity.delay', side_effect=OperationalError("broker down")):
        response = auth_client.post(
            reverse('activity-list'),
            {'activity_type': 'Zero Tillage', 'area': 10},
            format='json'
        )

    assert response.status_code == 201
    assert Activity.objects.count() == 1
    assert CreditAggregation.objects.count() == 0

    assert requeue_unaggregated_activities() == 1
    assert CreditAggregation.objects.count() == 1
    assert Farmer.objects.get(user=farmer_user).total_carbon_credits == 1.5
    assert Suggestion.objects.count() == 1
    assert requeue_unaggregated_activities() == 0
