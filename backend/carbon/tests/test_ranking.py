from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import TestCase

from authentication.models import User
from carbon.ranking_service import FarmerRankStore, LeaderboardRankingJob, assign_ranks
from carbon.tasks import update_leaderboard_ranks
from farmers.models import Farmer


def test_assign_ranks_highest_credits_first():
    ranks = assign_ranks([(1, 10.0), (2, 30.0), (3, 20.0)])

    assert ranks == {2: 1, 3: 2, 1: 3}


def test_assign_ranks_ties_get_distinct_adjacent_ranks():
    ranks = assign_ranks([(7, 5.0), (8, 5.0), (9, 1.0)])

    assert ranks[9] == 3
    assert {ranks[7], ranks[8]} == {1, 2}


def test_assign_ranks_empty():
    assert assign_ranks([]) == {}


class InMemoryRankStore:
    def __init__(self, standings):
        self.standings = standings
        self.written = None

    def read_all(self):
        return list(self.standings)

    def write_ranks(self, ranks):
        self.written = dict(ranks)


def test_job_writes_every_rank_through_the_store():
    store = InMemoryRankStore([(1, 10.0), (2, 30.0), (3, 20.0)])

    assert LeaderboardRankingJob(store=store).run() == 3
    assert store.written == {2: 1, 3: 2, 1: 3}


def test_job_with_no_profiles_writes_nothing():
    store = InMemoryRankStore([])

    assert LeaderboardRankingJob(store=store).run() == 0
    assert store.written is None


class FailingRankStore(InMemoryRankStore):
    def write_ranks(self, ranks):
        raise DatabaseError("write failed")


def test_job_propagates_write_failure():
    store = FailingRankStore([(1, 1.0)])

    with pytest.raises(DatabaseError):
        LeaderboardRankingJob(store=store).run()


class LeaderboardRankingJobTests(TestCase):
    def setUp(self):
        self.farmers = {}
        for username, credits in (('alice', 10.0), ('bob', 30.0), ('carol', 20.0)):
            user = User.objects.create_user(username=username, password='test123!@#')
            self.farmers[username] = Farmer.objects.create(user=user, total_carbon_credits=credits)

    def ranks(self):
        return {
            farmer.user.username: farmer.rank
            for farmer in Farmer.objects.select_related('user')
        }

    def test_ranks_by_total_credits(self):
        count = LeaderboardRankingJob().run()

        self.assertEqual(count, 3)
        self.assertEqual(self.ranks(), {'bob': 1, 'carol': 2, 'alice': 3})

    def test_ties_share_no_rank(self):
        Farmer.objects.filter(pk=self.farmers['alice'].pk).update(total_carbon_credits=30.0)

        LeaderboardRankingJob().run()

        ranks = self.ranks()
        self.assertEqual({ranks['alice'], ranks['bob']}, {1, 2})
        self.assertEqual(ranks['carol'], 3)

    def test_rerun_reflects_new_totals(self):
        LeaderboardRankingJob().run()
        Farmer.objects.filter(pk=self.farmers['alice'].pk).update(total_carbon_credits=99.0)

        LeaderboardRankingJob().run()

        self.assertEqual(self.ranks(), {'alice': 1, 'bob': 2, 'carol': 3})

    def test_failed_write_keeps_previous_ranks(self):
        for rank, username in enumerate(('alice', 'bob', 'carol'), start=7):
            Farmer.objects.filter(pk=self.farmers[username].pk).update(rank=rank)
        previous = self.ranks()

        original_write_rank = FarmerRankStore.write_rank
        calls = []

        def fail_on_second_write(store, farmer_id, rank):
            calls.append(farmer_id)
            if len(calls) == 2:
                raise DatabaseError("write failed")
            original_write_rank(store, farmer_id, rank)

        with patch.object(FarmerRankStore, 'write_rank', autospec=True, side_effect=fail_on_second_write):
            with self.assertRaises(DatabaseError):
                LeaderboardRankingJob().run()

        self.assertEqual(len(calls), 2)
        self.assertEqual(self.ranks(), previous)

    def test_scheduled_task_runs_the_job(self):
        self.assertEqual(update_leaderboard_ranks(), 3)
        self.assertEqual(self.ranks()['bob'], 1)
