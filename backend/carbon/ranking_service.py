import logging
from typing import Dict, Iterable, List, Tuple

from django.db import transaction

from farmers.models import Farmer

logger = logging.getLogger(__name__)

Standing = Tuple[int, float]


def assign_ranks(standings: Iterable[Standing]) -> Dict[int, int]:
    """
    Rank farmers 1..N by total credits, highest first.

    The sort is stable, so equal totals keep their read order and still get
    distinct, adjacent ranks.
    """
    ordered = sorted(standings, key=lambda standing: standing[1], reverse=True)
    return {farmer_id: rank for rank, (farmer_id, _credits) in enumerate(ordered, start=1)}


class FarmerRankStore:
    """Read-all / write-all boundary between the ranking job and the farmers table"""

    def read_all(self) -> List[Standing]:
        return list(
            Farmer.objects.order_by('-total_carbon_credits', 'id').values_list('id', 'total_carbon_credits')
        )

    def write_ranks(self, ranks: Dict[int, int]) -> None:
        # One transaction per run: readers see all of the old ranks or all of the new ones
        with transaction.atomic():
            for farmer_id, rank in ranks.items():
                self.write_rank(farmer_id, rank)

    def write_rank(self, farmer_id: int, rank: int) -> None:
        Farmer.objects.filter(pk=farmer_id).update(rank=rank)


class LeaderboardRankingJob:
    """Full recompute of leaderboard ranks"""

    def __init__(self, store=None):
        self.store = store or FarmerRankStore()

    def run(self) -> int:
        standings = self.store.read_all()
        if not standings:
            logger.info("No users to rank.")
            return 0

        ranks = assign_ranks(standings)
        try:
            self.store.write_ranks(ranks)
        except Exception:
            logger.exception("Leaderboard rank update failed; previous ranks kept until the next run")
            raise

        logger.info(f"Leaderboard ranks updated for {len(ranks)} users.")
        return len(ranks)
