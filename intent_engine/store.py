"""
In-memory score store
=====================
Holds the active offer, the current lead batch and the latest scoring
results. Each slot is replaced wholesale under a lock and stored as a tuple,
so readers see either the previous collection or the new one.
"""

import threading
from typing import Iterable, List, Optional, Tuple

from .models.schemas import Lead, Offer, ScoredLead


class ScoreStore:
    """Single-slot store for offer, leads and results (last writer wins)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._offer: Optional[Offer] = None
        self._leads: Tuple[Lead, ...] = ()
        self._results: Tuple[ScoredLead, ...] = ()

    # -------------------------------------------------------------------------
    # Offer
    # -------------------------------------------------------------------------

    def set_offer(self, offer: Offer) -> None:
        """Make offer the active offer, replacing any previous one."""
        with self._lock:
            self._offer = offer

    def get_active_offer(self) -> Optional[Offer]:
        return self._offer

    def get_offers(self) -> List[Offer]:
        offer = self._offer
        return [offer] if offer else []

    # -------------------------------------------------------------------------
    # Leads
    # -------------------------------------------------------------------------

    def set_leads(self, leads: Iterable[Lead]) -> None:
        """Replace the whole lead batch."""
        snapshot = tuple(leads)
        with self._lock:
            self._leads = snapshot

    def get_leads(self) -> List[Lead]:
        return list(self._leads)

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def set_results(self, results: Iterable[ScoredLead]) -> None:
        """Replace the whole result set."""
        snapshot = tuple(results)
        with self._lock:
            self._results = snapshot

    def get_results(self) -> List[ScoredLead]:
        return list(self._results)

    def clear(self) -> None:
        with self._lock:
            self._offer = None
            self._leads = ()
            self._results = ()
