"""Tests for the in-memory score store."""

from intent_engine.models.schemas import Lead, Offer
from intent_engine.store import ScoreStore


def test_new_offer_replaces_active_offer():
    store = ScoreStore()
    assert store.get_active_offer() is None
    assert store.get_offers() == []

    first = Offer(name="First", value_props=["a"], ideal_use_cases=["b"])
    second = Offer(name="Second", value_props=["a"], ideal_use_cases=["b"])
    store.set_offer(first)
    store.set_offer(second)

    assert store.get_active_offer() is second
    assert store.get_offers() == [second]


def test_leads_are_replaced_not_appended():
    store = ScoreStore()
    store.set_leads([Lead(name="A"), Lead(name="B")])
    store.set_leads([Lead(name="C")])
    assert [lead.name for lead in store.get_leads()] == ["C"]


def test_readers_get_a_copy():
    store = ScoreStore()
    store.set_leads([Lead(name="A")])
    snapshot = store.get_leads()
    snapshot.append(Lead(name="B"))
    assert len(store.get_leads()) == 1


def test_set_results_accepts_generators():
    store = ScoreStore()
    store.set_results(r for r in [])
    assert store.get_results() == []


def test_clear():
    store = ScoreStore()
    store.set_offer(Offer(name="X", value_props=["a"], ideal_use_cases=["b"]))
    store.set_leads([Lead(name="A")])
    store.clear()
    assert store.get_active_offer() is None
    assert store.get_leads() == []
    assert store.get_results() == []
