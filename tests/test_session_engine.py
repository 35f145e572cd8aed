# tests/test_session_engine.py
import pytest

from flashlearn.core.session_engine import (
    EmptyQueue, NoCurrentCard, SessionDisposed, SessionEngine, SessionPhase,
)
from conftest import make_cards


def ids(cards):
    return [c.id for c in cards]


def assert_partitioned(engine):
    """Every deck card sits in exactly one of primary remainder / review / completed."""
    groups = [ids(engine.primary_queue), ids(engine.review_queue), ids(engine.completed)]
    flat = [i for group in groups for i in group]
    assert sorted(flat) == sorted(ids(engine.snapshot()))
    assert len(flat) == len(set(flat))


def test_start_moves_mastered_cards_to_completed():
    engine = SessionEngine(make_cards(4, mastered={2}))
    assert ids(engine.primary_queue) == [1, 3, 4]
    assert ids(engine.completed) == [2]
    assert engine.review_queue == []
    assert engine.current_card().id == 1
    assert engine.is_flipped is False
    assert engine.phase is SessionPhase.IN_PRIMARY_PASS


@pytest.mark.parametrize("count", [1, 2, 5, 12])
def test_knowing_every_card_masters_the_deck(count):
    engine = SessionEngine(make_cards(count))
    while not engine.is_session_complete():
        engine.mark_known()
    assert all(c.mastered for c in engine.snapshot())
    assert engine.review_queue == []
    assert engine.progress == 1.0


def test_reviewed_card_comes_back_before_completion():
    engine = SessionEngine(make_cards(3))
    engine.mark_known()          # 1
    engine.mark_review()         # 2 deferred
    seen = []
    while not engine.is_session_complete():
        seen.append(engine.current_card().id)
        engine.mark_known()
    assert seen == [3, 2]


def test_card_can_be_deferred_many_times():
    engine = SessionEngine(make_cards(2))
    engine.mark_known()
    for expected_pass in (2, 3, 4):
        engine.mark_review()
        assert engine.pass_number == expected_pass
        assert engine.current_card().id == 2
        assert engine.phase is SessionPhase.IN_REVIEW_PASS
    engine.mark_known()
    assert engine.is_session_complete()
    assert [c.mastered for c in engine.snapshot()] == [True, True]


def test_review_pass_keeps_deferral_order():
    engine = SessionEngine(make_cards(4))
    engine.mark_review()   # 1
    engine.mark_known()    # 2
    engine.mark_review()   # 3
    engine.mark_review()   # 4
    assert ids(engine.primary_queue) == [1, 3, 4]
    assert engine.review_queue == []
    assert engine.pass_number == 2


def test_cards_stay_partitioned_through_a_session():
    engine = SessionEngine(make_cards(5, mastered={3}))
    script = ["review", "known", "review", "known", "known", "review", "known", "known"]
    assert_partitioned(engine)
    for step in script:
        if engine.is_session_complete():
            break
        engine.mark_known() if step == "known" else engine.mark_review()
        assert_partitioned(engine)


def test_answering_resets_flip():
    engine = SessionEngine(make_cards(2))
    engine.flip()
    assert engine.is_flipped
    engine.mark_review()
    assert engine.is_flipped is False


def test_flip_toggles():
    engine = SessionEngine(make_cards(1))
    assert engine.flip() is True
    assert engine.flip() is False


def test_restart_restores_pre_session_flags():
    cards = make_cards(4, mastered={4})
    engine = SessionEngine(cards)
    engine.mark_known()
    engine.mark_known()
    engine.mark_review()

    engine.restart()

    assert engine.snapshot() == cards
    assert ids(engine.primary_queue) == [1, 2, 3]
    assert engine.review_queue == []
    assert engine.pass_number == 1
    assert engine.current_card().id == 1


def test_snapshot_keeps_order_and_leaves_input_untouched():
    cards = make_cards(3)
    engine = SessionEngine(cards)
    engine.mark_review()
    engine.mark_known()
    snapshot = engine.snapshot()
    assert ids(snapshot) == [1, 2, 3]
    assert [c.mastered for c in snapshot] == [False, True, False]
    assert not any(c.mastered for c in cards)


def test_empty_deck_is_complete_immediately():
    engine = SessionEngine([])
    assert engine.is_session_complete()
    assert engine.snapshot() == []
    assert engine.progress == 1.0
    with pytest.raises(EmptyQueue):
        engine.current_card()


def test_fully_mastered_deck_has_nothing_to_study():
    events = []
    engine = SessionEngine(make_cards(2, mastered={1, 2}), on_complete=events.append)
    assert engine.is_session_complete()
    assert events == []


def test_complete_session_rejects_answers():
    engine = SessionEngine(make_cards(1))
    engine.mark_known()
    with pytest.raises(NoCurrentCard):
        engine.mark_known()
    with pytest.raises(NoCurrentCard):
        engine.mark_review()
    with pytest.raises(NoCurrentCard):
        engine.flip()
    with pytest.raises(EmptyQueue):
        engine.current_card()


def test_completion_event_fires_once_with_snapshot():
    events = []
    engine = SessionEngine(make_cards(2), on_complete=events.append)
    engine.mark_known()
    assert events == []
    engine.mark_review()
    engine.mark_known()
    assert len(events) == 1
    assert [c.mastered for c in events[0]] == [True, True]


def test_duplicate_ids_are_rejected():
    cards = make_cards(2)
    with pytest.raises(ValueError):
        SessionEngine(cards + [cards[0]])


def test_disposed_engine_refuses_mutation():
    engine = SessionEngine(make_cards(2))
    engine.dispose()
    with pytest.raises(SessionDisposed):
        engine.mark_known()
    with pytest.raises(SessionDisposed):
        engine.restart()


def test_progress_counts():
    engine = SessionEngine(make_cards(4, mastered={1}))
    assert engine.total_cards == 4
    assert engine.completed_count == 1
    assert engine.remaining_count == 3
    engine.mark_review()
    assert engine.remaining_count == 3
    engine.mark_known()
    assert engine.progress == 0.5
