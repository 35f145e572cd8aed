# tests/test_deck_service.py
import pytest

from flashlearn.services.deck_service import (
    DeckNotFoundError, add_card, create_deck, delete_card, delete_deck, get_deck, get_decks,
    mark_cards_mastered, reset_deck_progress, update_card, update_deck, update_deck_stats,
)

CARDS = [{"front": "hola", "back": "hello"}, {"front": "adiós", "back": "bye"}, {"front": "gato", "back": "cat"}]


def test_create_and_get_deck(user_id):
    created = create_deck(user_id, "Spanish", "Basics", CARDS)
    deck = get_deck(user_id, created.id)
    assert deck.title == "Spanish"
    assert deck.description == "Basics"
    assert [c.front for c in deck.cards] == ["hola", "adiós", "gato"]
    assert (deck.card_count, deck.mastered_count) == (3, 0)
    assert deck.last_studied is None


def test_create_deck_without_cards(user_id):
    deck = create_deck(user_id, "Empty")
    assert deck.cards == []
    assert deck.card_count == 0


def test_blank_title_rejected(user_id):
    with pytest.raises(ValueError):
        create_deck(user_id, "   ")


def test_decks_are_private(user_id, other_user_id):
    created = create_deck(user_id, "Mine", cards=CARDS)
    assert get_deck(other_user_id, created.id) is None
    assert get_decks(other_user_id) == []
    with pytest.raises(DeckNotFoundError):
        update_deck(other_user_id, created.id, title="Stolen")
    assert delete_deck(other_user_id, created.id) is False


def test_get_decks_newest_first(user_id):
    first = create_deck(user_id, "First")
    second = create_deck(user_id, "Second")
    assert [d.id for d in get_decks(user_id)] == [second.id, first.id]


def test_update_deck_applies_card_flags_and_deletes_missing(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    keep = [deck.cards[0].model_copy(update={"mastered": True}), deck.cards[2]]

    updated = update_deck(user_id, deck.id, title="Español", cards=keep)

    assert updated.title == "Español"
    assert [c.id for c in updated.cards] == [deck.cards[0].id, deck.cards[2].id]
    assert (updated.card_count, updated.mastered_count) == (2, 1)


def test_update_deck_rejects_foreign_cards(user_id):
    deck = create_deck(user_id, "A", cards=CARDS)
    other = create_deck(user_id, "B", cards=CARDS)
    with pytest.raises(ValueError):
        update_deck(user_id, deck.id, cards=[other.cards[0]])


def test_update_deck_stats_overwrites_counters(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    update_deck_stats(user_id, deck.id, card_count=3, mastered_count=2)
    reloaded = get_deck(user_id, deck.id)
    assert reloaded.mastered_count == 2
    assert reloaded.last_studied is not None


def test_card_writes_keep_counters_in_sync(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)

    added = add_card(user_id, deck.id, "perro", "dog")
    assert get_deck(user_id, deck.id).card_count == 4

    update_card(user_id, added.id, mastered=True)
    assert get_deck(user_id, deck.id).mastered_count == 1

    assert delete_card(user_id, added.id) is True
    reloaded = get_deck(user_id, deck.id)
    assert (reloaded.card_count, reloaded.mastered_count) == (3, 0)


def test_update_card_of_other_user_is_ignored(user_id, other_user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    assert update_card(other_user_id, deck.cards[0].id, front="x") is None
    assert delete_card(other_user_id, deck.cards[0].id) is False


def test_mark_cards_mastered_and_reset(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    touched = mark_cards_mastered(user_id, [c.id for c in deck.cards[:2]])
    assert touched == 2
    assert get_deck(user_id, deck.id).mastered_count == 2

    reset = reset_deck_progress(user_id, deck.id)
    assert reset.mastered_count == 0
    assert not any(c.mastered for c in reset.cards)


def test_mark_cards_mastered_with_no_ids(user_id):
    assert mark_cards_mastered(user_id, []) == 0


def test_delete_deck_removes_cards(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    assert delete_deck(user_id, deck.id) is True
    assert get_deck(user_id, deck.id) is None
    assert update_card(user_id, deck.cards[0].id, front="x") is None


def test_update_deck_stats_rejects_negative_counters(user_id):
    deck = create_deck(user_id, "Spanish", cards=CARDS)
    with pytest.raises(ValueError):
        update_deck_stats(user_id, deck.id, card_count=-1, mastered_count=0)
    assert get_deck(user_id, deck.id).last_studied is None


def test_hand_built_deck(user_id):
    deck = create_deck(user_id, "Verbs", "Irregular")
    assert (deck.card_count, deck.cards) == (0, [])

    first = add_card(user_id, deck.id, "ser", "to be")
    second = add_card(user_id, deck.id, "ir", "to go")
    update_card(user_id, first.id, front="estar", back="to be (state)")
    delete_card(user_id, second.id)
    update_deck(user_id, deck.id, title="Verbos", description="")

    reloaded = get_deck(user_id, deck.id)
    assert reloaded.title == "Verbos"
    assert reloaded.description is None
    assert [(c.front, c.back) for c in reloaded.cards] == [("estar", "to be (state)")]
    assert reloaded.card_count == 1
