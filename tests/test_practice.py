import pytest

from prepcards.card_models import Card
from prepcards.practice import PracticeSession


def _card(card_id, status, deck="leetcode"):
    return Card(id=card_id, deck=deck, status=status, title=f"{card_id}.")


def _draws(*values):
    it = iter(values)
    return lambda: next(it)


def test_default_weights_per_deck():
    session = PracticeSession(cfg={})
    lc = session.states["leetcode"].weights
    sd = session.states["system_design"].weights
    assert (lc.red, lc.yellow, lc.green) == (0.6, 0.3, 0.1)
    assert (sd.red, sd.yellow, sd.green) == (0.5, 0.35, 0.15)


def test_draw_next_uses_filters_and_resets_reveal():
    session = PracticeSession(cfg={}, rng=_draws(0.9, 0.0))
    session.set_cards("leetcode", [_card("1", "red"), _card("2", "green"), _card("3", "yellow")])
    session.toggle_reveal()
    session.toggle_exclude_green()
    card = session.draw_next()
    # red 0.6 / yellow 0.3 over present buckets → 0.9 falls into yellow
    assert card.id == "3"
    assert session.state.selected_card is card
    assert session.state.revealed is False


def test_draw_next_without_matches_returns_none():
    session = PracticeSession(cfg={})
    session.set_cards("leetcode", [_card("1", "green")])
    session.set_status_filter("red")
    assert session.draw_next() is None
    assert session.state.selected_card is None


def test_set_weight_clamps_and_ignores_invalid():
    session = PracticeSession(cfg={})
    session.set_weight("red", "-3")
    assert session.state.weights.red == 0.0
    session.set_weight("yellow", "abc")
    session.set_weight("yellow", float("nan"))
    assert session.state.weights.yellow == 0.3
    session.set_weight("green", "2.5")
    assert session.state.weights.green == 2.5
    with pytest.raises(ValueError):
        session.set_weight("blue", 1)


def test_states_are_per_deck():
    session = PracticeSession(cfg={})
    session.set_status_filter("yellow")
    session.switch_deck("system_design")
    assert session.state.filters.status == "all"
    session.switch_deck("leetcode")
    assert session.state.filters.status == "yellow"
    with pytest.raises(ValueError):
        session.switch_deck("trivia")
    with pytest.raises(ValueError):
        session.set_status_filter("purple")


def test_toggles():
    session = PracticeSession(cfg={})
    assert session.toggle_exclude_green() is True
    assert session.toggle_exclude_green() is False
    assert session.toggle_reveal() is True
    assert session.toggle_reveal() is False
