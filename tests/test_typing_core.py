"""Tests for the deterministic typing core.

These exercise word classification, display-only character marks, metric
derivation and the forward-only scroll window without any clock or UI.
"""

from __future__ import annotations

import pytest

from type_ace.typing_core import (
    CharMark,
    InputMode,
    Metrics,
    ScrollWindow,
    WordClass,
    clamp_typed,
    completed_word_count,
    compute_metrics,
    current_word_index,
    evaluate_words,
    passage_exhausted,
    round_half_up,
    split_words,
)


def _classes(states) -> list[WordClass]:
    return [s.classification for s in states]


def test_split_words_ignores_repeated_whitespace() -> None:
    assert split_words("  The quick\nbrown  fox ") == ("The", "quick", "brown", "fox")


def test_completed_word_count_boundaries() -> None:
    assert completed_word_count("") == 0
    assert completed_word_count(" ") == 0
    assert completed_word_count("cat") == 0
    assert completed_word_count("cat ") == 1
    assert completed_word_count("cat do") == 1
    assert completed_word_count("cat", finished=True) == 1


def test_nothing_typed_marks_first_word_current() -> None:
    states = evaluate_words(("one", "two", "three"), "")
    assert _classes(states) == [WordClass.CURRENT, WordClass.PENDING, WordClass.PENDING]
    assert [c.mark for c in states[0].chars] == [CharMark.PENDING] * 3
    assert states[1].chars == ()


def test_partial_word_is_current_with_char_marks() -> None:
    states = evaluate_words(split_words("The quick brown fox"), "The qu")
    assert _classes(states) == [WordClass.CORRECT, WordClass.CURRENT, WordClass.PENDING, WordClass.PENDING]
    marks = [c.mark for c in states[1].chars]
    assert marks == [CharMark.CORRECT, CharMark.CORRECT, CharMark.PENDING, CharMark.PENDING, CharMark.PENDING]


def test_char_mismatch_does_not_change_current_classification() -> None:
    states = evaluate_words(("The", "end"), "Thx")
    assert states[0].classification is WordClass.CURRENT
    assert [c.mark for c in states[0].chars] == [CharMark.CORRECT, CharMark.CORRECT, CharMark.INCORRECT]
    assert states[0].chars[2].typed == "x"


def test_extra_chars_are_kept_for_display() -> None:
    states = evaluate_words(("cat", "dog"), "catss")
    marks = [c.mark for c in states[0].chars]
    assert marks == [CharMark.CORRECT, CharMark.CORRECT, CharMark.CORRECT, CharMark.EXTRA, CharMark.EXTRA]
    assert "".join(c.char for c in states[0].chars) == "catss"
    assert states[0].classification is WordClass.CURRENT

    states = evaluate_words(("cat", "dog"), "catss ")
    assert _classes(states) == [WordClass.INCORRECT, WordClass.CURRENT]


def test_word_ended_early_is_scored_by_exact_equality() -> None:
    states = evaluate_words(("a", "cat"), "a ca ")
    assert _classes(states) == [WordClass.CORRECT, WordClass.INCORRECT]

    states = evaluate_words(("a", "b"), "a ")
    assert _classes(states) == [WordClass.CORRECT, WordClass.CURRENT]


def test_finished_completes_the_word_in_progress() -> None:
    states = evaluate_words(("cat", "dog"), "cat dog", finished=True)
    assert _classes(states) == [WordClass.CORRECT, WordClass.CORRECT]
    assert current_word_index(states) == 2

    states = evaluate_words(("cat", "dog", "bird"), "cat do", finished=True)
    assert _classes(states) == [WordClass.CORRECT, WordClass.INCORRECT, WordClass.PENDING]


def test_current_word_index_follows_typing() -> None:
    words = ("one", "two", "three")
    assert current_word_index(evaluate_words(words, "")) == 0
    assert current_word_index(evaluate_words(words, "one tw")) == 1
    assert current_word_index(evaluate_words(words, "one two three ")) == 3


def test_scenario_full_passage_at_twelve_seconds() -> None:
    words = split_words("The quick brown fox")
    states = evaluate_words(words, "The quick brown fox", finished=True)
    m = compute_metrics(states, 12.0)

    assert m.completed_words == 4
    assert m.correct_words == 4
    assert m.accuracy_percent == 100
    assert m.correct_chars == 20
    assert m.wpm_gross == 20
    assert m.wpm_net == 20
    assert m.error_count == 0


def test_scenario_one_wrong_word_at_six_seconds() -> None:
    states = evaluate_words(split_words("cat dog bird"), "cat dob ")
    m = compute_metrics(states, 6.0)

    assert m.completed_words == 2
    assert m.correct_words == 1
    assert m.accuracy_percent == 50
    assert m.error_count == 1
    assert m.correct_chars == 4
    assert m.wpm_gross == 8
    assert m.wpm_net == 4


def test_zero_elapsed_yields_defaults() -> None:
    states = evaluate_words(split_words("cat dog bird"), "")
    m = compute_metrics(states, 0.0)
    assert (m.wpm_gross, m.wpm_net, m.accuracy_percent, m.error_count) == (0, 0, 100, 0)


def test_zero_elapsed_with_completed_words_has_zero_speed() -> None:
    states = evaluate_words(split_words("cat dog bird"), "cat dog ")
    m = compute_metrics(states, 0.0)
    assert m.wpm_gross == 0
    assert m.wpm_net == 0
    assert m.accuracy_percent == 100


def test_negative_or_nan_elapsed_is_total() -> None:
    states = evaluate_words(("cat",), "cat ")
    assert compute_metrics(states, -3.0).wpm_gross == 0
    assert compute_metrics(states, float("nan")).wpm_gross == 0


def test_accuracy_over_every_prefix() -> None:
    words = split_words("the cat sat on the mat")
    typed = "the cst sat on tge mat "
    for n in range(len(typed) + 1):
        p = typed[:n]
        states = evaluate_words(words, p)
        correct = sum(1 for s in states if s.classification is WordClass.CORRECT)
        completed = correct + sum(1 for s in states if s.classification is WordClass.INCORRECT)
        m = compute_metrics(states, 10.0)
        expected = 100 if completed == 0 else round_half_up(100 * correct / completed)
        assert m.accuracy_percent == expected

    final = compute_metrics(evaluate_words(words, typed), 10.0)
    assert final.accuracy_percent == 67
    assert final.error_count == 2


def test_gross_wpm_non_decreasing_in_correct_chars() -> None:
    words = split_words("a bb ccc dddd eeeee ffffff")
    previous = -1
    previous_chars = -1
    typed = ""
    for w in words:
        typed += w + " "
        m = compute_metrics(evaluate_words(words, typed), 30.0)
        assert m.correct_chars > previous_chars
        assert m.wpm_gross >= previous
        previous = m.wpm_gross
        previous_chars = m.correct_chars


def test_default_metrics_match_restart_values() -> None:
    m = Metrics()
    assert (m.wpm_net, m.accuracy_percent, m.error_count) == (0, 100, 0)


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(1.49) == 1
    assert round_half_up(0.0) == 0


def test_clamp_typed_character_mode_drops_excess() -> None:
    words = ("cat", "dog")
    assert clamp_typed(words, "cat dog", "cat dogs", InputMode.CHARACTER) == "cat dog"
    assert clamp_typed(words, "cat dog", "cat", InputMode.CHARACTER) == "cat"


def test_clamp_typed_word_mode_drops_extra_words() -> None:
    words = ("cat", "dog")
    assert clamp_typed(words, "cat dog", "cat dog extra", InputMode.WORD) == "cat dog "
    assert clamp_typed(words, "cat dog", "a  b c", InputMode.WORD) == "a  b "
    # Overlong words are kept; only extra words are dropped.
    assert clamp_typed(words, "cat dog", "catcat dogdog", InputMode.WORD) == "catcat dogdog"


def test_passage_exhausted_per_mode() -> None:
    words = ("cat", "dog")
    assert passage_exhausted(words, "cat dog", "cat dog", InputMode.CHARACTER) is True
    assert passage_exhausted(words, "cat dog", "cat do", InputMode.CHARACTER) is False
    assert passage_exhausted(words, "cat dog", "cat dog", InputMode.WORD) is False
    assert passage_exhausted(words, "cat dog", "cat dog ", InputMode.WORD) is True


def test_scroll_window_line_for() -> None:
    sw = ScrollWindow(10)
    assert sw.line_for(0) == 0
    assert sw.line_for(9) == 0
    assert sw.line_for(10) == 1
    assert sw.line_for(25) == 2


def test_scroll_window_only_moves_forward() -> None:
    sw = ScrollWindow(5)
    assert sw.advance(2) is True
    assert sw.advance(1) is False
    assert sw.visible_line == 2
    assert sw.follow(3) == 2
    assert sw.follow(17) == 3
    sw.reset()
    assert sw.visible_line == 0


def test_scroll_window_lines() -> None:
    sw = ScrollWindow(2)
    words = ("a", "b", "c", "d", "e")
    assert sw.lines(words) == (("a", "b"), ("c", "d"), ("e",))
    assert sw.lines(()) == ()


def test_scroll_window_rejects_non_positive_width() -> None:
    with pytest.raises(ValueError):
        ScrollWindow(0)
