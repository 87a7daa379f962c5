import pytest

from duplicate_review.models.comparison import Match, Side
from duplicate_review.services.match_highlighter import (
    HIGHLIGHT_PALETTE,
    find_companion,
    highlight,
    highlight_color,
    segment_offsets,
    similarity_color,
)


def _runs(segments):
    return [(segment.text, segment.match_id) for segment in segments]


def test_only_first_occurrence_is_highlighted():
    text = "The cat sat. The cat sat. Dogs bark."
    segments = highlight(text, [Match(id="1", original_text="The cat sat.", similarity=90)])

    assert _runs(segments) == [
        ("The cat sat.", "1"),
        (" The cat sat. Dogs bark.", None),
    ]


def test_earlier_match_wins_and_overlapping_match_is_skipped():
    text = "abcdefghijklmnopqrstuvwxyz"
    matches = [
        Match(id="A", original_text="abcdefghij", similarity=80),
        Match(id="B", original_text="fghijklmno", similarity=70),
    ]

    segments = highlight(text, matches)

    assert _runs(segments) == [("abcdefghij", "A"), ("klmnopqrstuvwxyz", None)]


def test_blocked_occurrence_falls_through_to_next_free_one():
    text = "xx foo yy foo"
    matches = [
        Match(id="A", original_text="xx f"),
        Match(id="B", original_text="foo"),
    ]

    segments = highlight(text, matches)

    assert _runs(segments) == [("xx f", "A"), ("oo yy ", None), ("foo", "B")]


def test_other_side_uses_matched_text():
    text = "Yesterday the cat sat."
    match = Match(id="m1", original_text="The cat sat.", matched_text="the cat sat.", similarity=92)

    segments = highlight(text, [match], side=Side.OTHER)

    assert _runs(segments) == [("Yesterday ", None), ("the cat sat.", "m1")]
    assert segments[1].highlight.side == Side.OTHER
    assert segments[1].highlight.similarity == 92


def test_side_accepts_plain_string():
    segments = highlight("abc", [Match(id="x", matched_text="b")], side="other")
    assert _runs(segments) == [("a", None), ("b", "x"), ("c", None)]


def test_empty_text_yields_no_segments():
    assert highlight("", [Match(id="1", original_text="a")]) == []
    assert highlight(None, [Match(id="1", original_text="a")]) == []


def test_no_matches_yields_single_plain_segment():
    assert _runs(highlight("plain text", [])) == [("plain text", None)]
    assert _runs(highlight("plain text", None)) == [("plain text", None)]


def test_empty_or_missing_substring_is_skipped():
    matches = [Match(id="1", original_text=""), Match(id="2", original_text="absent")]
    assert _runs(highlight("some text", matches)) == [("some text", None)]


def test_adjacent_matches_stay_separate_runs():
    matches = [Match(id="A", original_text="abc"), Match(id="B", original_text="def")]
    assert _runs(highlight("abcdef", matches)) == [("abc", "A"), ("def", "B")]


def test_adjacent_spans_of_same_match_id_form_one_run():
    matches = [Match(id="x", original_text="abc"), Match(id="x", original_text="def")]
    assert _runs(highlight("abcdefg", matches)) == [("abcdef", "x"), ("g", None)]


def test_repeated_phrase_is_tagged_once():
    segments = highlight("ab ab ab", [Match(id="m", original_text="ab")])
    tagged = [segment for segment in segments if segment.highlight is not None]
    assert len(tagged) == 1
    assert tagged[0].text == "ab"


@pytest.mark.parametrize(
    "text, substrings",
    [
        ("The cat sat. The cat sat. Dogs bark.", ["cat", "sat. The", "Dogs", "bark."]),
        ("aaaaaa", ["aa", "aa", "aa", "aa"]),
        ("你好，世界。你好！", ["你好", "世界", "你好"]),
        ("no overlap here", ["zzz", "", "here"]),
    ],
)
def test_segments_are_lossless_and_maximal(text, substrings):
    matches = [Match(id=f"m{index}", original_text=value) for index, value in enumerate(substrings)]

    segments = highlight(text, matches)

    assert "".join(segment.text for segment in segments) == text
    assert all(segment.text for segment in segments)
    for left, right in zip(segments, segments[1:]):
        assert left.match_id != right.match_id


def test_dict_matches_are_accepted_and_ids_filled_in():
    matches = [
        {"originalText": "alpha", "similarity": 75},
        {"id": 7, "originalText": "beta"},
    ]

    segments = highlight("alpha beta", matches)

    assert _runs(segments) == [("alpha", "match-0"), (" ", None), ("beta", "7")]


def test_find_companion_and_offsets():
    segments = highlight(
        "one two three",
        [Match(id="b", original_text="three"), Match(id="a", original_text="one")],
    )

    assert find_companion(segments, "a") == 0
    assert find_companion(segments, "b") == 2
    assert find_companion(segments, "missing") is None
    assert segment_offsets(segments) == [0, 3, 8]


def test_highlight_color_is_stable_and_from_palette():
    assert highlight_color("m1") == highlight_color("m1")
    assert highlight_color("m1") in HIGHLIGHT_PALETTE
    assert highlight_color(42) in HIGHLIGHT_PALETTE


@pytest.mark.parametrize(
    "similarity, expected",
    [(100, "#ef4444"), (80, "#ef4444"), (79.9, "#f59e0b"), (60, "#f59e0b"), (59, "#22c55e"), (0, "#22c55e")],
)
def test_similarity_color_tiers(similarity, expected):
    assert similarity_color(similarity) == expected


def test_fallback_id_skips_ids_already_in_use():
    matches = [
        {"id": "match-1", "originalText": "foo"},
        {"originalText": "bar"},
    ]

    segments = highlight("foo and bar", matches)

    assert _runs(segments) == [("foo", "match-1"), (" and ", None), ("bar", "match-2")]
