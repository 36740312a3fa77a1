"""
Unit tests for the low-level extractors: text keys, embedded JSON recovery,
overs arithmetic and status heuristics.
"""

import pytest

from conftest import escaped_blob, html_page, plain_blob

from cricfeed.extract.json_blobs import (
    extract_balanced,
    parse_escaped_json,
    pick_all_arrays_by_key,
    pick_all_objects_by_key,
    pick_array_by_key,
    pick_object_by_key,
)
from cricfeed.extract.overs import (
    format_overs_label,
    format_run_rate,
    format_start_date,
    normalize_overs_value,
    overs_to_decimal,
)
from cricfeed.extract.status import derive_status_type, has_usable_status, pick_best_status
from cricfeed.extract.text import (
    clean_text,
    normalize_player_key,
    normalize_player_name,
    select_best,
    slugify,
    team_names_likely_match,
)
from cricfeed.models import MatchStatusType


# --------------------------------------------------------------------------- #
#  Text helpers
# --------------------------------------------------------------------------- #


def test_clean_text_decodes_entities_and_collapses_whitespace():
    assert clean_text("  India&nbsp;vs   Australia &amp; co ") == "India vs Australia & co"


def test_slugify():
    assert slugify("India vs Australia, 2nd T20I") == "india-vs-australia-2nd-t20i"
    assert slugify("!!!") == "match"


def test_player_name_tags_are_stripped():
    assert normalize_player_name("Rohit Sharma (c)") == "Rohit Sharma"
    assert normalize_player_name("MS Dhoni (c, wk)") == "MS Dhoni"
    assert normalize_player_key("  Rohit   Sharma (wk)") == "rohit sharma"


def test_team_names_likely_match():
    assert team_names_likely_match("India", "India", "IND")
    assert team_names_likely_match("IND", "India", "IND")
    assert team_names_likely_match("India Women", "India", "IND")
    assert not team_names_likely_match("Australia", "India", "IND")
    assert not team_names_likely_match("", "India", "IND")


def test_team_names_short_key_needs_two_characters():
    # A one-letter short key would be contained in nearly every name.
    assert not team_names_likely_match("Australia", "Zimbabwe", "A")


def test_select_best_keeps_first_on_ties():
    assert select_best(["aa", "bb", "c"], len) == "aa"
    assert select_best([], len) is None


# --------------------------------------------------------------------------- #
#  Embedded JSON
# --------------------------------------------------------------------------- #


def test_extract_balanced_nested_object():
    source = 'prefix "a":{"b":{"c":1}} suffix'
    chunk = extract_balanced(source, source.index("{"))
    assert chunk.text == '{"b":{"c":1}}'
    assert source[chunk.end_index:] == " suffix"


def test_extract_balanced_unterminated_returns_none():
    source = '"a":{"b":{"c":1}'
    assert extract_balanced(source, source.index("{")) is None
    assert pick_object_by_key(source, "a") is None


def test_extract_balanced_counts_brackets_only():
    # Quoted brackets count too; only the opening kind matters.
    source = '{"a":"}","b":[1]}'
    assert extract_balanced(source, 0).text == '{"a":"}'
    assert extract_balanced("[{]", 0).text == "[{]"


def test_extract_balanced_rejects_non_bracket_start():
    assert extract_balanced("abc", 0) is None
    assert extract_balanced("{}", 5) is None


def test_parse_escaped_json():
    assert parse_escaped_json('{\\"a\\":1}') == {"a": 1}
    assert parse_escaped_json("{not json}") is None


def test_pick_object_prefers_escaped_occurrence():
    html = html_page(plain_blob("miniscore", {"v": 1}), escaped_blob("miniscore", {"v": 2}))
    assert pick_object_by_key(html, "miniscore") == {"v": 2}


def test_pick_object_skips_broken_occurrences():
    html = '"a":{not json} "a":{"v":3}'
    assert pick_object_by_key(html, "a") == {"v": 3}


def test_pick_array_with_nested_arrays():
    html = html_page(escaped_blob("scoreCard", [{"x": [1, 2]}, {"y": 3}]))
    assert pick_array_by_key(html, "scoreCard") == [{"x": [1, 2]}, {"y": 3}]


def test_pick_all_collects_every_occurrence():
    html = html_page(
        escaped_blob("matchHeader", {"matchId": 1}),
        escaped_blob("matchHeader", {"matchId": 2}),
        plain_blob("scoreCard", []),
        plain_blob("scoreCard", [{"inningsId": 1}]),
    )
    assert [header["matchId"] for header in pick_all_objects_by_key(html, "matchHeader")] == [1, 2]
    assert pick_all_arrays_by_key(html, "scoreCard") == [[], [{"inningsId": 1}]]


def test_missing_key_yields_nothing():
    assert pick_object_by_key("<html></html>", "miniscore") is None
    assert pick_all_arrays_by_key("", "scoreCard") == []


# --------------------------------------------------------------------------- #
#  Overs
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.3", "12.3"),
        ("12.8", "13.2"),
        ("12.6", "13"),
        ("12.0", "12.0"),
        ("20", "20"),
        (48.2, "48.2"),
        (20.0, "20"),
        ("", None),
        (None, None),
        ("abc", None),
    ],
)
def test_normalize_overs_value(raw, expected):
    assert normalize_overs_value(raw) == expected


def test_normalized_overs_are_stable():
    for overs in range(0, 50):
        for balls in range(0, 6):
            value = f"{overs}.{balls}"
            assert normalize_overs_value(value) == value


def test_overs_label_and_decimal():
    assert format_overs_label(48.2) == "48.2 Overs"
    assert format_overs_label(None) == "-"
    assert overs_to_decimal("12.3") == 12.5
    assert overs_to_decimal("x") is None


def test_format_run_rate():
    assert format_run_rate(250, "48.2") == "5.17"
    assert format_run_rate(161, 18) == "8.94"
    assert format_run_rate(10, 0) == "-"
    assert format_run_rate(None, "5") == "-"
    assert format_run_rate("abc", "5") == "-"


def test_format_start_date():
    assert format_start_date(1700000000000) == "Nov 14, 2023, 10:13 PM"
    assert format_start_date(None) == "-"
    assert format_start_date(0) == "-"


# --------------------------------------------------------------------------- #
#  Status
# --------------------------------------------------------------------------- #


def test_pick_best_status_prefers_result_over_chase():
    status = pick_best_status("India need 10 runs", "India won by 5 wickets", "")
    assert status == "India won by 5 wickets"
    assert derive_status_type(status) == MatchStatusType.COMPLETE


def test_pick_best_status_without_candidates():
    assert pick_best_status(None, "", "   ") == "-"


def test_pick_best_status_dedupes_case_insensitively():
    assert pick_best_status("Stumps", "STUMPS").lower() == "stumps"


def test_completion_wins_over_live_words():
    assert derive_status_type("India won by 5 wickets. Australia need 10 runs") == MatchStatusType.COMPLETE


@pytest.mark.parametrize(
    "status, state, has_score, expected",
    [
        ("Match starts at 10:00 GMT", "Preview", False, MatchStatusType.UPCOMING),
        ("Day 2: Stumps", "", False, MatchStatusType.LIVE),
        ("India opt to bowl", "", True, MatchStatusType.LIVE),
        ("", "", False, MatchStatusType.UPCOMING),
        ("Match abandoned due to rain", "Abandon", False, MatchStatusType.COMPLETE),
    ],
)
def test_derive_status_type(status, state, has_score, expected):
    assert derive_status_type(status, state, "", has_score) == expected


def test_has_usable_status():
    assert has_usable_status("India won by 5 wickets")
    assert not has_usable_status("-")
    assert not has_usable_status("  ")
    assert not has_usable_status("Status unavailable")
