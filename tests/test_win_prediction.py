"""Win probability scraping from rendered page text."""

from cricfeed.extract.win_prediction import normalize_percent, parse_win_prediction_from_html
from cricfeed.models import TeamSnapshot

INDIA = TeamSnapshot(name="India", short_name="IND")
AUSTRALIA = TeamSnapshot(name="Australia", short_name="AUS")


def test_normalize_percent():
    assert normalize_percent("62") == "62%"
    assert normalize_percent("62.50") == "62.5%"
    assert normalize_percent("101") is None
    assert normalize_percent("x") is None


def test_percent_next_to_team_labels():
    html = "<div>Win Probability</div><p><b>IND</b> 62%</p><p><b>AUS</b> 38%</p>"
    prediction = parse_win_prediction_from_html(html, INDIA, AUSTRALIA)

    assert prediction.team1_percent == "62%"
    assert prediction.team2_percent == "38%"


def test_decimal_percent_with_full_team_names():
    html = "<li>India <em>55.5%</em></li><li>Australia <em>44.5%</em></li>"
    prediction = parse_win_prediction_from_html(html, INDIA, AUSTRALIA)

    assert prediction.team1_percent == "55.5%"
    assert prediction.team2_percent == "44.5%"


def test_implausible_pair_is_rejected():
    html = "<p>IND 90%</p><p>AUS 60%</p>"
    assert parse_win_prediction_from_html(html, INDIA, AUSTRALIA) is None


def test_snippet_fallback_when_labels_are_missing():
    html = "<p>Win prediction: 70% vs 30% after the powerplay</p>"
    prediction = parse_win_prediction_from_html(html, INDIA, AUSTRALIA)

    assert prediction.team1_percent == "70%"
    assert prediction.team2_percent == "30%"


def test_no_prediction():
    assert parse_win_prediction_from_html("", INDIA, AUSTRALIA) is None
    assert parse_win_prediction_from_html("<p>India won the toss</p>", INDIA, AUSTRALIA) is None
