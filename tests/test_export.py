from search_term_analyzer.export import records_to_csv, write_csv
from search_term_analyzer.models import AnalysisRecord


def test_quotes_are_doubled():
    csv = records_to_csv([{"term": 'a"b', "category": "c"}], ["term", "category"])
    assert csv.split("\n") == ['"term","category"', '"a""b","c"']


def test_default_headers_and_records():
    record = AnalysisRecord(
        term="roto rooter prices",
        category="Competitor",
        ad_group="General",
        competitor_brand="Roto-Rooter",
    )
    lines = records_to_csv([record]).split("\n")
    assert lines[0] == (
        '"Search Term","Category","Ad Group","Positive Phrase",'
        '"Negative Phrase","Competitor","Location Exclusion"'
    )
    assert lines[1] == '"roto rooter prices","Competitor","General","","","Roto-Rooter",""'


def test_no_records_is_header_only():
    assert records_to_csv([], ["term"]) == '"term"'


def test_write_csv(tmp_path):
    path = write_csv([AnalysisRecord(term="x", category="Generic")], tmp_path / "out.csv")
    assert path.read_text(encoding="utf-8").endswith('"x","Generic","","","","",""')


def test_extra_display_labels_pad_rows():
    headers = [
        "Search Term", "Category", "Ad Group", "Positive Phrase",
        "Negative Phrase", "Competitor", "Location Exclusion", "Notes",
    ]
    lines = records_to_csv([AnalysisRecord(term="x", category="Generic")], headers).split("\n")
    assert lines[1] == '"x","Generic","","","","","",""'
    assert lines[1].count('","') == lines[0].count('","') == 7
