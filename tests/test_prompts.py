from search_term_analyzer.prompts import build_analysis_prompt, build_context_prompt


def test_analysis_prompt_embeds_context_and_csv():
    csv = "Search term\nemergency plumber\nplumber jobs"
    prompt = build_analysis_prompt(csv, "San Diego, CA", ["Roto-Rooter", "Mr. Rooter"], ["drain cleaning", "water heater repair"])

    assert "- Primary Targeting Location: San Diego, CA" in prompt
    assert "- Known Competitors: Roto-Rooter, Mr. Rooter" in prompt
    assert "The business provides these specific services: drain cleaning, water heater repair." in prompt
    assert f"```csv\n{csv}\n```" in prompt
    for category in ("'Positive'", "'Negative'", "'Competitor'", "'Generic'"):
        assert category in prompt
    assert '"locationExclusion": "string"}' in prompt


def test_analysis_prompt_without_services():
    prompt = build_analysis_prompt("a\nb", "Austin, TX", [], [])
    assert "The business's services were not provided" in prompt
    assert "specific services:" not in prompt


def test_context_prompt():
    prompt = build_context_prompt("https://example.com")
    assert prompt.startswith("Analyze the business at this website: https://example.com.")
    assert '{"location": "string", "competitors": ["string"], "services": ["string"]}' in prompt
    assert "Homepage content" not in prompt

    assert "Title: Acme" in build_context_prompt("https://example.com", "Title: Acme")
