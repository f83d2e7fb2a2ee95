"""Prompt text for the business context call and the streaming classification call."""

from collections.abc import Sequence


def build_context_prompt(website_url: str, snapshot_text: str = "") -> str:
    """Prompt asking the model to research a business with web search."""
    prompt = (
        f"Analyze the business at this website: {website_url}.\n"
        "Using a web search, find:\n"
        '1. The primary physical business location (e.g., "San Diego, CA").\n'
        "2. A list of its top 3-5 direct competitors.\n"
        "3. A concise list of the main products or services offered "
        '(e.g., ["emergency plumbing", "drain cleaning", "water heater repair"]).\n\n'
        "Return ONLY a single, minified JSON object with this exact structure: "
        '{"location": "string", "competitors": ["string"], "services": ["string"]}.\n'
        "Do not include any other text or markdown formatting."
    )
    if snapshot_text:
        prompt += (
            "\n\nHomepage content fetched from the website "
            "(use it alongside your search results):\n"
            f"{snapshot_text}"
        )
    return prompt


def build_analysis_prompt(
    csv_content: str,
    location: str,
    competitors: Sequence[str],
    services: Sequence[str],
) -> str:
    """
    Build the classification prompt.

    The model is told to stream one minified JSON object per line, which is
    what classifier.iter_records() decodes.

    Args:
        csv_content: Raw text of the uploaded CSV, embedded verbatim
        location: Primary targeting location
        competitors: Known competitor names
        services: Services the business offers (may be empty)

    Returns:
        The complete prompt string
    """
    if services:
        services_context = f"The business provides these specific services: {', '.join(services)}."
    else:
        services_context = (
            "The business's services were not provided; "
            "use general knowledge for the industry implied by the search terms."
        )

    return f"""\
You are a high-speed Google Ads analysis engine. Your task is to analyze the following search terms from a CSV based on the provided business context. For each term, stream back a single, minified JSON object on its own line. Do not add any other text, explanations, or markdown. Stream only the line-delimited JSON.

**Business Context:**
- Primary Targeting Location: {location}
- Known Competitors: {', '.join(competitors)}
- {services_context}

**JSON Output Structure:**
{{"term": "string", "category": "string", "adGroup": "string", "positivePhrase": "string", "negativePhrase": "string", "competitorBrand": "string", "locationExclusion": "string"}}

**Categorization Rules:**
1.  **'Positive'**: High-intent, relevant terms for the business that match its services and are within its location.
2.  **'Negative'**:
    - Clearly irrelevant terms (e.g., 'jobs', 'free', 'DIY', 'how to').
    - Terms for products/services NOT offered by the business (based on the provided service list).
3.  **'Competitor'**: Mentions a known competitor.
4.  **'Generic'**: Broad terms that could be relevant but lack specific intent.

**Field Definitions:**
- "term": The original search term.
- "category": Your classification based on the rules above.
- "adGroup": Based on the term and business services, create a concise, thematic ad group name in Title Case (e.g., for "24 hour emergency plumber cost", the group could be "Emergency Plumbing"). If no clear theme, use "General".
- "positivePhrase": If 'Positive', extract the valuable multi-word phrase. (e.g., for "24 hour emergency plumber cost", extract "24 hour emergency plumber"). Else, "".
- "negativePhrase": If 'Negative', extract the word/phrase making it negative (e.g., for "plumber jobs", extract "jobs". For an un-offered service like "furnace installation", extract "furnace installation"). Else, "".
- "competitorBrand": If 'Competitor', state the competitor's brand name. Else, "".
- "locationExclusion": The Primary Location can be complex (cities, zips, radius). If a search term includes a specific place CLEARLY OUTSIDE this Primary Location, state that place here. Else, "".

### Search Term Data:
```csv
{csv_content}
```
"""
