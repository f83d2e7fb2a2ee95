"""BusinessContext and AnalysisRecord: the data passed between pipeline steps."""

from dataclasses import dataclass, field, replace
from typing import Any


CATEGORIES = ("Positive", "Negative", "Competitor", "Generic")

# Wire names: keys of each JSON line the model streams back
RECORD_FIELDS = (
    "term",
    "category",
    "adGroup",
    "positivePhrase",
    "negativePhrase",
    "competitorBrand",
    "locationExclusion",
)

# Table / CSV export headings, same order as RECORD_FIELDS
CSV_HEADERS = (
    "Search Term",
    "Category",
    "Ad Group",
    "Positive Phrase",
    "Negative Phrase",
    "Competitor",
    "Location Exclusion",
)


@dataclass(frozen=True)
class BusinessContext:
    location: str = ""
    competitors: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    sources: tuple[str, ...] = field(default=(), compare=False)

    def with_location(self, location: str) -> "BusinessContext":
        """Return a copy with only the location replaced."""
        return replace(self, location=location)


@dataclass(frozen=True)
class AnalysisRecord:
    term: str
    category: str
    ad_group: str = ""
    positive_phrase: str = ""
    negative_phrase: str = ""
    competitor_brand: str = ""
    location_exclusion: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisRecord":
        """Build a record from a decoded JSON line (camelCase keys)."""

        def _text(key: str) -> str:
            value = data.get(key)
            if value is None:
                return ""
            return value if isinstance(value, str) else str(value)

        return cls(
            term=_text("term"),
            category=_text("category"),
            ad_group=_text("adGroup"),
            positive_phrase=_text("positivePhrase"),
            negative_phrase=_text("negativePhrase"),
            competitor_brand=_text("competitorBrand"),
            location_exclusion=_text("locationExclusion"),
        )

    def to_dict(self) -> dict[str, str]:
        return dict(zip(RECORD_FIELDS, self.values()))

    def values(self) -> tuple[str, ...]:
        return (
            self.term,
            self.category,
            self.ad_group,
            self.positive_phrase,
            self.negative_phrase,
            self.competitor_brand,
            self.location_exclusion,
        )
