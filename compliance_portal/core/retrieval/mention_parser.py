"""
Jurisdiction and category mention parsing.

Finds ``@state`` and ``#category`` tags in a query, resolves each to a US
state or to a vertical / document-type slug, and strips the matched tags
from the text sent to embedding and generation.

Matching order for a state tag: ``@all``, exact code, name or name without
spaces; then name/code prefix; then name containment. Category tags match
the slug or display name exactly, then by prefix, then by containment.
Unmatched tags stay in the query.

Dependencies: enum, re, pydantic
System role: Query preprocessing for the retrieval resolver
"""

import enum
import re

from pydantic import BaseModel, Field

ALL_STATES = "ALL"

US_STATES: dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
}

VERTICALS: dict[str, str] = {
    "sports-online": "Sports (Online)",
    "sports-retail": "Sports (Retail)",
    "igaming": "iGaming",
    "landbased": "Landbased",
    "lottery": "Lottery",
    "ilottery": "iLottery",
    "fantasy-sports": "Fantasy Sports",
}

DOCUMENT_TYPES: dict[str, str] = {
    "statute": "Statute",
    "regulation": "Regulation",
    "formal-guidance": "Formal Guidance",
    "informal-guidance": "Informal Guidance",
    "technical-bulletin": "Technical Bulletin",
    "licensing-forms": "Licensing Forms / Instructions",
    "aml": "Anti-Money Laundering",
    "data": "Data",
    "other": "Other",
}

MENTION_PATTERN = re.compile(r"@([a-zA-Z]+)|#([a-zA-Z][a-zA-Z-]*)")
_WHITESPACE = re.compile(r"\s+")


class CategoryKind(str, enum.Enum):
    VERTICAL = "vertical"
    DOCUMENT_TYPE = "document_type"


CATEGORIES: list[tuple[str, str, CategoryKind]] = [
    *((slug, name, CategoryKind.VERTICAL) for slug, name in VERTICALS.items()),
    *((slug, name, CategoryKind.DOCUMENT_TYPE) for slug, name in DOCUMENT_TYPES.items()),
]


class StateMention(BaseModel):
    """One resolved ``@tag``."""

    code: str
    name: str
    raw: str = Field(description="Matched text including the @")
    position: int = Field(description="Offset of the @ in the original query")


class CategoryMention(BaseModel):
    """One resolved ``#tag``."""

    slug: str
    display_name: str
    kind: CategoryKind
    raw: str = Field(description="Matched text including the #")
    position: int = Field(description="Offset of the # in the original query")


class QueryMentions(BaseModel):
    """Query with mentions removed plus the resolved filters."""

    clean_query: str
    mentions: list[StateMention] = Field(default_factory=list)
    state_codes: list[str] = Field(default_factory=list)
    category_mentions: list[CategoryMention] = Field(default_factory=list)
    vertical_ids: list[str] = Field(default_factory=list)
    document_type_ids: list[str] = Field(default_factory=list)


def find_state(text: str) -> tuple[str, str] | None:
    """
    Resolve a tag to ``(code, name)``.

    Args:
        text: Tag text without the @

    Returns:
        tuple | None: State code and name, or None when nothing matches
    """
    search = text.lower()
    if not search:
        return None
    if search == ALL_STATES.lower():
        return ALL_STATES, "All States"

    for code, name in US_STATES.items():
        lowered = name.lower()
        if search in (code.lower(), lowered, lowered.replace(" ", "")):
            return code, name

    for code, name in US_STATES.items():
        if name.lower().startswith(search) or code.lower().startswith(search):
            return code, name

    for code, name in US_STATES.items():
        if search in name.lower():
            return code, name

    return None


def find_category(text: str) -> tuple[str, str, CategoryKind] | None:
    """
    Resolve a tag to ``(slug, display name, kind)``.

    Verticals are tried before document types at every matching stage.
    """
    search = text.lower()
    if not search:
        return None

    for slug, name, kind in CATEGORIES:
        lowered = name.lower()
        if search in (slug, lowered, lowered.replace(" ", ""), lowered.replace(" ", "-")):
            return slug, name, kind

    for slug, name, kind in CATEGORIES:
        if name.lower().startswith(search) or slug.startswith(search):
            return slug, name, kind

    for slug, name, kind in CATEGORIES:
        if search in name.lower() or search in slug:
            return slug, name, kind

    return None


def parse_query_mentions(query: str) -> QueryMentions:
    """
    Extract ``@state`` and ``#category`` mentions from a query.

    Args:
        query: Raw user query

    Returns:
        QueryMentions: Cleaned query (matched tags removed, whitespace
            collapsed), mentions in order, unique codes and slugs in order
    """
    parsed = QueryMentions(clean_query="")
    pieces: list[str] = []
    cursor = 0

    for match in MENTION_PATTERN.finditer(query):
        state_tag, category_tag = match.groups()
        if state_tag is not None:
            state = find_state(state_tag)
            if state is None:
                continue
            code, name = state
            parsed.mentions.append(
                StateMention(code=code, name=name, raw=match.group(0), position=match.start())
            )
            if code not in parsed.state_codes:
                parsed.state_codes.append(code)
        else:
            category = find_category(category_tag)
            if category is None:
                continue
            slug, name, kind = category
            parsed.category_mentions.append(
                CategoryMention(slug=slug, display_name=name, kind=kind, raw=match.group(0), position=match.start())
            )
            target = parsed.vertical_ids if kind == CategoryKind.VERTICAL else parsed.document_type_ids
            if slug not in target:
                target.append(slug)
        pieces.append(query[cursor:match.start()])
        cursor = match.end()

    pieces.append(query[cursor:])
    parsed.clean_query = _WHITESPACE.sub(" ", "".join(pieces)).strip()
    return parsed
