"""
Retrieval and citation resolution.

Import RetrievalResolver from ``compliance_portal.core.retrieval.resolver``;
the parsing and span helpers are importable on their own.
"""

from compliance_portal.core.retrieval.citation_markers import extract_citation_markers
from compliance_portal.core.retrieval.mention_parser import parse_query_mentions
from compliance_portal.core.retrieval.span_selection import pick_most_relevant_span

__all__ = ["extract_citation_markers", "parse_query_mentions", "pick_most_relevant_span"]
