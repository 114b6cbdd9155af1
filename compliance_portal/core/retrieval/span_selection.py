"""
Relevant span selection.

Picks the run of sentences inside a chunk that shares the most terms with
the answer text citing it, so highlighted spans stay short. Keyword
overlap is an approximation; callers depend only on the function contract.

Dependencies: re, compliance_portal.models.search
System role: Citation span heuristic for the retrieval resolver
"""

import re

from compliance_portal.models.search import Span

_SENTENCE_END = re.compile(r"[.!?]+[\"')\]]*(?:\s+|$)|\n\s*\n")
_TERM = re.compile(r"[a-z0-9]+(?:[-'][a-z0-9]+)*")

STOPWORDS = frozenset(
    """
    a an and are as at be been but by can could did do does for from had has
    have how i if in into is it its may must not of on or our shall should so
    such than that the their them then there these they this those to under
    was we were what when where which while who will with would you your
    """.split()
)


def terms(text: str) -> set[str]:
    """Lowercase content terms (stopwords and 1-2 character tokens dropped)."""
    return {
        term
        for term in _TERM.findall(text.lower())
        if len(term) > 2 and term not in STOPWORDS
    }


def sentence_spans(text: str) -> list[tuple[int, int]]:
    """Trimmed ``(start, end)`` offsets of each sentence in ``text``."""
    spans: list[tuple[int, int]] = []
    cursor = 0
    boundaries = [m.end() for m in _SENTENCE_END.finditer(text)]
    for boundary in [*boundaries, len(text)]:
        start, end = cursor, boundary
        while start < end and text[start].isspace():
            start += 1
        while end > start and text[end - 1].isspace():
            end -= 1
        if end > start:
            spans.append((start, end))
        cursor = boundary
    return spans


def _trimmed(chunk_text: str) -> Span:
    start, end = 0, len(chunk_text)
    while start < end and chunk_text[start].isspace():
        start += 1
    while end > start and chunk_text[end - 1].isspace():
        end -= 1
    return Span(start=start, end=end, text=chunk_text[start:end])


def pick_most_relevant_span(
    chunk_text: str,
    answer_text: str,
    max_sentences: int = 2,
) -> Span:
    """
    Find the sentence run in ``chunk_text`` that best supports ``answer_text``.

    Runs of 1..max_sentences consecutive sentences are scored by the number
    of distinct answer terms they contain. Ties go to the shorter run, then
    to the earlier one.

    Args:
        chunk_text: Source chunk text
        answer_text: Answer sentence(s) citing the chunk
        max_sentences: Longest run considered

    Returns:
        Span: Offsets relative to ``chunk_text``; ``chunk_text[start:end] == text``.
            The whole (trimmed) chunk when nothing overlaps.
    """
    wanted = terms(answer_text)
    spans = sentence_spans(chunk_text)
    if not wanted or not spans:
        return _trimmed(chunk_text)

    sentence_terms = [terms(chunk_text[start:end]) for start, end in spans]
    best: tuple[int, int, int] | None = None  # (score, first, last)
    for first in range(len(spans)):
        covered: set[str] = set()
        for last in range(first, min(len(spans), first + max_sentences)):
            covered |= sentence_terms[last] & wanted
            score = len(covered)
            if score == 0:
                continue
            if best is None or score > best[0]:
                best = (score, first, last)
            elif score == best[0] and (last - first) < (best[2] - best[1]):
                best = (score, first, last)

    if best is None:
        return _trimmed(chunk_text)

    start, end = spans[best[1]][0], spans[best[2]][1]
    return Span(start=start, end=end, text=chunk_text[start:end])
