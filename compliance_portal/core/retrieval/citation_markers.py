"""
Citation marker parsing.

Recognized forms: ``[Source 2]``, ``[Source 1, 2]``, ``[Sources 1 and 3]``,
and the bare ``[2]`` / ``[1, 2]`` forms models fall back to.

Dependencies: re
System role: Answer post-processing for the retrieval resolver
"""

import re

MARKER_PATTERN = re.compile(
    r"\[\s*(?:sources?\s*)?(\d+(?:\s*(?:,|&|and)\s*\d+)*)\s*\]",
    re.IGNORECASE,
)
_NUMBER = re.compile(r"\d+")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\n+")
_MARKER_SPACE = re.compile(r"\s+([.,;:!?])")


def marker_numbers(text: str) -> list[int]:
    """Source numbers in order of first appearance, without duplicates."""
    seen: list[int] = []
    for match in MARKER_PATTERN.finditer(text):
        for number in _NUMBER.findall(match.group(1)):
            value = int(number)
            if value not in seen:
                seen.append(value)
    return seen


def extract_citation_markers(answer: str) -> list[int]:
    """
    Parse every cited source number from an answer.

    Args:
        answer: Model output

    Returns:
        list[int]: Unique source numbers, stable first-appearance order
    """
    return marker_numbers(answer)


def strip_markers(text: str) -> str:
    """Remove markers, leaving readable prose."""
    stripped = MARKER_PATTERN.sub("", text)
    return _MARKER_SPACE.sub(r"\1", stripped).strip()


def split_sentences(text: str) -> list[str]:
    """Split answer text into sentences; markers after the period stay attached."""
    sentences: list[str] = []
    for part in _SENTENCE_SPLIT.split(text):
        part = part.strip()
        if not part:
            continue
        # A sentence that is only markers belongs to the previous sentence
        if sentences and not strip_markers(part):
            sentences[-1] = f"{sentences[-1]} {part}"
        else:
            sentences.append(part)
    return sentences


def sentences_by_source(answer: str) -> dict[int, list[str]]:
    """
    Map each cited source number to the answer sentences citing it.

    Returns:
        dict[int, list[str]]: Source number -> marker-free citing sentences
    """
    mapping: dict[int, list[str]] = {}
    for sentence in split_sentences(answer):
        for number in marker_numbers(sentence):
            mapping.setdefault(number, []).append(strip_markers(sentence))
    return mapping
