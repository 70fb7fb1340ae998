"""
Stage 1: Entity Extraction
==========================
Surface-pattern rules that pull candidate company names out of free text.
Candidates feed Stage 2, which merges them across sources.

Rules (applied in order, earlier rules win on overlapping spans):
- Capitalized phrase + legal/corporate suffix ("Acme Solutions Inc.")
- CamelCase compound proper nouns ("DataFlow", "OpenAI")
- Capitalized phrase + web TLD ("Shopify.com")
- Capitalized phrase + informal business noun ("Maple startup")
"""

import logging
import math
import re
from typing import List, Dict, Optional, Tuple

from ..models.schemas import CandidateEntity, RawMention
from ..config.settings import (
    EXTRACTION_RULES,
    GENERIC_NAME_WORDS,
    GENERIC_NAME_STOPLIST,
    EXTRACTION_CONFIDENCE,
    MIN_NAME_LENGTH,
    MAX_NAME_LENGTH,
)

logger = logging.getLogger(__name__)

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://")
_DOMAIN_PREFIX = re.compile(r"^[a-z][a-z0-9+.-]*://(www\.)?")


def normalize_name(name: str) -> str:
    """Merge key for a company name: case-folded alphanumerics only."""
    if not name:
        return ""
    return "".join(ch for ch in name.casefold() if ch.isalnum())


def infer_domain(name: str) -> str:
    """Website for a surface name, literal when the name looks like a domain."""
    if "." in name:
        domain = re.sub(r"\s+", "", name.lower())
        if not _SCHEME.match(domain):
            domain = "https://" + domain
        return domain
    stem = "".join(ch for ch in name.lower() if ch.isalnum())
    return f"https://www.{stem}.com"


def domain_stem(website: Optional[str]) -> str:
    """'https://www.acme.com' -> 'acme'"""
    if not website:
        return ""
    return _DOMAIN_PREFIX.sub("", website.lower()).split(".")[0]


def mentions_company(name: str, website: Optional[str], text: Optional[str]) -> bool:
    """
    Textual mention test used when attributing evidence to a company.

    A text mentions the company if it contains the full name, at least half
    of the name's distinctive long words (more than 3 characters, suffixes
    such as "Systems" or "Group" excluded), or the website's domain stem.
    """
    if not name or not text or not isinstance(text, str):
        return False

    lower_text = text.lower()
    lower_name = name.lower()
    if lower_name in lower_text:
        return True

    words = [w.strip(".") for w in re.split(r"[\s,]+", lower_name)]
    words = [w for w in words if len(w) > 3 and w not in GENERIC_NAME_WORDS]
    if words:
        hits = sum(1 for w in words if re.search(r"\b" + re.escape(w) + r"\b", lower_text))
        if hits >= math.ceil(len(words) / 2):
            return True

    stem = domain_stem(website)
    if len(stem) > 3 and stem in lower_text:
        return True

    return False


class EntityExtractionStage:
    """
    Stage 1: Extract candidate company entities from text.
    """

    def __init__(self, rules: Optional[List[Dict]] = None, stoplist: Optional[List[str]] = None):
        """
        Initialize with extraction rules or use defaults.
        """
        self.rules = rules or EXTRACTION_RULES
        self.stoplist = {s.lower() for s in (stoplist or GENERIC_NAME_STOPLIST)}
        self._compile_patterns()

    def _compile_patterns(self):
        """Pre-compile regex patterns once per stage"""
        self.compiled_rules = []
        for rule in self.rules:
            self.compiled_rules.append({
                "rule": rule["rule"],
                "regex": re.compile(rule["pattern"]),
            })

    def extract(self, text: Optional[str]) -> List[CandidateEntity]:
        """
        Extract candidate entities from a single text.

        Args:
            text: Free text (title + body of one mention)

        Returns:
            Candidates in rule order, deduplicated by normalized name
        """
        if not text or not isinstance(text, str):
            return []

        accepted_spans: List[Tuple[int, int]] = []
        seen = set()
        candidates = []

        for rule in self.compiled_rules:
            for match in rule["regex"].finditer(text):
                span = match.span()
                if self._overlaps(span, accepted_spans):
                    continue

                name = match.group(0).strip().rstrip(".").strip()
                if not self._is_valid_name(name):
                    continue
                accepted_spans.append(span)

                key = normalize_name(name)
                if not key or key in seen:
                    continue
                seen.add(key)

                candidates.append(CandidateEntity(
                    name=name,
                    inferred_domain=infer_domain(name),
                    rule=rule["rule"],
                    extraction_confidence=EXTRACTION_CONFIDENCE,
                ))

        return candidates

    def process(self, mention: RawMention) -> List[CandidateEntity]:
        """
        Extract candidates from a mention and link each back to it.

        Args:
            mention: Source evidence

        Returns:
            Candidates carrying a reference to the mention
        """
        return [
            candidate.model_copy(update={"source_mention": mention})
            for candidate in self.extract(mention.text)
        ]

    def _is_valid_name(self, name: str) -> bool:
        """Length, casing and stoplist checks"""
        if not (MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH):
            return False
        if not any(ch.isupper() for ch in name):
            return False
        if name.lower() in self.stoplist:
            logger.debug("extraction.stoplisted name=%s", name)
            return False
        return True

    @staticmethod
    def _overlaps(span: Tuple[int, int], accepted: List[Tuple[int, int]]) -> bool:
        start, end = span
        return any(start < a_end and a_start < end for a_start, a_end in accepted)
