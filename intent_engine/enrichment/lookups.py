"""
Enrichment lookups: contacts (Hunter-style domain search) and firmographics
(Clearbit-style company find), composed into one callable per domain.
"""

import logging
import re
from typing import List, Dict, Optional, Any

import requests

from ..errors import EnrichmentError
from ..models.schemas import Contact, Enrichment, EnrichmentResult
from ..config.settings import ENRICHMENT_CONFIG, RELEVANT_CONTACT_ROLES

logger = logging.getLogger(__name__)


def extract_domain(website: Optional[str]) -> Optional[str]:
    """'https://www.acme.com/about' -> 'acme.com'"""
    if not website:
        return None
    host = re.sub(r"^[a-z][a-z0-9+.-]*://", "", website.strip().lower())
    host = host.split("/")[0].split("?")[0]
    if host.startswith("www."):
        host = host[4:]
    return host if "." in host else None


class HunterContactLookup:
    """Decision-maker emails for a domain"""

    name = "hunter"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key or ENRICHMENT_CONFIG["hunter_api_key"]
        self.url = ENRICHMENT_CONFIG["hunter_url"]
        self.min_confidence = ENRICHMENT_CONFIG["hunter_min_confidence"]
        self.max_contacts = ENRICHMENT_CONFIG["hunter_max_contacts"]
        self.timeout = ENRICHMENT_CONFIG["request_timeout_seconds"]
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def lookup(self, domain: str) -> List[Contact]:
        """
        Find reliable contacts in relevant roles.

        Args:
            domain: Bare domain ("acme.com")

        Returns:
            At most max_contacts contacts, most confident first
        """
        try:
            response = self.session.get(
                self.url,
                params={"domain": domain, "api_key": self.api_key, "limit": 5},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json().get("data") or {}
        except requests.RequestException as e:
            raise EnrichmentError(f"hunter lookup failed for {domain}: {e}", code="hunter_unavailable") from e
        except ValueError as e:
            raise EnrichmentError(f"hunter returned invalid JSON for {domain}", code="hunter_bad_payload") from e

        emails = [
            e for e in data.get("emails") or []
            if (e.get("confidence") or 0) > self.min_confidence and self._relevant_role(e.get("position"))
        ]
        emails.sort(key=lambda e: -(e.get("confidence") or 0))

        return [
            Contact(
                email=e["value"],
                confidence=min(100, int(e.get("confidence") or 0)),
                role=e.get("position"),
                source="hunter.io",
            )
            for e in emails[:self.max_contacts]
            if e.get("value")
        ]

    @staticmethod
    def _relevant_role(position: Optional[str]) -> bool:
        role = (position or "").lower()
        return any(keyword in role for keyword in RELEVANT_CONTACT_ROLES)


class ClearbitCompanyLookup:
    """Firmographics for a domain"""

    name = "clearbit"

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key or ENRICHMENT_CONFIG["clearbit_api_key"]
        self.url = ENRICHMENT_CONFIG["clearbit_url"]
        self.timeout = ENRICHMENT_CONFIG["request_timeout_seconds"]
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def lookup(self, domain: str) -> Optional[Enrichment]:
        """
        Look up a company by domain.

        Args:
            domain: Bare domain ("acme.com")

        Returns:
            Enrichment, or None when the company is unknown
        """
        try:
            response = self.session.get(
                self.url,
                params={"domain": domain},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise EnrichmentError(f"clearbit lookup failed for {domain}: {e}", code="clearbit_unavailable") from e
        except ValueError as e:
            raise EnrichmentError(f"clearbit returned invalid JSON for {domain}", code="clearbit_bad_payload") from e

        return self._to_enrichment(data or {})

    @staticmethod
    def _to_enrichment(data: Dict[str, Any]) -> Enrichment:
        metrics = data.get("metrics") or {}
        geo = data.get("geo") or {}
        category = data.get("category") or {}

        location_parts = [geo.get("city"), geo.get("state"), geo.get("country")]
        location = ", ".join(part for part in location_parts if part) or None

        return Enrichment(
            funding_total=metrics.get("raised"),
            employees=metrics.get("employees"),
            founded_year=data.get("foundedYear"),
            industry=category.get("industry") or category.get("sector"),
            location=location,
            annual_revenue=metrics.get("annualRevenue") or metrics.get("estimatedAnnualRevenue"),
        )


class CompositeEnrichmentLookup:
    """
    Callable enrichment lookup: website or domain in, EnrichmentResult out.
    A failing part is logged and skipped; if every part fails the last
    error propagates.
    """

    def __init__(
        self,
        contacts: Optional[HunterContactLookup] = None,
        firmographics: Optional[ClearbitCompanyLookup] = None,
    ):
        self.contacts = contacts
        self.firmographics = firmographics

    def __call__(self, website: Optional[str]) -> Optional[EnrichmentResult]:
        domain = extract_domain(website)
        if not domain:
            return None

        result = EnrichmentResult()
        errors = []
        attempted = 0

        if self.firmographics is not None:
            attempted += 1
            try:
                result.enrichment = self.firmographics.lookup(domain)
            except EnrichmentError as e:
                logger.warning("enrichment.failed provider=clearbit domain=%s code=%s", domain, e.code)
                errors.append(e)

        if self.contacts is not None:
            attempted += 1
            try:
                result.contacts = self.contacts.lookup(domain)
            except EnrichmentError as e:
                logger.warning("enrichment.failed provider=hunter domain=%s code=%s", domain, e.code)
                errors.append(e)

        if attempted and len(errors) == attempted:
            raise errors[-1]

        if result.enrichment is None and not result.contacts:
            return None
        return result


def create_default_enrichment_lookup(session: Optional[requests.Session] = None) -> Optional[CompositeEnrichmentLookup]:
    """Lookup over whichever providers have API keys, or None"""
    contacts = HunterContactLookup(session=session)
    firmographics = ClearbitCompanyLookup(session=session)

    if not contacts.is_configured and not firmographics.is_configured:
        return None

    return CompositeEnrichmentLookup(
        contacts=contacts if contacts.is_configured else None,
        firmographics=firmographics if firmographics.is_configured else None,
    )
