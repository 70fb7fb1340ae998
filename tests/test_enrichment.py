"""Tests for the enrichment lookups."""

from unittest.mock import Mock

import pytest
import requests

from intent_engine.config.settings import ENRICHMENT_CONFIG
from intent_engine.errors import EnrichmentError
from intent_engine.enrichment.lookups import (
    ClearbitCompanyLookup,
    CompositeEnrichmentLookup,
    HunterContactLookup,
    create_default_enrichment_lookup,
    extract_domain,
)
from intent_engine.models.schemas import Contact, Enrichment


def _session(payload=None, status_code=200, error=None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    session = Mock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return session


@pytest.mark.parametrize(
    "website, domain",
    [
        ("https://www.acme.com", "acme.com"),
        ("http://acme.io/about?x=1", "acme.io"),
        ("acme.ca", "acme.ca"),
        ("localhost", None),
        (None, None),
    ],
)
def test_extract_domain(website, domain) -> None:
    assert extract_domain(website) == domain


class TestHunterContactLookup:
    def test_keeps_confident_contacts_in_relevant_roles(self) -> None:
        session = _session({"data": {"emails": [
            {"value": "sales@acme.com", "confidence": 80, "position": "Sales Manager"},
            {"value": "ceo@acme.com", "confidence": 97, "position": "CEO"},
            {"value": "dev@acme.com", "confidence": 99, "position": "Engineer"},
            {"value": "intern@acme.com", "confidence": 60, "position": "Marketing Intern"},
        ]}})

        contacts = HunterContactLookup(api_key="key", session=session).lookup("acme.com")

        assert [c.email for c in contacts] == ["ceo@acme.com", "sales@acme.com"]
        assert contacts[0].confidence == 97
        assert contacts[0].source == "hunter.io"
        assert session.get.call_args.kwargs["params"]["domain"] == "acme.com"

    def test_caps_contact_count(self) -> None:
        emails = [{"value": f"d{i}@acme.com", "confidence": 90 + i, "position": "Director"} for i in range(5)]

        contacts = HunterContactLookup(api_key="key", session=_session({"data": {"emails": emails}})).lookup("acme.com")

        assert [c.email for c in contacts] == ["d4@acme.com", "d3@acme.com", "d2@acme.com"]

    def test_transport_error(self) -> None:
        session = _session(error=requests.ConnectionError("refused"))

        with pytest.raises(EnrichmentError) as exc_info:
            HunterContactLookup(api_key="key", session=session).lookup("acme.com")

        assert exc_info.value.code == "hunter_unavailable"


class TestClearbitCompanyLookup:
    def test_maps_company_fields(self) -> None:
        session = _session({
            "foundedYear": 2015,
            "category": {"industry": "Software", "sector": "Technology"},
            "geo": {"city": "Toronto", "state": "Ontario", "country": "Canada"},
            "metrics": {"raised": 12000000, "employees": 45, "estimatedAnnualRevenue": "$1M-$10M"},
        })

        enrichment = ClearbitCompanyLookup(api_key="key", session=session).lookup("acme.com")

        assert enrichment == Enrichment(
            funding_total=12000000,
            employees=45,
            founded_year=2015,
            industry="Software",
            location="Toronto, Ontario, Canada",
            annual_revenue="$1M-$10M",
        )
        assert session.get.call_args.kwargs["headers"]["Authorization"] == "Bearer key"

    def test_unknown_company(self) -> None:
        session = _session(status_code=404)
        assert ClearbitCompanyLookup(api_key="key", session=session).lookup("nowhere.com") is None


class TestCompositeEnrichmentLookup:
    def test_combines_both_parts(self) -> None:
        contacts = Mock()
        contacts.lookup.return_value = [Contact(email="ceo@acme.com", confidence=95)]
        firmographics = Mock()
        firmographics.lookup.return_value = Enrichment(employees=45)

        result = CompositeEnrichmentLookup(contacts, firmographics)("https://www.acme.com")

        contacts.lookup.assert_called_once_with("acme.com")
        assert result.enrichment.employees == 45
        assert result.contacts[0].email == "ceo@acme.com"

    def test_one_failing_part_is_skipped(self) -> None:
        contacts = Mock()
        contacts.lookup.side_effect = EnrichmentError("quota", code="hunter_unavailable")
        firmographics = Mock()
        firmographics.lookup.return_value = Enrichment(employees=45)

        result = CompositeEnrichmentLookup(contacts, firmographics)("https://www.acme.com")

        assert result.enrichment.employees == 45
        assert result.contacts == []

    def test_every_part_failing_raises(self) -> None:
        contacts = Mock()
        contacts.lookup.side_effect = EnrichmentError("quota", code="hunter_unavailable")

        with pytest.raises(EnrichmentError):
            CompositeEnrichmentLookup(contacts=contacts)("https://www.acme.com")

    def test_nothing_found(self) -> None:
        contacts = Mock()
        contacts.lookup.return_value = []
        firmographics = Mock()
        firmographics.lookup.return_value = None

        assert CompositeEnrichmentLookup(contacts, firmographics)("https://www.acme.com") is None

    def test_website_without_domain(self) -> None:
        contacts = Mock()

        assert CompositeEnrichmentLookup(contacts=contacts)(None) is None
        contacts.lookup.assert_not_called()


class TestDefaultLookup:
    def test_none_without_keys(self, monkeypatch) -> None:
        monkeypatch.setitem(ENRICHMENT_CONFIG, "hunter_api_key", "")
        monkeypatch.setitem(ENRICHMENT_CONFIG, "clearbit_api_key", "")

        assert create_default_enrichment_lookup(session=Mock(spec=requests.Session)) is None

    def test_only_configured_parts(self, monkeypatch) -> None:
        monkeypatch.setitem(ENRICHMENT_CONFIG, "hunter_api_key", "hunter-key")
        monkeypatch.setitem(ENRICHMENT_CONFIG, "clearbit_api_key", "")

        lookup = create_default_enrichment_lookup(session=Mock(spec=requests.Session))

        assert isinstance(lookup.contacts, HunterContactLookup)
        assert lookup.firmographics is None

    def test_each_part_opens_its_own_session(self, monkeypatch) -> None:
        monkeypatch.setitem(ENRICHMENT_CONFIG, "hunter_api_key", "hunter-key")
        monkeypatch.setitem(ENRICHMENT_CONFIG, "clearbit_api_key", "clearbit-key")

        lookup = create_default_enrichment_lookup()

        assert isinstance(lookup.contacts.session, requests.Session)
        assert lookup.contacts.session is not lookup.firmographics.session
