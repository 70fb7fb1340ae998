"""Tests for the HTTP source providers, using a mocked requests session."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from intent_engine.errors import SourceProviderError
from intent_engine.models.schemas import SourceType
from intent_engine.sources.providers import (
    DataGovProvider,
    HackerNewsProvider,
    NewsApiProvider,
    RedditProvider,
    SecFilingsProvider,
    StaticProvider,
    TwitterProvider,
    _parse_timestamp,
    create_default_providers,
)

from conftest import forum


def _response(payload) -> Mock:
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def _session(*payloads) -> Mock:
    session = Mock(spec=requests.Session)
    session.request.side_effect = [_response(p) for p in payloads]
    return session


class TestParseTimestamp:
    def test_unix_seconds(self) -> None:
        assert _parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_iso_string(self) -> None:
        assert _parse_timestamp("2024-05-01T12:00:00Z") == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

    def test_invalid(self) -> None:
        assert _parse_timestamp("yesterday") is None
        assert _parse_timestamp(None) is None


class TestHackerNewsProvider:
    def test_filters_and_sorts_by_engagement(self) -> None:
        session = _session({
            "hits": [
                {"title": "Show HN: an AI startup for payroll", "points": 40, "num_comments": 10,
                 "url": "https://hn/1", "created_at": "2024-05-01T12:00:00Z"},
                {"title": "Our company rebuilt its payroll engine", "points": 120, "num_comments": 30,
                 "url": "https://hn/2"},
                {"title": "Short title", "points": 500, "num_comments": 5},
                {"title": "Thoughts on payroll mathematics today", "points": 50, "num_comments": 1},
                {"title": "Another startup payroll announcement", "points": 3, "num_comments": 100},
            ],
        })

        mentions = HackerNewsProvider(session=session).fetch("payroll")

        assert [m.url for m in mentions] == ["https://hn/2", "https://hn/1"]
        assert mentions[0].source == SourceType.TECH_STORY
        assert mentions[0].engagement == 150
        assert mentions[1].timestamp == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        assert session.request.call_args.kwargs["params"]["query"] == "payroll"

    def test_respects_limit(self) -> None:
        hits = [{"title": f"Startup number {i} raises a round", "points": 10 + i} for i in range(5)]

        mentions = HackerNewsProvider(session=_session({"hits": hits}), limit=2).fetch("startup")

        assert len(mentions) == 2

    def test_transport_error(self) -> None:
        session = Mock(spec=requests.Session)
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(SourceProviderError) as exc_info:
            HackerNewsProvider(session=session).fetch("payroll")

        assert exc_info.value.code == "hackernews_unavailable"

    def test_invalid_json(self) -> None:
        response = _response(None)
        response.json.side_effect = ValueError("no json")
        session = Mock(spec=requests.Session)
        session.request.return_value = response

        with pytest.raises(SourceProviderError) as exc_info:
            HackerNewsProvider(session=session).fetch("payroll")

        assert exc_info.value.code == "hackernews_bad_payload"


class TestNewsApiProvider:
    def test_unconfigured_returns_empty_without_request(self) -> None:
        session = Mock(spec=requests.Session)
        provider = NewsApiProvider(session=session)
        provider.api_key = ""

        assert provider.fetch("payroll") == []
        session.request.assert_not_called()

    def test_filters_articles(self) -> None:
        description = "The company plans to hire across Canada after closing the round."
        session = _session({
            "articles": [
                {"title": "DataFlow Systems raises $10M Series A", "description": description,
                 "url": "https://news/1", "publishedAt": "2024-05-01T12:00:00Z"},
                {"title": "[Removed] article about something", "description": description},
                {"title": "Weather turns cold across the region", "description": "x" * 60},
            ],
        })

        mentions = NewsApiProvider(api_key="key", session=session).fetch("dataflow")

        assert len(mentions) == 1
        assert mentions[0].title == "DataFlow Systems raises $10M Series A"
        assert mentions[0].text == f"DataFlow Systems raises $10M Series A {description}"
        assert session.request.call_args.kwargs["params"]["apiKey"] == "key"


class TestTwitterProvider:
    def test_engagement_formula(self) -> None:
        session = _session({
            "data": [
                {"id": "1", "text": "Our startup just launched a payroll product for small business owners",
                 "public_metrics": {"like_count": 10, "retweet_count": 2, "reply_count": 3}},
                {"id": "2", "text": "RT @someone: our startup just launched a payroll product today",
                 "public_metrics": {"like_count": 50, "retweet_count": 20}},
                {"id": "3", "text": "Nobody liked this startup payroll announcement at all, sadly",
                 "public_metrics": {"like_count": 1, "retweet_count": 0}},
            ],
        })

        mentions = TwitterProvider(bearer_token="token", session=session).fetch("payroll")

        assert len(mentions) == 1
        assert mentions[0].engagement == 29
        assert mentions[0].url == "https://twitter.com/i/web/status/1"
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer token"


class TestRedditProvider:
    post = {
        "title": "Looking for a payroll provider in Toronto ASAP",
        "selftext": "We are a 20 person team and our current provider keeps making mistakes every month.",
        "num_comments": 5,
        "score": 10,
        "permalink": "/r/smallbusiness/comments/abc",
        "created_utc": 1714564800,
    }
    quiet_post = {
        "title": "Random musings about weather patterns",
        "selftext": "x" * 60,
        "num_comments": 0,
        "score": 0,
    }

    def test_fetch_keeps_posts_with_intent(self) -> None:
        session = _session(
            {"access_token": "tok", "expires_in": 3600},
            {"data": {"children": [{"data": self.post}, {"data": self.quiet_post}]}},
        )
        provider = RedditProvider(client_id="id", client_secret="secret",
                                  subreddits=["smallbusiness"], session=session)

        mentions = provider.fetch("payroll")

        assert len(mentions) == 1
        assert mentions[0].source == SourceType.FORUM_POST
        assert mentions[0].url == "https://reddit.com/r/smallbusiness/comments/abc"
        assert mentions[0].engagement == 15
        search_call = session.request.call_args_list[1]
        assert search_call.kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_token_is_reused(self) -> None:
        session = _session(
            {"access_token": "tok", "expires_in": 3600},
            {"data": {"children": []}},
            {"data": {"children": []}},
        )
        provider = RedditProvider(client_id="id", client_secret="secret",
                                  subreddits=["smallbusiness"], session=session)

        provider.fetch("payroll")
        provider.fetch("crm")

        assert session.request.call_count == 3

    def test_failed_subreddit_is_skipped(self) -> None:
        session = Mock(spec=requests.Session)
        session.request.side_effect = [
            _response({"access_token": "tok"}),
            requests.Timeout("read timed out"),
            _response({"data": {"children": [{"data": self.post}]}}),
        ]
        provider = RedditProvider(client_id="id", client_secret="secret",
                                  subreddits=["business", "smallbusiness"], session=session)

        assert len(provider.fetch("payroll")) == 1

    def test_missing_token(self) -> None:
        provider = RedditProvider(client_id="id", client_secret="secret", session=_session({}))

        with pytest.raises(SourceProviderError) as exc_info:
            provider.fetch("payroll")

        assert exc_info.value.code == "reddit_auth_failed"


class TestSecFilingsProvider:
    def test_maps_filings(self) -> None:
        session = _session({
            "hits": {"hits": [
                {"_source": {"display_names": ["Acme Robotics Inc.  (ACME)  (CIK 0000123456)"],
                             "form": "10-K", "file_date": "2024-03-01", "root_form": "123456"}},
                {"_source": {"display_names": [], "form": "8-K"}},
                {"_source": {"display_names": ["Zeta Holdings Corp"]}},
            ]},
        })
        provider = SecFilingsProvider(session=session)

        mentions = provider.fetch("robotics")

        assert [m.text for m in mentions] == [
            "10-K filing - Acme Robotics Inc.",
            "Unknown filing - Zeta Holdings Corp",
        ]
        assert mentions[0].source == SourceType.FILING
        assert mentions[0].url == "https://www.sec.gov/Archives/edgar/data/123456"
        assert mentions[0].timestamp == datetime(2024, 3, 1)
        assert mentions[1].url is None

    def test_sends_user_agent_and_date_window(self) -> None:
        session = _session({"hits": {"hits": []}})
        SecFilingsProvider(user_agent="Acme Research ops@acme.test", session=session).fetch("robotics")

        kwargs = session.request.call_args.kwargs
        assert kwargs["headers"]["User-Agent"] == "Acme Research ops@acme.test"
        assert kwargs["params"]["q"] == "robotics"
        assert kwargs["params"]["category"] == "form-cat1"
        start = datetime.strptime(kwargs["params"]["startdt"], "%Y-%m-%d")
        end = datetime.strptime(kwargs["params"]["enddt"], "%Y-%m-%d")
        assert (end - start).days == 180

    def test_bad_payload(self) -> None:
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("not json")
        session = Mock(spec=requests.Session)
        session.request.return_value = response

        with pytest.raises(SourceProviderError) as exc_info:
            SecFilingsProvider(session=session).fetch("robotics")

        assert exc_info.value.code == "sec_bad_payload"


class TestDataGovProvider:
    def test_maps_datasets(self) -> None:
        results = [
            {"title": "Small Business Lending Survey", "notes": "Loans to Acme Corp and peers",
             "name": "sbl-survey", "metadata_modified": "2024-02-10T08:30:00"},
            {"title": "Broadband Coverage", "notes": None, "name": "broadband"},
            {"title": "", "name": "untitled"},
        ] + [{"title": f"Dataset {i}", "name": f"d{i}"} for i in range(6)]
        session = _session({"result": {"results": results}})

        mentions = DataGovProvider(session=session).fetch("lending")

        assert len(mentions) == 5
        assert mentions[0].source == SourceType.DATASET
        assert mentions[0].text == "Small Business Lending Survey Loans to Acme Corp and peers"
        assert mentions[0].url == "https://catalog.data.gov/dataset/sbl-survey"
        assert mentions[0].timestamp == datetime(2024, 2, 10, 8, 30)
        assert mentions[1].text == "Broadband Coverage Government dataset: Broadband Coverage"
        assert session.request.call_args.kwargs["params"] == {"q": "lending", "rows": 10, "sort": "score desc"}

    def test_unavailable(self) -> None:
        session = Mock(spec=requests.Session)
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(SourceProviderError) as exc_info:
            DataGovProvider(session=session).fetch("lending")

        assert exc_info.value.code == "datagov_unavailable"

def test_static_provider_returns_copy() -> None:
    mentions = [forum("Acme Corp is hiring")]
    provider = StaticProvider("forum_post", mentions)

    fetched = provider.fetch("anything")
    fetched.clear()

    assert provider.source_type == SourceType.FORUM_POST
    assert provider.fetch("anything") == mentions


def test_default_providers_include_hackernews() -> None:
    providers = create_default_providers(session=Mock(spec=requests.Session))

    assert "hackernews" in [p.name for p in providers]
    assert all(p.is_configured for p in providers)
    assert {"sec", "datagov"} <= {p.name for p in providers}


def test_default_providers_open_separate_sessions() -> None:
    providers = create_default_providers()
    sessions = [p.session for p in providers]

    assert all(isinstance(s, requests.Session) for s in sessions)
    assert len({id(s) for s in sessions}) == len(sessions)
