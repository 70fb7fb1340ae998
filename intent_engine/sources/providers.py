"""
Source Providers
================
HTTP clients that turn third-party search results into RawMention lists.

Providers:
- RedditProvider (forum_post): OAuth app-only search over business subreddits
- NewsApiProvider (news_article): NewsAPI /everything over business outlets
- TwitterProvider (social_post): recent-search API, engagement-weighted
- HackerNewsProvider (tech_story): Algolia story search
- SecFilingsProvider (filing): SEC EDGAR full-text search, no key needed
- DataGovProvider (dataset): data.gov CKAN package search, no key needed
- StaticProvider (any): fixed mentions for fixtures and offline runs

Every provider raises SourceProviderError on transport or payload failure;
the engine resolves a failed provider to an empty collection.
"""

import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import List, Dict, Optional, Any

import requests

from ..errors import SourceProviderError
from ..models.schemas import RawMention, SourceType
from ..config.settings import SOURCE_CONFIG
from ..stages.stage3_scoring import forum_intent_score

logger = logging.getLogger(__name__)

BUSINESS_KEYWORDS = [
    "company", "business", "startup", "funding", "ceo", "founder", "investment",
    "acquisition", "merger", "ipo", "revenue",
]
SOCIAL_KEYWORDS = [
    "company", "business", "ceo", "founder", "startup", "funding", "hiring",
    "launched", "announcing", "partnership",
]
TECH_KEYWORDS = ["company", "startup", "business", "tech", "saas", "ai"]

MIN_FORUM_INTENT = 3


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string or unix seconds to datetime"""
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return None


class SourceProvider:
    """Base class for a provider of one SourceType"""

    name = "base"
    source_type: SourceType = SourceType.FORUM_POST

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        limit: Optional[int] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout or SOURCE_CONFIG["request_timeout_seconds"]
        self.limit = limit or SOURCE_CONFIG["per_source_limit"]

    @property
    def is_configured(self) -> bool:
        return True

    def fetch(self, query: str) -> List[RawMention]:
        raise NotImplementedError

    def _request_json(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Issue a request and decode the JSON body"""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise SourceProviderError(
                f"{self.name} request failed: {e}", code=f"{self.name}_unavailable"
            ) from e
        except ValueError as e:
            raise SourceProviderError(
                f"{self.name} returned invalid JSON", code=f"{self.name}_bad_payload"
            ) from e


class RedditProvider(SourceProvider):
    """Business discussions from a fixed set of subreddits"""

    name = "reddit"
    source_type = SourceType.FORUM_POST
    token_url = "https://www.reddit.com/api/v1/access_token"
    search_url = "https://oauth.reddit.com/r/{subreddit}/search"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        subreddits: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.client_id = client_id or SOURCE_CONFIG["reddit_client_id"]
        self.client_secret = client_secret or SOURCE_CONFIG["reddit_client_secret"]
        self.user_agent = SOURCE_CONFIG["reddit_user_agent"]
        self.subreddits = subreddits or SOURCE_CONFIG["reddit_subreddits"]
        self._token: Optional[str] = None
        self._token_expiry = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _get_token(self) -> str:
        """App-only OAuth token, reused until it expires"""
        if self._token and time.time() < self._token_expiry:
            return self._token

        data = self._request_json(
            "POST",
            self.token_url,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            headers={"User-Agent": self.user_agent},
        )
        token = data.get("access_token")
        if not token:
            raise SourceProviderError("reddit token missing from response", code="reddit_auth_failed")

        self._token = token
        self._token_expiry = time.time() + float(data.get("expires_in", 3600)) - 60
        return token

    def fetch(self, query: str) -> List[RawMention]:
        """
        Search each subreddit and keep posts with some buying intent.

        Args:
            query: Search query

        Returns:
            Forum mentions, highest intent first
        """
        if not self.is_configured:
            return []

        token = self._get_token()
        scored = []

        for subreddit in self.subreddits:
            try:
                data = self._request_json(
                    "GET",
                    self.search_url.format(subreddit=subreddit),
                    headers={"Authorization": f"Bearer {token}", "User-Agent": self.user_agent},
                    params={
                        "q": query,
                        "sort": "relevance",
                        "limit": 10,
                        "type": "link",
                        "t": "month",
                        "restrict_sr": True,
                    },
                )
            except SourceProviderError as e:
                logger.warning("reddit.subreddit_failed subreddit=%s error=%s", subreddit, e)
                continue

            for child in data.get("data", {}).get("children", []):
                post = child.get("data", {})
                mention = self._to_mention(post)
                if mention is None:
                    continue
                intent = forum_intent_score(mention.text, mention.comments, mention.score)
                if intent >= MIN_FORUM_INTENT:
                    scored.append((intent, mention))

        scored.sort(key=lambda item: -item[0])
        return [mention for _, mention in scored[:self.limit]]

    @staticmethod
    def _to_mention(post: Dict[str, Any]) -> Optional[RawMention]:
        title = post.get("title") or ""
        body = post.get("selftext") or ""
        comments = int(post.get("num_comments") or 0)
        if len(title) <= 20 or (len(body) <= 50 and comments <= 3):
            return None

        score = int(post.get("score") or 0)
        permalink = post.get("permalink")
        return RawMention.from_parts(
            SourceType.FORUM_POST,
            title=title,
            body=body,
            timestamp=_parse_timestamp(post.get("created_utc")),
            engagement=comments + score,
            comments=comments,
            score=score,
            url=f"https://reddit.com{permalink}" if permalink else None,
        )


class NewsApiProvider(SourceProvider):
    """Business news from NewsAPI over the last 30 days"""

    name = "newsapi"
    source_type = SourceType.NEWS_ARTICLE

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or SOURCE_CONFIG["newsapi_key"]
        self.url = SOURCE_CONFIG["newsapi_url"]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def fetch(self, query: str) -> List[RawMention]:
        if not self.is_configured:
            return []

        since = (datetime.utcnow() - timedelta(days=30)).strftime("%Y-%m-%d")
        data = self._request_json(
            "GET",
            self.url,
            params={
                "q": f'"{query}" AND (company OR business OR startup OR CEO OR funding OR acquisition OR investment)',
                "apiKey": self.api_key,
                "sortBy": "publishedAt",
                "language": "en",
                "pageSize": 30,
                "from": since,
                "domains": SOURCE_CONFIG["newsapi_domains"],
            },
        )

        mentions = []
        for article in data.get("articles", []):
            title = article.get("title") or ""
            description = article.get("description") or ""
            content = f"{title} {description}".lower()

            if len(title) <= 20 or len(description) <= 50 or "[removed]" in title.lower():
                continue
            if not any(keyword in content for keyword in BUSINESS_KEYWORDS):
                continue

            mentions.append(RawMention.from_parts(
                SourceType.NEWS_ARTICLE,
                title=title,
                body=description,
                timestamp=_parse_timestamp(article.get("publishedAt")),
                url=article.get("url"),
            ))
            if len(mentions) >= self.limit:
                break

        return mentions


class TwitterProvider(SourceProvider):
    """Business chatter from the recent-search API"""

    name = "twitter"
    source_type = SourceType.SOCIAL_POST

    def __init__(self, bearer_token: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.bearer_token = bearer_token or SOURCE_CONFIG["x_bearer_token"]
        self.url = SOURCE_CONFIG["x_search_url"]

    @property
    def is_configured(self) -> bool:
        return bool(self.bearer_token)

    def fetch(self, query: str) -> List[RawMention]:
        if not self.is_configured:
            return []

        data = self._request_json(
            "GET",
            self.url,
            headers={"Authorization": f"Bearer {self.bearer_token}"},
            params={
                "query": f'"{query}" (company OR business OR startup OR CEO OR founder OR hiring OR funding OR launched) -is:retweet lang:en',
                "max_results": 20,
                "tweet.fields": "created_at,public_metrics,author_id",
            },
        )

        mentions = []
        for tweet in data.get("data") or []:
            text = tweet.get("text") or ""
            lowered = text.lower()
            metrics = tweet.get("public_metrics") or {}
            likes = int(metrics.get("like_count") or 0)
            retweets = int(metrics.get("retweet_count") or 0)
            replies = int(metrics.get("reply_count") or 0)

            if len(text) <= 50 or "rt @" in lowered or (likes <= 1 and retweets == 0):
                continue
            if not any(keyword in lowered for keyword in SOCIAL_KEYWORDS):
                continue

            mentions.append(RawMention(
                source=SourceType.SOCIAL_POST,
                text=text,
                timestamp=_parse_timestamp(tweet.get("created_at")),
                engagement=likes * 2 + retweets * 3 + replies,
                comments=replies,
                score=likes,
                url=f"https://twitter.com/i/web/status/{tweet['id']}" if tweet.get("id") else None,
            ))

        mentions.sort(key=lambda m: -m.engagement)
        return mentions[:self.limit]


class HackerNewsProvider(SourceProvider):
    """Tech-community stories from the Algolia search API"""

    name = "hackernews"
    source_type = SourceType.TECH_STORY

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.url = SOURCE_CONFIG["hackernews_url"]

    def fetch(self, query: str) -> List[RawMention]:
        data = self._request_json(
            "GET",
            self.url,
            params={
                "query": query,
                "tags": "story",
                "hitsPerPage": 15,
                "numericFilters": "points>5",
            },
        )

        mentions = []
        for hit in data.get("hits", []):
            title = hit.get("title") or ""
            points = int(hit.get("points") or 0)
            comments = int(hit.get("num_comments") or 0)
            lowered = title.lower()

            if len(title) <= 20 or points <= 5:
                continue
            if not any(keyword in lowered for keyword in TECH_KEYWORDS):
                continue

            mentions.append(RawMention(
                source=SourceType.TECH_STORY,
                text=title,
                title=title,
                timestamp=_parse_timestamp(hit.get("created_at")),
                engagement=points + comments,
                comments=comments,
                score=points,
                url=hit.get("url"),
            ))

        mentions.sort(key=lambda m: -m.engagement)
        return mentions[:self.limit]


class SecFilingsProvider(SourceProvider):
    """Recent periodic filings from the SEC full-text search index"""

    name = "sec"
    source_type = SourceType.FILING

    def __init__(self, user_agent: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.url = SOURCE_CONFIG["sec_search_url"]
        self.user_agent = user_agent or SOURCE_CONFIG["sec_user_agent"]

    def fetch(self, query: str) -> List[RawMention]:
        today = datetime.utcnow()
        data = self._request_json(
            "GET",
            self.url,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            params={
                "q": query,
                "dateRange": "all",
                "category": "form-cat1",
                "startdt": (today - timedelta(days=180)).strftime("%Y-%m-%d"),
                "enddt": today.strftime("%Y-%m-%d"),
            },
        )

        mentions = []
        for hit in (data.get("hits") or {}).get("hits", [])[:8]:
            filing = hit.get("_source") or {}
            names = filing.get("display_names") or []
            if not names or not names[0]:
                continue

            # "Acme Corp  (ACME)  (CIK 0000123456)"
            company = re.sub(r"\s*\(.*$", "", names[0]).strip() or names[0]
            form = filing.get("form") or "Unknown"
            root_form = filing.get("root_form")
            mentions.append(RawMention(
                source=SourceType.FILING,
                text=f"{form} filing - {company}",
                title=company,
                timestamp=_parse_timestamp(filing.get("file_date")),
                url=f"https://www.sec.gov/Archives/edgar/data/{root_form}" if root_form else None,
            ))

        return mentions[:self.limit]


class DataGovProvider(SourceProvider):
    """Government datasets from the data.gov CKAN catalog"""

    name = "datagov"
    source_type = SourceType.DATASET

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.url = SOURCE_CONFIG["datagov_url"]

    def fetch(self, query: str) -> List[RawMention]:
        data = self._request_json(
            "GET",
            self.url,
            params={"q": query, "rows": 10, "sort": "score desc"},
        )

        mentions = []
        for dataset in (data.get("result") or {}).get("results", [])[:6]:
            title = dataset.get("title") or ""
            if not title:
                continue
            name = dataset.get("name")
            mentions.append(RawMention.from_parts(
                SourceType.DATASET,
                title=title,
                body=dataset.get("notes") or f"Government dataset: {title}",
                timestamp=_parse_timestamp(dataset.get("metadata_modified")),
                url=f"https://catalog.data.gov/dataset/{name}" if name else None,
            ))

        return mentions[:self.limit]


class StaticProvider(SourceProvider):
    """Serves a fixed list of mentions regardless of the query"""

    name = "static"

    def __init__(self, source_type: SourceType, mentions: Optional[List[RawMention]] = None):
        self.source_type = SourceType(source_type)
        self.mentions = list(mentions or [])

    def fetch(self, query: str) -> List[RawMention]:
        return list(self.mentions)


def create_default_providers(session: Optional[requests.Session] = None) -> List[SourceProvider]:
    """
    Live providers that have the credentials they need.

    Each provider opens its own session unless one is passed in.
    """
    providers = [
        RedditProvider(session=session),
        NewsApiProvider(session=session),
        TwitterProvider(session=session),
        HackerNewsProvider(session=session),
        SecFilingsProvider(session=session),
        DataGovProvider(session=session),
    ]
    configured = [p for p in providers if p.is_configured]
    logger.info("sources.configured providers=%s", ",".join(p.name for p in configured))
    return configured
