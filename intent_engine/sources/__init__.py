# Source providers module
from .providers import (
    SourceProvider,
    RedditProvider,
    NewsApiProvider,
    TwitterProvider,
    HackerNewsProvider,
    SecFilingsProvider,
    DataGovProvider,
    StaticProvider,
    create_default_providers,
)
