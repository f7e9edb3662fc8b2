import pytest

from pokepedia.pipeline.cache import ReferenceCache
from pokepedia.pipeline.resolver import EntityResolver
from pokepedia.scraper.base import RetryingFetcher
from pokepedia.scraper.pokeapi import PokeAPIClient
from tests.helpers import BASE, build_catalog_api


@pytest.fixture
def fake_api():
    return build_catalog_api()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fetcher(fake_api, sleeps):
    return RetryingFetcher(session=fake_api, retry_delay=0.5, max_attempts=3, sleep=sleeps.append)


@pytest.fixture
def client(fetcher):
    return PokeAPIClient(fetcher, base_url=BASE)


@pytest.fixture
def cache():
    return ReferenceCache()


@pytest.fixture
def resolver(client, cache):
    return EntityResolver(client, cache, language="en")
