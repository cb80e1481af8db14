"""Tests for SourceFetcher and HyperCrawler."""

import httpx
import pytest

from apollyo.errors import SourceFetchError, ValidationError
from apollyo.filters.filter_manager import filters_for_mode
from apollyo.filters.learning import LearningSnapshot
from apollyo.sources.fetcher import CrawlSource, SourceFetcher
from apollyo.sources.hyper_crawler import HyperCrawler

from .conftest import BROKEN_URL, WORD_LIST, WORDS_URL

MIRROR_URL = "https://mirror.example.test/list.txt"


@pytest.fixture
def crawler(session, fetcher, sources):
    return HyperCrawler(session, fetcher=fetcher, sources=sources)


@pytest.fixture
def hyper_filters():
    return filters_for_mode('hyper', {})


class TestSourceFetcher:
    @pytest.mark.anyio
    async def test_fetch_lines(self, fetcher):
        async with fetcher:
            lines = await fetcher.fetch_lines(CrawlSource(WORDS_URL))
        assert lines[:3] == ['jukebox', 'zigzag', 'wizard']

    @pytest.mark.anyio
    async def test_http_error_status(self, fetcher):
        with pytest.raises(SourceFetchError) as excinfo:
            await fetcher.fetch_lines(CrawlSource(BROKEN_URL))
        assert excinfo.value.reason == "HTTP 500"
        await fetcher.aclose()

    @pytest.mark.anyio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = SourceFetcher(transport=httpx.MockTransport(handler))
        with pytest.raises(SourceFetchError) as excinfo:
            await fetcher.fetch_lines(CrawlSource(WORDS_URL))
        assert "connection refused" in str(excinfo.value)
        await fetcher.aclose()


class TestScore:
    def test_crawled_word_scores(self, crawler):
        result = crawler.score('jukebox', WORDS_URL)
        validation = result.metadata.validation
        assert result.source == 'crawled'
        assert result.overall == pytest.approx(
            0.3 * validation.confidence + 0.4 * validation.rarity_score + 0.3 * validation.market_potential
        )
        assert result.metadata.sources == [WORDS_URL]
        assert result.metadata.count == 1
        assert result.metadata.patterns == ['CVCVCVC', 'start:ju', 'end:ox']

    def test_invalid_word_is_dropped(self, crawler):
        assert crawler.score('cat', WORDS_URL) is None

    def test_extract_words_trims_and_lowercases(self, crawler, hyper_filters):
        results = crawler.extract_words(WORD_LIST.splitlines(), hyper_filters, WORDS_URL)
        assert {r.word for r in results} == {'jukebox', 'zigzag', 'wizard'}


class TestCrawl:
    @pytest.mark.anyio
    async def test_failed_source_is_skipped(self, crawler, hyper_filters, session):
        crawl = await crawler.crawl(hyper_filters, max_results=100)

        assert {r.word for r in crawl.words} == {'jukebox', 'zigzag', 'wizard'}
        assert crawl.words[0].word == 'jukebox'
        assert crawl.stats.sources == [WORDS_URL]
        assert crawl.stats.total_crawled == 3
        assert crawl.stats.valid_words == 3
        assert session.memory.used_sources == {WORDS_URL: 1}

    @pytest.mark.anyio
    async def test_depth_limits_sources(self, session, fetcher):
        crawler = HyperCrawler(session, fetcher=fetcher, sources=[CrawlSource(BROKEN_URL), CrawlSource(WORDS_URL)])
        crawl = await crawler.crawl(filters_for_mode('hyper', {}), depth=1)
        assert crawl.words == []
        assert crawl.stats.sources == []

    @pytest.mark.anyio
    async def test_same_word_from_two_sources_is_merged(self, session, hyper_filters):
        def handler(request):
            return httpx.Response(200, text=WORD_LIST)

        crawler = HyperCrawler(
            session,
            fetcher=SourceFetcher(transport=httpx.MockTransport(handler)),
            sources=[CrawlSource(WORDS_URL, priority=1), CrawlSource(MIRROR_URL, priority=2)],
        )
        crawl = await crawler.crawl(hyper_filters)

        assert len(crawl.words) == 3
        for result in crawl.words:
            assert result.metadata.sources == [WORDS_URL, MIRROR_URL]
            assert result.metadata.count == 2
        assert crawl.stats.sources == [WORDS_URL, MIRROR_URL]

    @pytest.mark.anyio
    async def test_skips_words_returned_earlier(self, crawler, hyper_filters, session):
        session.record_search('hyper', {}, ['zigzag'], [])
        crawl = await crawler.crawl(hyper_filters)
        assert 'zigzag' not in {r.word for r in crawl.words}

    @pytest.mark.anyio
    async def test_explicit_exclude_replaces_session_history(self, crawler, hyper_filters, session):
        session.record_search('speed', {}, ['zigzag'], [])
        crawl = await crawler.crawl(hyper_filters, exclude={'jukebox'})
        assert {r.word for r in crawl.words} == {'zigzag', 'wizard'}

    @pytest.mark.anyio
    async def test_learning_excludes_words(self, crawler, hyper_filters):
        learning = LearningSnapshot(rejected_words=frozenset({'wizard'}))
        crawl = await crawler.crawl(hyper_filters, learning=learning)
        assert {r.word for r in crawl.words} == {'jukebox', 'zigzag'}

    @pytest.mark.anyio
    async def test_advanced_filters_apply(self, crawler):
        filters = filters_for_mode('hyper', {'rarity': {'min': 0.35, 'max': 1.0}})
        crawl = await crawler.crawl(filters)
        assert [r.word for r in crawl.words] == ['jukebox']

    @pytest.mark.anyio
    async def test_flexible_filters_are_rejected(self, crawler):
        with pytest.raises(ValidationError):
            await crawler.crawl(filters_for_mode('speed', {}))


class TestSourceSelection:
    def test_priority_order(self, session):
        sources = [CrawlSource('c', priority=3), CrawlSource('a', priority=1), CrawlSource('b', priority=2)]
        crawler = HyperCrawler(session, sources=sources)
        strategy = session.get_strategy('pattern_variation')
        assert [s.url for s in crawler.select_sources(strategy, 3)] == ['a', 'b', 'c']

    def test_rotation_prefers_least_used(self, session):
        sources = [CrawlSource('a'), CrawlSource('b'), CrawlSource('c'), CrawlSource('d')]
        session.record_search('hyper', {}, [], ['a', 'b'])
        crawler = HyperCrawler(session, sources=sources)
        strategy = session.get_strategy('source_rotation')
        # depth 0 keeps the two least used, in configured order
        assert [s.url for s in crawler.select_sources(strategy, 0)] == ['c', 'd']

    def test_depth_adjustment_is_bounded(self, session, sources):
        crawler = HyperCrawler(session, sources=sources)
        strategy = session.get_strategy('depth_adjustment')
        assert crawler.adjust_depth(strategy, 1) == 2
        assert crawler.adjust_depth(strategy, 3) == 2
        assert crawler.adjust_depth(session.get_strategy('source_rotation'), 3) == 3
