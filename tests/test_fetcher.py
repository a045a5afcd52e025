"""
Tests for the incremental fetcher behind bulk selection.
"""

from artselect.fetcher import IncrementalFetcher


class TestEnsureAtLeast:
    """Test page accumulation, dedup and cache reuse."""

    def test_fetches_only_needed_pages(self, source):
        fetcher = IncrementalFetcher(source)

        result = fetcher.ensure_at_least(15)

        assert source.calls == [1, 2]
        assert [r.id for r in result] == list(range(1, 21))

    def test_cache_reuse(self, source_factory, record_factory):
        """A second, smaller request must not hit the source again."""
        src = source_factory([record_factory(i) for i in range(1, 31)], page_size=6)
        fetcher = IncrementalFetcher(src)

        first = fetcher.ensure_at_least(5)
        assert len(first) == 6
        fetcher.ensure_at_least(12)
        assert len(fetcher) == 12
        calls_before = list(src.calls)

        result = fetcher.ensure_at_least(8)

        assert src.calls == calls_before
        assert len(result) == 12

    def test_resumes_after_cached_pages(self, source):
        """Growing the request continues from the next unfetched page."""
        fetcher = IncrementalFetcher(source)
        fetcher.ensure_at_least(10)

        fetcher.ensure_at_least(25)

        assert source.calls == [1, 2, 3]

    def test_stops_at_last_page(self, source_factory, record_factory):
        """Asking for more than exists returns everything without error."""
        src = source_factory([record_factory(i) for i in (1, 2, 3)])
        fetcher = IncrementalFetcher(src)

        result = fetcher.ensure_at_least(10)

        assert [r.id for r in result] == [1, 2, 3]
        assert src.calls == [1]
        assert fetcher.exhausted

    def test_exhausted_collection_is_not_refetched(self, source_factory, record_factory):
        src = source_factory([record_factory(i) for i in (1, 2, 3)])
        fetcher = IncrementalFetcher(src)
        fetcher.ensure_at_least(10)

        fetcher.ensure_at_least(20)

        assert src.calls == [1]

    def test_deduplicates_across_pages(self, source_factory, record_factory):
        """A record repeated on two pages is cached once, at its first position."""
        pages = [
            [record_factory(1), record_factory(2), record_factory(3)],
            [record_factory(3), record_factory(4), record_factory(5)],
        ]
        src = source_factory(pages=pages)
        fetcher = IncrementalFetcher(src)

        result = fetcher.ensure_at_least(5)

        assert [r.id for r in result] == [1, 2, 3, 4, 5]

    def test_duplicates_do_not_count_toward_n(self, source_factory, record_factory):
        pages = [
            [record_factory(1), record_factory(2)],
            [record_factory(2), record_factory(1)],
            [record_factory(3), record_factory(4)],
        ]
        src = source_factory(pages=pages)
        fetcher = IncrementalFetcher(src)

        result = fetcher.ensure_at_least(3)

        assert src.calls == [1, 2, 3]
        assert [r.id for r in result] == [1, 2, 3, 4]


class TestFetchFailure:
    """Test graceful degradation when a page fails."""

    def test_failure_returns_partial_cache(self, source_factory, records):
        src = source_factory(records, page_size=10, fail_pages={2})
        fetcher = IncrementalFetcher(src)

        result = fetcher.ensure_at_least(25)

        assert [r.id for r in result] == list(range(1, 11))
        assert fetcher.last_error is not None
        assert fetcher.last_error.page == 2
        assert not fetcher.exhausted

    def test_failed_page_is_retried_on_next_request(self, source_factory, records):
        """No automatic retry, but a later request starts at the failed page."""
        src = source_factory(records, page_size=10, fail_pages={2})
        fetcher = IncrementalFetcher(src)
        fetcher.ensure_at_least(25)
        assert src.calls == [1, 2]

        src.fail_pages.clear()
        result = fetcher.ensure_at_least(25)

        assert src.calls == [1, 2, 2, 3]
        assert len(result) == 30
        assert fetcher.last_error is None

    def test_failure_on_first_page_returns_empty(self, source_factory, records):
        src = source_factory(records, fail_pages={1})
        fetcher = IncrementalFetcher(src)

        assert fetcher.ensure_at_least(5) == []


class TestBusySignal:
    """Test the busy callback around fetching."""

    def test_busy_raised_and_cleared(self, source):
        events = []
        fetcher = IncrementalFetcher(source, on_busy=events.append)

        fetcher.ensure_at_least(5)

        assert events == [True, False]

    def test_busy_cleared_after_failure(self, source_factory, records):
        events = []
        src = source_factory(records, fail_pages={1})
        fetcher = IncrementalFetcher(src, on_busy=events.append)

        fetcher.ensure_at_least(5)

        assert events == [True, False]

    def test_no_busy_signal_when_cache_suffices(self, source):
        events = []
        fetcher = IncrementalFetcher(source, on_busy=events.append)
        fetcher.ensure_at_least(10)
        events.clear()

        fetcher.ensure_at_least(3)

        assert events == []
