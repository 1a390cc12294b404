import asyncio
import threading

import pytest

from markcrawl.exceptions import EngineError
from markcrawl.services.link_extractor import LinkExtractor
from markcrawl.services.rate_gate import RateGate
from markcrawl.services.url_discovery import UrlDiscoveryService


def _discover(config, fetcher):
    async def scenario():
        gate = RateGate(config.max_concurrent, 0.0)
        return await UrlDiscoveryService().discover(config, fetcher, gate)
    return asyncio.run(scenario())


def test_single_wave_collects_matching_links(make_config, make_fetcher, blog_site):
    fetcher = make_fetcher(blog_site)
    discovered = _discover(make_config(max_depth=1), fetcher)

    assert fetcher.calls == ["https://example.com"]
    assert discovered == [
        "https://example.com/blog/first-post",
        "https://example.com/blog/second-post",
    ]


def test_external_links_never_followed(make_config, make_fetcher, blog_site):
    fetcher = make_fetcher(blog_site)
    discovered = _discover(make_config(max_depth=4, max_concurrent=3), fetcher)

    assert all(url.startswith("https://example.com") for url in fetcher.calls)
    assert "https://other.example.org/blog/elsewhere" not in discovered


def test_cycles_do_not_cause_refetches(make_config, make_fetcher):
    site = {
        "https://example.com/": '<a href="/blog/a">a</a><a href="/blog/b">b</a>',
        "https://example.com/blog/a": '<a href="/">home</a><a href="/blog/b">b</a>',
        "https://example.com/blog/b": '<a href="/blog/a">a</a><a href="/">home</a>',
    }
    fetcher = make_fetcher(site)
    discovered = _discover(make_config(base_url="https://example.com/", max_depth=5), fetcher)

    assert len(fetcher.calls) == len(set(fetcher.calls))
    assert sorted(fetcher.calls) == sorted(site)
    assert discovered == ["https://example.com/blog/a", "https://example.com/blog/b"]


def test_seed_is_not_a_target_unless_linked(make_config, make_fetcher):
    site = {"https://example.com/blog/": '<a href="/blog/post">post</a>'}
    discovered = _discover(make_config(base_url="https://example.com/blog/", max_depth=2), make_fetcher(site))

    assert "https://example.com/blog/" not in discovered
    assert discovered == ["https://example.com/blog/post"]


def test_depth_limits_number_of_waves(make_config, make_fetcher):
    site = {
        "https://example.com": '<a href="/blog/1">1</a>',
        "https://example.com/blog/1": '<a href="/blog/2">2</a>',
        "https://example.com/blog/2": '<a href="/blog/3">3</a>',
    }
    fetcher = make_fetcher(site)
    discovered = _discover(make_config(max_depth=2), fetcher)

    assert fetcher.calls == ["https://example.com", "https://example.com/blog/1"]
    assert discovered == ["https://example.com/blog/1", "https://example.com/blog/2"]


def test_wave_takes_at_most_max_concurrent_urls(make_config, make_fetcher):
    links = "".join(f'<a href="/p/{i}">{i}</a>' for i in range(5))
    site = {"https://example.com": links}
    site.update({f"https://example.com/p/{i}": "" for i in range(5)})
    fetcher = make_fetcher(site)
    _discover(make_config(max_depth=2, max_concurrent=2), fetcher)

    # wave 1 fetches the seed, wave 2 only the first two queued pages
    assert fetcher.calls == ["https://example.com", "https://example.com/p/0", "https://example.com/p/1"]


def test_failed_fetch_drops_only_its_branch(make_config, make_fetcher):
    site = {
        "https://example.com": '<a href="/blog/broken">x</a><a href="/blog/ok">y</a>',
        "https://example.com/blog/ok": '<a href="/blog/deeper">z</a>',
    }
    fetcher = make_fetcher(site, fail_urls={"https://example.com/blog/broken"})
    discovered = _discover(make_config(max_depth=2, max_concurrent=2), fetcher)

    assert discovered == [
        "https://example.com/blog/broken",
        "https://example.com/blog/ok",
        "https://example.com/blog/deeper",
    ]


def test_unreachable_seed_yields_nothing(make_config, make_fetcher):
    assert _discover(make_config(max_depth=3), make_fetcher({})) == []


def test_engine_failure_propagates(make_config, make_fetcher, blog_site):
    fetcher = make_fetcher(blog_site, engine_fail_urls={"https://example.com"})
    with pytest.raises(EngineError):
        _discover(make_config(), fetcher)


def test_duplicate_queue_entries_use_up_wave_slots(make_config, make_fetcher):
    # a and b both link to c, so c sits in the queue twice ahead of e
    site = {
        "https://example.com": '<a href="/a">a</a><a href="/b">b</a>',
        "https://example.com/a": '<a href="/c">c</a>',
        "https://example.com/b": '<a href="/c">c</a><a href="/e">e</a>',
        "https://example.com/c": "",
        "https://example.com/e": '<a href="/blog/x">x</a>',
    }
    fetcher = make_fetcher(site)
    discovered = _discover(make_config(max_depth=3, max_concurrent=2), fetcher)

    # wave 3 is [c, c]: c is fetched once and e is never reached
    assert fetcher.calls == [
        "https://example.com",
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
    ]
    assert discovered == []


def test_link_parsing_runs_off_the_event_loop(make_config, make_fetcher, blog_site):
    loop_thread = threading.get_ident()
    parse_threads = []

    class RecordingExtractor(LinkExtractor):
        def extract_links(self, html, origin_url, scope_url):
            parse_threads.append(threading.get_ident())
            return super().extract_links(html, origin_url, scope_url)

    async def scenario():
        config = make_config()
        service = UrlDiscoveryService(RecordingExtractor())
        return await service.discover(config, make_fetcher(blog_site), RateGate(1, 0.0))

    assert len(asyncio.run(scenario())) == 2
    assert parse_threads and loop_thread not in parse_threads
