"""Tests for the Solr index client (``respx`` mocks the HTTP layer)."""

from __future__ import annotations

import json
import time
from typing import Callable

import httpx
import respx

from ogparser.search.solr import SolrIndex, build_description_update

_SOLR = "http://solr.test:8983/solr/posts"


class TestBuildDescriptionUpdate:
    def test_payload_shape(self) -> None:
        assert build_description_update(12, "hello") == [
            {"id": 12, "post_description": {"set": "hello"}}
        ]


class TestSolrIndex:
    def test_posts_atomic_update_with_commit(self) -> None:
        index = SolrIndex(_SOLR + "/", timeout=2)
        with respx.mock:
            route = respx.post(f"{_SOLR}/update", params={"commit": "true"}).mock(
                return_value=httpx.Response(200, json={"responseHeader": {"status": 0}})
            )
            assert index.update_description(5, "A description") is True

        request = route.calls.last.request
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == [
            {"id": 5, "post_description": {"set": "A description"}}
        ]

    def test_update_url(self) -> None:
        assert SolrIndex(_SOLR).update_url == f"{_SOLR}/update?commit=true"

    def test_error_status_returns_false(self) -> None:
        index = SolrIndex(_SOLR)
        with respx.mock:
            respx.post(f"{_SOLR}/update").mock(return_value=httpx.Response(400, text="bad"))
            assert index.update_description(5, "x") is False

    def test_transport_error_returns_false(self) -> None:
        index = SolrIndex(_SOLR)
        with respx.mock:
            respx.post(f"{_SOLR}/update").mock(side_effect=httpx.ConnectTimeout("slow"))
            assert index.update_description(5, "x") is False

    def test_disabled_index_makes_no_request(self) -> None:
        index = SolrIndex("")
        assert index.enabled is False
        with respx.mock(assert_all_called=False) as mock:
            assert index.update_description(5, "x") is False
        assert mock.calls.call_count == 0

    def test_shared_client(self) -> None:
        with respx.mock:
            respx.post(f"{_SOLR}/update").mock(return_value=httpx.Response(200))
            with httpx.Client() as client:
                assert SolrIndex(_SOLR, client=client).update_description(1, "x") is True

    def test_timeout_defaults_to_settings(self, monkeypatch) -> None:
        monkeypatch.setattr("ogparser.search.solr.settings.index_timeout", 3.5)
        assert SolrIndex(_SOLR).timeout == 3.5

    def test_update_abandoned_at_wall_clock_budget(self, slow_server: Callable[..., str]) -> None:
        base = slow_server(header_delay=0.8, body_delay=0.8, body=b'{"responseHeader":{}}')

        with httpx.Client(trust_env=False) as client:
            index = SolrIndex(base, timeout=1.0, client=client)
            started = time.monotonic()
            assert index.update_description(5, "x") is False
            elapsed = time.monotonic() - started

        assert elapsed < 1.5
