"""
Tests for budget-gated rank verification.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_serp
from foldscout.collector.errors import (
    MalformedResponseError,
    NetworkFailureError,
    QuotaExhaustedError,
)
from foldscout.collector.rank_verification import RankVerificationService
from foldscout.context.models import EnrichedKeyword, KeywordOrigin


def make_service(client, tracker, **kwargs):
    kwargs.setdefault("request_delay", 0)
    return RankVerificationService(client, tracker, **kwargs)


class TestVerify:
    """Test single-keyword verification."""

    @pytest.mark.asyncio
    async def test_subdomain_result_matches(self, mock_rank_client, make_tracker):
        mock_rank_client.serps["boiler repair"] = [
            "rival.co.uk", "notexample.com", "www.example.com", "example.com",
        ]
        service = make_service(mock_rank_client, make_tracker(10))

        ranked = await service.verify("boiler repair", "example.com")

        assert ranked.is_verified
        assert ranked.position == 3
        assert ranked.ranking_url == "https://www.example.com/page-3"
        assert ranked.snippet == "Snippet for boiler repair"

    @pytest.mark.asyncio
    async def test_not_found_is_verified_position_zero(self, mock_rank_client, make_tracker):
        mock_rank_client.serps["boiler repair"] = ["notexample.com", "rival.co.uk"]
        service = make_service(mock_rank_client, make_tracker(10))

        ranked = await service.verify("boiler repair", "example.com")

        assert ranked.is_verified
        assert ranked.position == 0
        assert not ranked.is_ranking
        assert ranked.ranking_url is None

    @pytest.mark.asyncio
    async def test_no_budget_skips_call(self, mock_rank_client, make_tracker):
        service = make_service(mock_rank_client, make_tracker(0))

        ranked = await service.verify("boiler repair", "example.com")

        assert not ranked.is_verified
        assert ranked.position == 0
        mock_rank_client.search.assert_not_called()
        assert service.calls_made == 0

    @pytest.mark.asyncio
    async def test_keeps_enrichment_data(self, mock_rank_client, make_tracker):
        mock_rank_client.serps["acme plumbing"] = ["acme-plumbing.co.uk"]
        keyword = EnrichedKeyword(phrase="acme plumbing", origin=KeywordOrigin.BRAND, volume=70)
        service = make_service(mock_rank_client, make_tracker(10))

        ranked = await service.verify(keyword, "acme-plumbing.co.uk")

        assert ranked.position == 1
        assert ranked.volume == 70
        assert ranked.is_branded
        assert ranked.is_above_fold

    @pytest.mark.asyncio
    async def test_request_parameters(self, mock_rank_client, make_tracker):
        service = make_service(
            mock_rank_client, make_tracker(10), result_count=500, country="us", language="en"
        )
        await service.verify("boiler repair", "example.com")
        mock_rank_client.search.assert_awaited_once_with("boiler repair", num=100, gl="us", hl="en")

    @pytest.mark.asyncio
    async def test_serp_results_retained_and_drained(self, mock_rank_client, make_tracker):
        service = make_service(mock_rank_client, make_tracker(10))
        await service.verify("kw one", "example.com")
        await service.verify("kw two", "example.com")

        drained = service.drain_serp_results()
        assert [s.keyword for s in drained] == ["kw one", "kw two"]
        assert service.drain_serp_results() == []


class TestFailures:
    """Test per-keyword failure handling."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        NetworkFailureError("connection reset"),
        MalformedResponseError("no organic"),
    ])
    async def test_failure_yields_unverified_and_batch_continues(self, make_tracker, error):
        client = MagicMock()
        client.search = AsyncMock(side_effect=[error, make_serp("kw2", ["example.com"])])
        tracker = make_tracker(10)
        service = make_service(client, tracker)

        ranked = await service.verify_many(["kw1", "kw2"], "example.com")

        assert [k.is_verified for k in ranked] == [False, True]
        assert ranked[1].position == 1
        # The failed call still spent its unit
        assert tracker.remaining() == 8
        assert len(service.drain_serp_results()) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_after_successes_keeps_them(self, make_tracker):
        client = MagicMock()
        client.search = AsyncMock(side_effect=[
            make_serp("kw1", ["example.com"]),
            make_serp("kw2", ["rival.com", "example.com"]),
            TypeError("argument of type 'int' is not iterable"),
            make_serp("kw4", ["example.com"]),
        ])
        tracker = make_tracker(10)
        service = make_service(client, tracker)

        ranked = await service.verify_many(["kw1", "kw2", "kw3", "kw4"], "example.com")

        assert [k.is_verified for k in ranked] == [True, True, False, True]
        assert [k.position for k in ranked] == [1, 2, 0, 1]
        assert service.calls_made == 4
        assert tracker.remaining() == 6
        assert not service.quota_exhausted

    @pytest.mark.asyncio
    async def test_quota_error_exhausts_budget_and_stops(self, make_tracker):
        client = MagicMock()
        client.search = AsyncMock(side_effect=QuotaExhaustedError("429", status_code=429))
        tracker = make_tracker(10)
        service = make_service(client, tracker)

        ranked = await service.verify_many(["kw1", "kw2", "kw3"], "example.com")

        assert client.search.await_count == 1
        assert len(ranked) == 1
        assert not ranked[0].is_verified
        assert tracker.remaining() == 0
        assert service.quota_exhausted


class TestVerifyMany:
    """Test sequential batch verification."""

    @pytest.mark.asyncio
    async def test_stops_when_budget_runs_out(self, mock_rank_client, make_tracker):
        tracker = make_tracker(2)
        service = make_service(mock_rank_client, tracker)

        ranked = await service.verify_many([f"kw{i}" for i in range(5)], "example.com")

        assert mock_rank_client.search.await_count == 2
        assert len(ranked) == 2
        assert all(k.is_verified for k in ranked)
        assert service.calls_made == 2
        assert tracker.remaining() == 0

    @pytest.mark.asyncio
    async def test_calls_are_spaced(self, mock_rank_client, make_tracker):
        service = make_service(mock_rank_client, make_tracker(10), request_delay=0.5)

        with patch(
            "foldscout.collector.rank_verification.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            await service.verify_many(["kw1", "kw2", "kw3"], "example.com")

        assert mock_sleep.await_count == 2
        for call in mock_sleep.await_args_list:
            assert 0 < call.args[0] <= 0.5

    @pytest.mark.asyncio
    async def test_empty_list(self, mock_rank_client, make_tracker):
        service = make_service(mock_rank_client, make_tracker(10))
        assert await service.verify_many([], "example.com") == []
        mock_rank_client.search.assert_not_called()
