import json

import httpx
import pytest

from adapters.external.xian.trade_repository_graphql import TradeRepositoryGraphQL
from adapters.external.xian.xian_dex_client import XianDexClient
from adapters.external.xian.xian_graphql_client import XianGraphQLClient
from core.domain.errors import TradeFetchError

ENDPOINT = "https://node.example/graphql"


def _swap_node(created, data, pair="1"):
    return {
        "caller": "con_dex",
        "signer": "alice",
        "txHash": "TX" + created[-6:],
        "created": created,
        "dataIndexed": json.dumps({"pair": pair}),
        "data": json.dumps(data),
    }


def _events(nodes):
    return {"data": {"allEvents": {"edges": [{"node": n} for n in nodes]}}}


def _repo(handler):
    http = XianGraphQLClient(endpoint=ENDPOINT, transport=httpx.MockTransport(handler))
    return TradeRepositoryGraphQL(XianDexClient(http=http, pairs_contract="con_pairs"))


async def test_list_trades_builds_filtered_query_and_normalizes():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json=_events(
                [
                    _swap_node("2025-03-31T00:05:00.000001", {"amount0Out": "10", "amount1In": "100"}),
                    _swap_node("2025-03-31T00:40:00.000002", {"amount0In": {"__fixed__": "5"}, "amount1Out": "60"}),
                ]
            ),
        )

    repo = _repo(handler)
    trades = await repo.list_trades("1", created_after="2025-03-31T00:00:00.123456", ascending=True)

    query = seen[0]["query"]
    assert 'condition: {contract: "con_pairs", event: "Swap"}' in query
    assert 'dataIndexed: {contains: {pair: "1"}}' in query
    assert 'created: {greaterThan: "2025-03-31T00:00:00.123456"}' in query
    assert "orderBy: CREATED_ASC" in query

    assert [t.created for t in trades] == ["2025-03-31T00:05:00.000001", "2025-03-31T00:40:00.000002"]
    assert trades[1].amount0_in == 5.0
    assert trades[0].tx_hash == "TX000001"


async def test_descending_without_watermark():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content)["query"])
        return httpx.Response(200, json=_events([]))

    assert await _repo(handler).list_trades("1", ascending=False) == []
    assert "CREATED_DESC" in seen[0]
    assert "greaterThan" not in seen[0]


async def test_malformed_events_are_skipped():
    def handler(request):
        return httpx.Response(
            200,
            json=_events(
                [
                    _swap_node("not-a-date", {"amount0Out": "1", "amount1In": "1"}),
                    _swap_node("2025-03-31T00:05:00", {"amount0Out": "1", "amount1In": "1"}),
                ]
            ),
        )

    repo = _repo(handler)
    trades = await repo.list_trades("1")
    assert len(trades) == 1
    assert repo.malformed_count == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"errors": [{"message": "syntax error"}]}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json={"data": {"allEvents": None}}),
    ],
)
async def test_collaborator_failures_become_trade_fetch_error(response):
    repo = _repo(lambda request: response)
    with pytest.raises(TradeFetchError):
        await repo.list_trades("1")


async def test_transport_error_becomes_trade_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TradeFetchError):
        await _repo(handler).list_trades("1")


async def test_list_pairs_with_cached_token_metadata():
    queries = []

    def handler(request):
        query = json.loads(request.content)["query"]
        queries.append(query)
        if "PairCreated" in query:
            return httpx.Response(
                200,
                json=_events(
                    [
                        {"dataIndexed": json.dumps({"token0": "currency", "token1": "con_usdc"}), "data": {"pair": 1}},
                        {"dataIndexed": {}, "data": {}},
                    ]
                ),
            )
        return httpx.Response(
            200,
            json={
                "data": {
                    "symbol_0": {"nodes": [{"key": "currency.metadata:token_symbol", "value": "XIAN"}]},
                    "logo_0": {"nodes": []},
                    "symbol_1": {"nodes": []},
                    "logo_1": {"nodes": [{"key": "con_usdc.metadata:token_logo_url", "value": "https://logo"}]},
                }
            },
        )

    repo = _repo(handler)
    pairs = await repo.list_pairs()

    assert len(pairs) == 1
    pair = pairs[0]
    assert (pair.id, pair.symbol0, pair.symbol1) == ("1", "XIAN", "con_usdc")
    assert pair.token1_meta.logo == "https://logo"
    assert pair.label(inverted=True) == "con_usdc/XIAN"

    await repo.list_pairs()
    assert sum("GetTokensMetadata" in q for q in queries) == 1
    assert await repo.get_pair("1") == pair
    assert await repo.get_pair("2") is None
