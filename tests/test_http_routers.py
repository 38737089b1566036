import httpx
import pytest
from fastapi import FastAPI

from adapters.entry.http.chart_router import router as chart_router
from adapters.entry.http.live_router import router as live_router
from core.domain.entities.pair_entity import PairEntity, TokenMetadataEntity
from factories import FakeTradeRepository, at, make_trade, scenario_trades
from workers.chart_supervisor import ChartSupervisor


@pytest.fixture
def repo():
    pair = PairEntity(
        id="1",
        token0="currency",
        token1="con_usdc",
        token0_meta=TokenMetadataEntity(contract="currency", symbol="XIAN"),
    )
    return FakeTradeRepository(scenario_trades() + [make_trade("01:15", out0=1, out1=1)], pairs=[pair])


@pytest.fixture
async def supervisor(repo):
    sup = ChartSupervisor(trade_repository=repo)
    yield sup
    await sup.stop()


@pytest.fixture
async def client(supervisor):
    app = FastAPI()
    app.include_router(chart_router)
    app.include_router(live_router)
    app.state.supervisor = supervisor

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def test_pairs(client):
    r = await client.get("/pairs")
    assert r.status_code == 200
    body = r.json()
    assert body == [
        {
            "id": "1",
            "label": "XIAN/con_usdc",
            "token0": {"contract": "currency", "symbol": "XIAN", "logo": None},
            "token1": {"contract": "con_usdc", "symbol": "con_usdc", "logo": None},
        }
    ]


async def test_chart_daily(client):
    r = await client.get("/chart", params={"pair": "1", "tf": 1440, "inverted": "false"})
    assert r.status_code == 200
    body = r.json()

    assert body["interval"] == 1440
    assert body["interval_label"] == "1d"
    assert body["inverted"] is False
    assert body["trade_count"] == 3
    assert body["dropped_trades"] == 1
    assert body["watermark"] == "2025-03-31T01:15:00.000000"
    assert body["candles"][0] == {"time": int(at("00:00").timestamp()), "open": 10.0, "high": 15.0, "low": 10.0, "close": 15.0}
    assert body["volumes"][0] == {"time": int(at("00:00").timestamp()), "value": 190.0, "side": "up"}
    assert len(body["candles"]) == len(body["volumes"])
    # forward-filled up to today
    assert body["candles"][-1]["close"] == 15.0
    assert body["volumes"][-1]["side"] == "neutral"


async def test_chart_unknown_pair_is_no_data(client):
    r = await client.get("/chart", params={"pair": "404", "tf": 60})
    assert r.status_code == 404
    assert r.json()["detail"] == "No data available for this pair"


async def test_chart_unsupported_interval(client):
    r = await client.get("/chart", params={"pair": "1", "tf": 7})
    assert r.status_code == 422


async def test_chart_fetch_failure_is_bad_gateway(client, repo):
    repo.fail = True
    r = await client.get("/chart", params={"pair": "1", "tf": 60})
    assert r.status_code == 502


async def test_trades_newest_first(client):
    r = await client.get("/trades", params={"pair": "1", "inverted": "true"})
    assert r.status_code == 200
    rows = r.json()

    assert [row["created"] for row in rows] == [
        "2025-03-31T01:15:00.000000",
        "2025-03-31T01:10:00.000000",
        "2025-03-31T00:40:00.000000",
        "2025-03-31T00:05:00.000000",
    ]
    assert rows[0]["price"] is None
    assert rows[1]["side"] == "SELL"
    assert rows[1]["price"] == pytest.approx(1 / 15)
    assert (rows[1]["amount"], rows[1]["value"]) == (30.0, 2.0)
    assert rows[2]["side"] == "BUY"


async def test_live_selection_lifecycle(client, supervisor):
    r = await client.get("/live")
    assert r.status_code == 404

    r = await client.put("/live/selection", json={"pair": "1", "tf": 1440, "inverted": True})
    assert r.status_code == 200
    body = r.json()
    assert body["running"] is True
    assert body["inverted"] is True
    assert body["candles"][0]["open"] == pytest.approx(0.1)
    assert body["candles"][0]["low"] == pytest.approx(1 / 15)

    first = supervisor.live
    r = await client.put("/live/selection", json={"pair": "1", "tf": 60, "inverted": False})
    assert r.status_code == 200
    assert supervisor.live is not first
    assert not first.is_running

    assert (await client.post("/live/pause")).json() == {"status": "paused"}
    assert (await client.get("/live")).json()["running"] is False
    assert (await client.post("/live/resume")).json() == {"status": "running"}
    assert (await client.get("/live")).json()["running"] is True


async def test_live_selection_validation(client):
    r = await client.put("/live/selection", json={"pair": "1", "tf": 45})
    assert r.status_code == 422
    r = await client.put("/live/selection", json={"pair": "  ", "tf": 60})
    assert r.status_code == 422


async def test_pause_without_selection(client):
    assert (await client.post("/live/pause")).status_code == 404
    assert (await client.post("/live/resume")).status_code == 404
