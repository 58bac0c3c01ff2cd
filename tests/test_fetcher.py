import asyncio
import json
import logging
from unittest import mock

import pytest
import requests

from portfolio_dashboard import config
from portfolio_dashboard.backend import models
from portfolio_dashboard.backend.errors import ConfigurationError, HistoryFetchError, RateLimitError
from portfolio_dashboard.backend.fetcher import PortfolioFetcher
from portfolio_dashboard.backend.market_data import MarketDataClient
from portfolio_dashboard.backend.state import DashboardState

HOLDINGS = [models.HoldingConfig("AAPL", 10), models.HoldingConfig("MSFT", 5)]
JAN_02 = 1704153600000
JAN_03 = 1704240000000


class FakeClient:
    """Serves canned results; an Exception value is raised instead of returned."""

    def __init__(self, prices, history):
        self.prices = prices
        self.history = history
        self.calls = []
        self.closed = False

    def _serve(self, table, symbol):
        value = table.get(symbol, [])
        if isinstance(value, Exception):
            raise value
        return value

    def get_previous_close(self, symbol):
        self.calls.append(("prev", symbol))
        return self._serve(self.prices, symbol)

    def get_daily_range(self, symbol, start, end):
        self.calls.append(("range", symbol))
        return self._serve(self.history, symbol)

    def close(self):
        self.closed = True


def good_history():
    return {
        "AAPL": [{"t": JAN_03, "c": 151}, {"t": JAN_02, "c": 150}],
        "MSFT": [{"t": JAN_02, "c": 300}],
    }


def make_fetcher(client, state=None, api_key="key"):
    return PortfolioFetcher(
        state or DashboardState(),
        holdings=HOLDINGS,
        client_factory=lambda key: client,
        api_key_provider=lambda: api_key,
    )


def test_successful_cycle_publishes_everything():
    client = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    fetcher = make_fetcher(client)

    assert asyncio.run(fetcher.refresh())

    view = fetcher.state.view()
    assert view.total_value == 3000
    assert view.daily_change == 0
    assert [h.symbol for h in view.holdings] == ["AAPL", "MSFT"]
    assert view.history == [models.HistoryPoint("2024-01-02", 3000.0), models.HistoryPoint("2024-01-03", 1510.0)]
    assert not view.is_loading
    assert not view.error.show
    assert view.last_updated is not None
    assert client.closed


def test_history_requests_start_after_all_prices():
    client = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    asyncio.run(make_fetcher(client).refresh())
    kinds = [kind for kind, _ in client.calls]
    assert kinds == ["prev", "prev", "range", "range"]


def test_failed_price_degrades_only_that_symbol():
    client = FakeClient(
        {"AAPL": requests.ConnectionError("boom"), "MSFT": [{"c": 300}]},
        good_history(),
    )
    fetcher = make_fetcher(client)
    assert asyncio.run(fetcher.refresh())

    view = fetcher.state.view()
    aapl = view.holdings[0]
    assert (aapl.price, aapl.change, aapl.previous_close) == (0, 0, 0)
    assert view.total_value == 1500
    assert not view.error.show


def test_empty_price_and_rate_limited_price_are_not_escalated():
    client = FakeClient({"AAPL": [], "MSFT": RateLimitError("MSFT")}, good_history())
    fetcher = make_fetcher(client)
    assert asyncio.run(fetcher.refresh())
    assert fetcher.state.view().total_value == 0


def test_empty_history_aborts_and_keeps_previous_state():
    state = DashboardState()
    good = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    asyncio.run(make_fetcher(good, state).refresh())

    history = good_history()
    history["MSFT"] = []
    bad = FakeClient({"AAPL": [{"c": 999}], "MSFT": [{"c": 999}]}, history)
    assert not asyncio.run(make_fetcher(bad, state).refresh())

    view = state.view()
    assert view.error.show
    assert view.error.message == "No historical data available for MSFT"
    assert view.total_value == 3000
    assert view.holdings[0].price == 150
    assert not view.is_loading


def test_rate_limit_message_and_state_unchanged():
    state = DashboardState()
    good = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    asyncio.run(make_fetcher(good, state).refresh())

    history = good_history()
    history["AAPL"] = RateLimitError("AAPL")
    limited = FakeClient({"AAPL": [{"c": 1}], "MSFT": [{"c": 1}]}, history)
    asyncio.run(make_fetcher(limited, state).refresh())

    view = state.view()
    assert view.error.message == "API rate limit exceeded. Please try again in a few minutes."
    assert [h.price for h in view.holdings] == [150, 300]


def test_missing_api_key_is_reported_and_clears_loading():
    client = FakeClient({}, {})
    fetcher = make_fetcher(client, api_key=None)
    with pytest.raises(ConfigurationError):
        asyncio.run(fetcher.fetch_cycle())

    assert not asyncio.run(fetcher.refresh())
    view = fetcher.state.view()
    assert view.error.message == config.MISSING_API_KEY_MESSAGE
    assert not view.is_loading
    assert client.calls == []


def test_generic_error_falls_back_to_default_message():
    history = good_history()
    history["AAPL"] = RuntimeError()
    client = FakeClient({"AAPL": [{"c": 1}], "MSFT": [{"c": 1}]}, history)
    fetcher = make_fetcher(client)
    asyncio.run(fetcher.refresh())
    assert fetcher.state.view().error.message == config.GENERIC_ERROR_MESSAGE
    assert client.closed


def test_fetch_cycle_raises_history_error_naming_symbol():
    history = good_history()
    history["AAPL"] = []
    fetcher = make_fetcher(FakeClient({"AAPL": [{"c": 1}], "MSFT": [{"c": 1}]}, history))
    with pytest.raises(HistoryFetchError, match="AAPL"):
        asyncio.run(fetcher.fetch_cycle())


def test_result_after_close_is_dropped():
    state = DashboardState()
    state.close()
    client = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    assert not asyncio.run(make_fetcher(client, state).refresh())
    assert state.view().holdings == []


def test_successful_cycle_clears_previous_error_banner():
    state = DashboardState()
    history = good_history()
    history["AAPL"] = []
    failing = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, history)
    asyncio.run(make_fetcher(failing, state).refresh())
    assert state.view().error.show

    good = FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, good_history())
    assert asyncio.run(make_fetcher(good, state).refresh())
    view = state.view()
    assert not view.error.show
    assert view.total_value == 3000


def test_malformed_history_aborts_the_cycle():
    history = good_history()
    history["AAPL"] = [{"c": 150}, {"c": 151}]
    fetcher = make_fetcher(FakeClient({"AAPL": [{"c": 150}], "MSFT": [{"c": 300}]}, history))
    assert not asyncio.run(fetcher.refresh())
    view = fetcher.state.view()
    assert view.error.message == "Malformed historical data for AAPL"
    assert view.history == []


def _http_response(status, payload=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(payload or {}).encode()
    return resp


def test_server_error_from_real_client_keeps_api_key_out_of_banner_and_logs(caplog):
    def fake_get(url, params=None, timeout=None):
        resp = _http_response(200, {"results": [{"c": 150}]}) if url.endswith("/prev") else _http_response(500)
        resp.url = f"{url}?adjusted=true&apiKey={params['apiKey']}"
        return resp

    session = mock.Mock(spec=requests.Session)
    session.get.side_effect = fake_get
    fetcher = PortfolioFetcher(
        DashboardState(),
        holdings=HOLDINGS,
        client_factory=lambda key: MarketDataClient(key, session=session),
        api_key_provider=lambda: "SUPERSECRETKEY",
    )

    with caplog.at_level(logging.DEBUG, logger="portfolio_dashboard"):
        assert not asyncio.run(fetcher.refresh())

    message = fetcher.state.view().error.message
    assert message.startswith("Market data request failed for ")
    assert message.endswith("(status 500)")
    assert "SUPERSECRETKEY" not in message
    assert "SUPERSECRETKEY" not in caplog.text


def test_price_errors_from_real_client_do_not_log_api_key(caplog):
    session = mock.Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("GET https://api.polygon.io/v2/x?apiKey=SUPERSECRETKEY")
    fetcher = PortfolioFetcher(
        DashboardState(),
        holdings=HOLDINGS,
        client_factory=lambda key: MarketDataClient(key, session=session),
        api_key_provider=lambda: "SUPERSECRETKEY",
    )

    with caplog.at_level(logging.DEBUG, logger="portfolio_dashboard"):
        asyncio.run(fetcher.refresh())

    assert "SUPERSECRETKEY" not in caplog.text
    assert "SUPERSECRETKEY" not in fetcher.state.view().error.message
