import pytest
import requests

from enums.trade_outcome import TradeOutcome
from models.position import Position
from models.trade import Trade
from services.discovery_service import DexscreenerDiscoveryService, SimulatedDiscoveryService
from services.market_service import MarketService, SimulatedPriceService
from services.receipt_service import SimulatedReceiptService
from services.telegram_service import TelegramService


class FakeResponse:
    def __init__(self, payload, status: int = 200):
        self.payload = payload
        self.status = status

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


class FakeSession:
    """Routes GET by URL suffix; a route mapped to an exception raises it."""

    def __init__(self, routes: dict | None = None):
        self.routes = routes or {}
        self.gets: list[str] = []
        self.posts: list[tuple[str, dict]] = []

    def get(self, url, timeout=None):
        self.gets.append(url)
        for suffix, result in self.routes.items():
            if url.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                return result
        return FakeResponse({}, 404)

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        return FakeResponse({"ok": True})


def _pair(mc_usd=30000, native="0.0001", usd="0.02", liquidity=1000, name="Moon", symbol="MOON"):
    return {
        "chainId": "solana",
        "marketCap": mc_usd,
        "priceNative": native,
        "priceUsd": usd,
        "liquidity": {"usd": liquidity},
        "baseToken": {"name": name, "symbol": symbol},
    }


# -------- simulated feeds --------

def test_simulated_discovery_is_seedable_and_in_range():
    a, b = SimulatedDiscoveryService(seed=3), SimulatedDiscoveryService(seed=3)
    assert [a.next() for _ in range(5)] == [b.next() for _ in range(5)]

    feed = SimulatedDiscoveryService(seed=11)
    for _ in range(200):
        token = feed.next()
        assert 40 <= token.market_cap < 1040
        assert len(token.address) == 13
        assert token.symbol == "NEW"


def test_simulated_price_moves_at_most_two_sol():
    feed = SimulatedPriceService(seed=5)
    current = 100.0
    for _ in range(200):
        new = feed.update("X", current)
        assert abs(new - current) <= 2.0 + 1e-9
        assert new == round(new, 2)
        current = new


def test_simulated_receipt_is_a_solscan_link():
    position = Position(address="X", name="X", entry_market_cap=60, current_market_cap=70, buy_amount=1)
    link = SimulatedReceiptService(seed=1).settle(position, 70)
    assert link.startswith("https://solscan.io/tx/")
    assert len(link.rsplit("/", 1)[1]) == 13


# -------- market service --------

def test_market_cap_is_converted_to_sol():
    assert MarketService.market_cap_native(_pair()) == pytest.approx(150.0)


@pytest.mark.parametrize("pair", [
    _pair(mc_usd=0),
    _pair(native="0"),
    _pair(usd=None),
    _pair(native="abc"),
])
def test_unusable_pair_has_no_market_cap(pair):
    assert MarketService.market_cap_native(pair) is None


def test_best_pair_is_most_liquid_solana_pair():
    pairs = [_pair(liquidity=10, name="A"), _pair(liquidity=500, name="B"),
             dict(_pair(liquidity=9999, name="C"), chainId="bsc")]
    session = FakeSession({"/latest/dex/tokens/MINT": FakeResponse({"pairs": pairs})})
    best = MarketService(session=session).get_best_pair("MINT")
    assert best["baseToken"]["name"] == "B"


def test_market_service_network_error_yields_none():
    session = FakeSession({"/latest/dex/tokens/MINT": requests.ConnectionError("down")})
    assert MarketService(session=session).update("MINT", 60) is None


# -------- dexscreener discovery --------

def _profiles():
    return [
        {"chainId": "solana", "tokenAddress": "MINT1", "links": [
            {"type": "twitter", "url": "https://x.com/a"},
            {"type": "telegram", "url": "https://t.me/a"},
            {"label": "Website", "url": "https://a.io"},
        ]},
        {"chainId": "bsc", "tokenAddress": "0xabc", "links": []},
        {"chainId": "solana", "tokenAddress": "MINT2"},
    ]


def test_social_flags_from_profile_links():
    flags = DexscreenerDiscoveryService.social_flags(_profiles()[0])
    assert flags == {"has_twitter": True, "has_telegram": True, "has_website": True}
    assert DexscreenerDiscoveryService.social_flags({"links": [{"type": "x"}]})["has_twitter"]
    assert DexscreenerDiscoveryService.social_flags({}) == {
        "has_twitter": False, "has_telegram": False, "has_website": False}


def test_dexscreener_discovery_emits_each_token_once():
    session = FakeSession({
        "/token-profiles/latest/v1": FakeResponse(_profiles()),
        "/latest/dex/tokens/MINT1": FakeResponse({"pairs": [_pair(name="One", symbol="ONE")]}),
        "/latest/dex/tokens/MINT2": FakeResponse({"pairs": [_pair(mc_usd=60000, name="Two", symbol="TWO")]}),
    })
    feed = DexscreenerDiscoveryService(session=session, base_url="https://dex.test")

    first = feed.next()
    second = feed.next()
    assert (first.address, first.symbol, first.market_cap) == ("MINT1", "ONE", 150.0)
    assert first.has_twitter and first.has_telegram and first.has_website
    assert (second.address, second.market_cap) == ("MINT2", 300.0)
    assert not second.has_twitter

    # the feed keeps returning the same profiles; already seen ones are skipped
    assert feed.next() is None
    assert session.gets.count("https://dex.test/token-profiles/latest/v1") == 2


def test_dexscreener_discovery_skips_tokens_without_pair():
    session = FakeSession({
        "/token-profiles/latest/v1": FakeResponse(_profiles()),
        "/latest/dex/tokens/MINT1": FakeResponse({"pairs": []}),
        "/latest/dex/tokens/MINT2": FakeResponse({"pairs": [_pair()]}),
    })
    token = DexscreenerDiscoveryService(session=session, base_url="https://dex.test").next()
    assert token.address == "MINT2"


def test_dexscreener_discovery_network_error_yields_none():
    session = FakeSession({"/token-profiles/latest/v1": requests.Timeout("slow")})
    assert DexscreenerDiscoveryService(session=session, base_url="https://dex.test").next() is None


# -------- telegram --------

def _trade():
    return Trade(address="X", name="Moon_coin", buy_market_cap=60, sell_market_cap=70, buy_amount=1,
                 proceeds=70 / 60, profit=70 / 60 - 1, result=TradeOutcome.WIN,
                 tx_link="https://solscan.io/tx/abc", closed_at=0)


def test_telegram_disabled_without_credentials():
    session = FakeSession()
    notifier = TelegramService(session=session)
    assert not notifier.enabled
    assert notifier.notify_sell(_trade()) is False
    assert session.posts == []


def test_telegram_posts_markdown_message():
    session = FakeSession()
    notifier = TelegramService(token="T0K", chat_id="42", session=session)

    assert notifier.notify_sell(_trade()) is True

    url, payload = session.posts[0]
    assert url == "https://api.telegram.org/botT0K/sendMessage"
    assert payload["chat_id"] == "42"
    assert payload["parse_mode"] == "Markdown"
    assert "Moon\\_coin" in payload["text"]
    assert "+0.1667 SOL" in payload["text"]


def test_telegram_reads_credentials_from_env(monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "ENV")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "7")
    assert TelegramService(session=FakeSession()).enabled


def test_telegram_accepts_channel_username():
    session = FakeSession()
    notifier = TelegramService(token="T0K", chat_id="@mychannel", session=session)
    assert notifier.notify_error("feed down") is True
    assert session.posts[0][1]["chat_id"] == "@mychannel"
