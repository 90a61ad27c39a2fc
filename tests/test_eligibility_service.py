from models.position import Position
from models.trading_params import SocialChecks, TradingParams
from services.eligibility_service import is_eligible, rejection_reasons

from conftest import make_token


def _open(address: str) -> Position:
    return Position(address=address, name="held", entry_market_cap=60, current_market_cap=60, buy_amount=1)


def test_market_cap_threshold_is_inclusive():
    params = TradingParams(buy_market_cap=50)
    assert is_eligible(make_token(market_cap=50), [], params)
    assert not is_eligible(make_token(market_cap=49.99), [], params)


def test_already_open_address_is_rejected():
    params = TradingParams(buy_market_cap=50)
    reasons = rejection_reasons(make_token("X", 80), [_open("X")], params)
    assert reasons == ["already holding"]
    assert is_eligible(make_token("Y", 80), [_open("X")], params)


def test_disabled_social_checks_impose_nothing():
    params = TradingParams(buy_market_cap=0)
    bare = make_token(market_cap=10)
    assert is_eligible(bare, [], params)


def test_only_enabled_social_checks_are_required():
    params = TradingParams(buy_market_cap=0, social_checks=SocialChecks(twitter=True, website=True))
    assert is_eligible(make_token(market_cap=10, has_twitter=True, has_website=True), [], params)
    assert rejection_reasons(make_token(market_cap=10, has_twitter=True, has_telegram=True), [], params) == [
        "no website"
    ]


def test_zero_market_cap_never_eligible():
    params = TradingParams(buy_market_cap=0)
    assert not is_eligible(make_token(market_cap=0), [], params)


def test_collects_every_reason():
    params = TradingParams(buy_market_cap=50, social_checks=SocialChecks(twitter=True, telegram=True))
    reasons = rejection_reasons(make_token("X", 40), [_open("X")], params)
    assert len(reasons) == 4
