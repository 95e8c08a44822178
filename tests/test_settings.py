from advisor_server.config import settings as settings_module
from advisor_server.config.settings import get_settings

ENV_KEYS = (
    "LOG_LEVEL",
    "REQUEST_TIMEOUT_SECONDS",
    "QUOTE_CURRENCY",
    "YAHOO_PROXY_URL",
    "LIVE_PRICES_ENABLED",
    "HOLDINGS_REFRESH_SECONDS",
    "PLAN_REFRESH_SECONDS",
    "SIMULATED_VOLATILITY",
    "ALLOCATION_UNIT",
)


def _clear_env(monkeypatch) -> None:
    monkeypatch.setattr(settings_module, "load_dotenv", lambda: False)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch) -> None:
    _clear_env(monkeypatch)
    settings = get_settings()
    assert settings.quote_currency == "inr"
    assert settings.live_prices_enabled is True
    assert settings.holdings_refresh_seconds == 60.0
    assert settings.plan_refresh_seconds == 300.0
    assert settings.simulated_volatility == 0.10
    assert settings.allocation_unit == 1.0
    assert settings.yahoo_proxy_url == "https://api.allorigins.win/get?url="


def test_overrides_and_fallbacks(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("QUOTE_CURRENCY", "USD")
    monkeypatch.setenv("YAHOO_PROXY_URL", "")
    monkeypatch.setenv("LIVE_PRICES_ENABLED", "no")
    monkeypatch.setenv("HOLDINGS_REFRESH_SECONDS", "-5")
    monkeypatch.setenv("PLAN_REFRESH_SECONDS", "abc")
    monkeypatch.setenv("SIMULATED_VOLATILITY", "2")
    monkeypatch.setenv("ALLOCATION_UNIT", "0.01")
    settings = get_settings()
    assert settings.log_level == "DEBUG"
    assert settings.quote_currency == "usd"
    assert settings.yahoo_proxy_url is None
    assert settings.live_prices_enabled is False
    assert settings.holdings_refresh_seconds == 60.0
    assert settings.plan_refresh_seconds == 300.0
    assert settings.simulated_volatility == 0.5
    assert settings.allocation_unit == 0.01
