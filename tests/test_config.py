from cashflow.config import get_settings


def test_defaults(monkeypatch):
    for name in ("SEED_PATH", "CURRENCY", "RESERVE_ALERT_THRESHOLD", "INCLUDE_FUTURE_TRANSACTIONS",
                 "RECENT_TRANSACTIONS_LIMIT", "LOG_LEVEL", "USER_ID"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.SEED_PATH == "data/seed.json"
    assert settings.RESERVE_ALERT_THRESHOLD == 1000
    assert settings.INCLUDE_FUTURE_TRANSACTIONS is False
    assert settings.RECENT_TRANSACTIONS_LIMIT == 5
    assert settings.USER_ID == "demo"
    get_settings.cache_clear()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("INCLUDE_FUTURE_TRANSACTIONS", "yes")
    monkeypatch.setenv("CURRENCY", "EUR")
    monkeypatch.setenv("RESERVE_ALERT_THRESHOLD", "250.5")
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.INCLUDE_FUTURE_TRANSACTIONS is True
    assert settings.CURRENCY == "EUR"
    assert settings.RESERVE_ALERT_THRESHOLD == 250.5
    get_settings.cache_clear()
