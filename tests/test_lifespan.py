from conftest import log_events


async def test_lifespan_starts_and_cancels_periodic_activity(app, caplog) -> None:
    async with app.router.lifespan_context(app):
        activity = app.state.activity
        assert activity.running
        assert app.state.loki_shipper is None

    assert not activity.running

    [started] = log_events(caplog, event="app_started")
    assert started["port"] == 3001
    assert started["version"] == "1.0.0"
    assert started["environment"] == "development"
    assert log_events(caplog, event="app_shutting_down")


async def test_shutdown_flushes_tracer_provider(app, context, monkeypatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(context.tracer_provider, "shutdown", lambda: calls.append("shutdown"))

    async with app.router.lifespan_context(app):
        pass

    assert calls == ["shutdown"]
