"""Tests for main module."""

from fastapi import FastAPI

from expiry_tracker import main as main_module


def test_main_serves_app_on_configured_port(monkeypatch, settings, container) -> None:
    served: dict[str, object] = {}

    def fake_run(app: FastAPI, host: str, port: int) -> None:
        served.update(app=app, host=host, port=port)

    monkeypatch.setattr(main_module, "build_container", lambda _settings: container)
    monkeypatch.setattr(main_module.uvicorn, "run", fake_run)

    main_module.main(settings)

    assert isinstance(served["app"], FastAPI)
    assert served["app"].state.container is container
    assert served["port"] == settings.port
    assert served["host"] == settings.host
