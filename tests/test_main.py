"""Tests for the command-line entrypoint."""

import pytest

from apartment_booker import main as main_module
from apartment_booker.errors import StorageError


def test_main_exits_when_storage_fails(monkeypatch) -> None:
    def broken(settings):
        raise StorageError("cannot open database")

    def unexpected(*args, **kwargs):
        raise AssertionError("server must not start")

    monkeypatch.setattr(main_module, "build_container", broken)
    monkeypatch.setattr(main_module.uvicorn, "run", unexpected)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main()

    assert excinfo.value.code == 1


def test_main_serves_app(monkeypatch, settings) -> None:
    served: dict[str, object] = {}

    def fake_run(app, host, port):
        served.update(app=app, host=host, port=port)

    monkeypatch.setattr(main_module, "Settings", lambda: settings)
    monkeypatch.setattr(main_module.uvicorn, "run", fake_run)

    main_module.main()

    assert served["port"] == settings.port
    assert served["app"].state.container.settings is settings
    served["app"].state.container.close_resources()
