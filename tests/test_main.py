from unittest.mock import MagicMock

import pytest

import main
from src.exceptions import ConfigurationError


def test_invalid_configuration_prevents_startup(monkeypatch):
    worker_cls = MagicMock()
    monkeypatch.setattr(main, "Worker", worker_cls)

    def broken_settings():
        raise ConfigurationError("La variable de entorno 'SNAPSHOT_URL' no está definida.")

    monkeypatch.setattr(main, "load_settings", broken_settings)

    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
    worker_cls.assert_not_called()


def test_worker_is_started_with_configured_interval(monkeypatch, make_settings, tmp_path):
    settings = make_settings(
        snapshot_logging_enabled=True,
        snapshot_dir=str(tmp_path / "snapshots"),
        check_interval_minutes=15.0
    )
    worker_cls = MagicMock()
    monkeypatch.setattr(main, "Worker", worker_cls)
    monkeypatch.setattr(main, "load_settings", lambda: settings)
    monkeypatch.setattr(main.signal, "signal", MagicMock())

    main.main()

    assert worker_cls.call_args.kwargs["interval_minutes"] == 15.0
    worker_cls.return_value.start.assert_called_once_with()
    assert (tmp_path / "snapshots").is_dir()


def test_keyboard_interrupt_stops_worker(monkeypatch, make_settings):
    worker_cls = MagicMock()
    worker_cls.return_value.start.side_effect = KeyboardInterrupt
    monkeypatch.setattr(main, "Worker", worker_cls)
    monkeypatch.setattr(main, "load_settings", lambda: make_settings())
    monkeypatch.setattr(main.signal, "signal", MagicMock())

    main.main()

    worker_cls.return_value.stop.assert_called_once_with()
