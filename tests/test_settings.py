import logging

import pytest

from config.settings import DEFAULT_HTTP_TIMEOUT_SECONDS, load_settings, parse_polygon
from src.domain import Point
from src.exceptions import ConfigurationError


@pytest.fixture
def environ():
    return {
        "SNAPSHOT_URL": "http://camera.local/cgi-bin/snapshot.cgi",
        "SNAPSHOT_URL_USERNAME": "admin",
        "SNAPSHOT_URL_PASSWORD": "secret",
        "POLYGON_POINTS": "[[10, 20], [300, 20], [300, 200], [10, 200]]",
        "BRIGHTNESS_THRESHOLD": "180",
        "SNOW_RATIO_THRESHOLD": "0.12",
        "HA_URL": "http://homeassistant.local:8123/",
        "HA_TOKEN": "token-123",
        "HA_ENTITY_ID": "binary_sensor.driveway_snow",
        "CHECK_INTERVAL_MINUTES": "15",
    }


def test_valid_environment_is_loaded(environ):
    settings = load_settings(environ)

    assert settings.snapshot_logging_enabled is False
    assert settings.dry_run is False
    assert settings.polygon.points[0] == Point(10, 20)
    assert len(settings.polygon) == 4
    assert settings.brightness_threshold == 180
    assert settings.snow_ratio_threshold == pytest.approx(0.12)
    assert settings.check_interval_minutes == 15.0
    assert settings.ha_url == "http://homeassistant.local:8123"
    assert settings.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS
    assert settings.log_level == "INFO"


def test_settings_are_immutable(environ):
    settings = load_settings(environ)

    with pytest.raises(AttributeError):
        settings.brightness_threshold = 10


@pytest.mark.parametrize("name", [
    "SNAPSHOT_URL", "SNAPSHOT_URL_USERNAME", "SNAPSHOT_URL_PASSWORD", "POLYGON_POINTS",
    "BRIGHTNESS_THRESHOLD", "SNOW_RATIO_THRESHOLD", "HA_URL", "HA_TOKEN", "HA_ENTITY_ID",
    "CHECK_INTERVAL_MINUTES",
])
def test_missing_required_value_is_rejected(environ, name):
    del environ[name]

    with pytest.raises(ConfigurationError, match=name):
        load_settings(environ)


def test_home_assistant_values_are_optional_in_dry_run(environ):
    environ["DRY_RUN_SKIP_HA_UPDATE"] = "true"
    for name in ("HA_URL", "HA_TOKEN", "HA_ENTITY_ID"):
        del environ[name]

    settings = load_settings(environ)

    assert settings.dry_run is True
    assert settings.ha_url is None


def test_snapshot_dir_is_required_when_logging_enabled(environ):
    environ["SNAPSHOT_LOGGING_ENABLED"] = "true"

    with pytest.raises(ConfigurationError, match="SNAPSHOT_DIR"):
        load_settings(environ)

    environ["SNAPSHOT_DIR"] = "/tmp/snapshots"
    assert load_settings(environ).snapshot_dir == "/tmp/snapshots"


@pytest.mark.parametrize("name,value", [
    ("BRIGHTNESS_THRESHOLD", "abc"),
    ("BRIGHTNESS_THRESHOLD", "256"),
    ("BRIGHTNESS_THRESHOLD", "-1"),
    ("BRIGHTNESS_THRESHOLD", "12.5"),
    ("SNOW_RATIO_THRESHOLD", "1.5"),
    ("SNOW_RATIO_THRESHOLD", "nan"),
    ("SNOW_RATIO_THRESHOLD", "twelve"),
    ("CHECK_INTERVAL_MINUTES", "0"),
    ("CHECK_INTERVAL_MINUTES", "-5"),
    ("HTTP_TIMEOUT_SECONDS", "0"),
    ("SNAPSHOT_URL", "camera.local/snapshot"),
    ("HA_URL", "ftp://homeassistant.local"),
    ("SNAPSHOT_LOGGING_ENABLED", "yes"),
    ("LOG_LEVEL", "VERBOSE"),
])
def test_invalid_value_is_rejected(environ, name, value):
    environ[name] = value

    with pytest.raises(ConfigurationError):
        load_settings(environ)


def test_booleans_are_case_insensitive(environ):
    environ["DRY_RUN_SKIP_HA_UPDATE"] = "TRUE"
    environ["SNAPSHOT_LOGGING_ENABLED"] = "False"

    settings = load_settings(environ)

    assert settings.dry_run is True
    assert settings.snapshot_logging_enabled is False


def test_optional_values_can_be_overridden(environ):
    environ["HTTP_TIMEOUT_SECONDS"] = "2.5"
    environ["LOG_LEVEL"] = "debug"

    settings = load_settings(environ)

    assert settings.http_timeout_seconds == 2.5
    assert settings.log_level == "DEBUG"


class TestParsePolygon:

    def test_order_is_preserved(self):
        polygon = parse_polygon("[[5, 5], [1, 9], [9, 9]]")

        assert polygon.as_pairs() == ((5, 5), (1, 9), (9, 9))

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"x": 1}',
        "[[0, 0], [1, 1]]",
        "[[0, 0], [1, 1], [2]]",
        "[[0, 0], [1, 1], [2.5, 3]]",
        '[[0, 0], [1, 1], ["2", 3]]',
        "[[0, 0], [1, 1], [true, 3]]",
    ])
    def test_malformed_polygon_is_rejected(self, raw):
        with pytest.raises(ConfigurationError):
            parse_polygon(raw)

    def test_self_intersecting_polygon_is_accepted_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            polygon = parse_polygon("[[0, 0], [10, 10], [10, 0], [0, 10]]")

        assert len(polygon) == 4
        assert "no es simple" in caplog.text
