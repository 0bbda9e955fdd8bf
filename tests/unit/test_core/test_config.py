from core.config import DEFAULT_BOUNDS, BoundingBox, Settings
from core.errors import EnvironmentalDataError, GeocodingError, UpstreamFailure, ValidationError


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})

    assert settings.bounds == DEFAULT_BOUNDS
    assert settings.cache_ttl_seconds == 1800
    assert settings.cache_enabled is True
    assert settings.geocoder_delay_seconds == 1.0
    assert settings.elevation_api_url is None
    assert settings.openweather_url == "https://api.openweathermap.org/data/2.5"
    assert not any(settings.api_status().values())


def test_environment_overrides():
    settings = Settings.from_env({
        "ELEVATION_API_URL": "https://elevation.test/lookup",
        "OVERPASS_URL": "https://overpass.test/api/interpreter",
        "NOMINATIM_URL": "https://nominatim.test",
        "OPENWEATHER_API_KEY": "secret",
        "GEONAMES_USERNAME": "demo",
        "DIY_SOUTHWEST_LAT": "-8.5",
        "CACHE_TTL_SECONDS": "60",
        "ENABLE_CACHE": "false",
        "LOG_LEVEL": "debug",
    })

    assert all(settings.api_status().values())
    assert settings.bounds.min_latitude == -8.5
    assert settings.bounds.max_longitude == 110.85
    assert settings.cache_ttl_seconds == 60
    assert settings.cache_enabled is False
    assert settings.log_level == "DEBUG"


def test_bad_number_keeps_default():
    settings = Settings.from_env({"CACHE_TTL_SECONDS": "half an hour", "NOMINATIM_URL": "   "})
    assert settings.cache_ttl_seconds == 1800
    assert settings.nominatim_url is None


def test_to_dict_hides_credentials():
    data = Settings(openweather_api_key="secret", geonames_username="demo").to_dict()
    assert "openweather_api_key" not in data
    assert "geonames_username" not in data
    assert data["bounds"] == {"south_west": [-8.35, 109.95], "north_east": [-7.35, 110.85]}


def test_bounds_include_edges():
    box = BoundingBox(-8.35, 109.95, -7.35, 110.85)
    assert box.contains(-8.35, 109.95)
    assert box.contains(-7.35, 110.85)
    assert not box.contains(-7.34, 110.0)
    assert box.describe() == "Valid area: latitude -8.35 to -7.35, longitude 109.95 to 110.85"


def test_validation_error_payload():
    plain = ValidationError("Latitude and longitude are required", constraint="required")
    assert plain.to_dict() == {"error": "Latitude and longitude are required", "constraint": "required"}

    bounded = ValidationError("Outside", "bounds", details="Valid area", valid_bounds={"a": 1})
    assert bounded.to_dict()["valid_bounds"] == {"a": 1}
    assert bounded.to_dict()["details"] == "Valid area"


def test_stage_errors_name_their_source():
    cause = UpstreamFailure("OpenWeather API", "timed out after 8s")

    env = EnvironmentalDataError(cause)
    geo = GeocodingError(RuntimeError("boom"))

    assert str(env) == "Environmental data failed: OpenWeather API: timed out after 8s"
    assert env.source == "OpenWeather API"
    assert geo.source is None
    assert str(geo) == "Geocoding failed: boom"
