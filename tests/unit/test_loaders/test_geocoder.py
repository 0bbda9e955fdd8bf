import pytest
import requests
from unittest.mock import MagicMock, patch

from core.errors import ConfigurationError, UpstreamFailure
from loaders.geocoder import Geocoder, format_display_lines, format_full_address

NOMINATIM_URL = "https://nominatim.test"

MALIOBORO = {
    "road": "Malioboro",
    "suburb": "Gedong Tengen",
    "city_district": "Gondomanan",
    "city": "Yogyakarta",
    "postcode": "55122",
}


@pytest.fixture
def mock_loader():
    sleep = MagicMock()
    with patch('requests.Session') as mock_session:
        loader = Geocoder(NOMINATIM_URL, delay_seconds=1.0, sleep=sleep)
        loader.session = mock_session.return_value
        yield loader


def test_full_address_malioboro():
    assert format_full_address(MALIOBORO) == (
        "Jalan Malioboro, Kelurahan Gedong Tengen, Kecamatan Gondomanan, "
        "Yogyakarta, Daerah Istimewa Yogyakarta, Kode Pos 55122"
    )


def test_display_lines_malioboro():
    assert format_display_lines(MALIOBORO) == [
        "Jalan Malioboro",
        "Kelurahan Gedong Tengen",
        "Kecamatan Gondomanan",
        "Yogyakarta",
        "Daerah Istimewa Yogyakarta - Kode Pos 55122",
    ]


def test_precedence_rules():
    address = {
        "building": "Balai Desa",
        "hamlet": "Kaliurang",
        "village": "Hargobinangun",
        "suburb": "Ignored",
        "county": "Sleman",
        "state": "DI Yogyakarta",
    }

    assert format_full_address(address) == (
        "Balai Desa, Dusun Kaliurang, Desa Hargobinangun, Kabupaten Sleman, DI Yogyakarta"
    )
    # Display prefers the road, then the building; hamlet beats village
    assert format_display_lines(address) == [
        "Balai Desa",
        "Dusun Kaliurang",
        "Kabupaten Sleman",
        "DI Yogyakarta",
    ]


def test_town_prefix():
    assert format_full_address({"town": "Wates"}) == "Kota Wates, Daerah Istimewa Yogyakarta"


def test_resolve_success(mock_loader):
    """Verify reverse geocoding with throttle and Indonesian labels."""
    response = MagicMock()
    response.json.return_value = {"display_name": "Malioboro", "address": MALIOBORO}
    mock_loader.session.get.return_value = response

    details = mock_loader.resolve(-7.7926, 110.3658)

    assert details.full.startswith("Jalan Malioboro")
    assert details.display[-1] == "Daerah Istimewa Yogyakarta - Kode Pos 55122"
    assert details.components["postcode"] == "55122"
    assert details.source == "nominatim"

    mock_loader._sleep.assert_called_once_with(1.0)
    args, kwargs = mock_loader.session.get.call_args
    assert args[0] == "https://nominatim.test/reverse"
    assert kwargs["params"]["accept-language"] == "id"
    assert kwargs["params"]["zoom"] == 16
    assert kwargs["params"]["addressdetails"] == 1


def test_resolve_without_address(mock_loader):
    response = MagicMock()
    response.json.return_value = {"error": "Unable to geocode"}
    mock_loader.session.get.return_value = response

    with pytest.raises(UpstreamFailure) as exc:
        mock_loader.resolve(-7.79, 110.36)
    assert "no address data" in str(exc.value)


def test_resolve_timeout(mock_loader):
    mock_loader.session.get.side_effect = requests.Timeout("slow")

    with pytest.raises(UpstreamFailure):
        mock_loader.resolve(-7.79, 110.36)


def test_missing_url_skips_request():
    sleep = MagicMock()
    geocoder = Geocoder(None, session=MagicMock(), sleep=sleep)

    with pytest.raises(ConfigurationError):
        geocoder.resolve(-7.79, 110.36)

    sleep.assert_not_called()
    geocoder.session.get.assert_not_called()
