import pytest
import requests
from unittest.mock import MagicMock, patch

from core.errors import ConfigurationError, UpstreamFailure
from loaders.elevation import ElevationLoader, ElevationResult

API_URL = "https://elevation.test/api/v1/lookup"


@pytest.fixture
def mock_loader():
    with patch('requests.Session') as mock_session:
        loader = ElevationLoader(API_URL)
        loader.session = mock_session.return_value
        yield loader


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


def test_get_elevation_success(mock_loader):
    """Verify successful elevation fetch."""
    mock_loader.session.post.return_value = _response({
        "results": [{"latitude": -7.7956, "longitude": 110.3695, "elevation": 114.6}]
    })

    result = mock_loader.get_elevation(-7.7956, 110.3695)

    assert isinstance(result, ElevationResult)
    assert result.elevation_meters == 114.6
    assert result.data_source == "Open-Elevation API"

    args, kwargs = mock_loader.session.post.call_args
    assert args[0] == API_URL
    assert kwargs["json"] == {"locations": [{"latitude": -7.7956, "longitude": 110.3695}]}
    assert kwargs["timeout"] == 10


def test_missing_url_is_configuration_error():
    """No endpoint means no request at all."""
    with patch('requests.Session') as mock_session:
        loader = ElevationLoader(None)
        loader.session = mock_session.return_value

        with pytest.raises(ConfigurationError) as exc:
            loader.get_elevation(-7.79, 110.36)

    assert exc.value.kind == "configuration"
    loader.session.post.assert_not_called()


def test_timeout_raises_upstream_failure(mock_loader):
    mock_loader.session.post.side_effect = requests.Timeout("slow")

    with pytest.raises(UpstreamFailure) as exc:
        mock_loader.get_elevation(-7.79, 110.36)

    assert "timed out" in str(exc.value)
    assert exc.value.source == "Open-Elevation API"


def test_http_error_raises_upstream_failure(mock_loader):
    response = _response({})
    response.raise_for_status.side_effect = requests.HTTPError("503 Service Unavailable")
    mock_loader.session.post.return_value = response

    with pytest.raises(UpstreamFailure):
        mock_loader.get_elevation(-7.79, 110.36)


def test_empty_results(mock_loader):
    """No substitute elevation when the API returns nothing."""
    mock_loader.session.post.return_value = _response({"results": []})

    with pytest.raises(UpstreamFailure) as exc:
        mock_loader.get_elevation(-7.79, 110.36)
    assert "no elevation data" in str(exc.value)


def test_malformed_result(mock_loader):
    mock_loader.session.post.return_value = _response({"results": [{"latitude": -7.79}]})

    with pytest.raises(UpstreamFailure):
        mock_loader.get_elevation(-7.79, 110.36)
