from unittest.mock import MagicMock, patch

from scripts import verify_places_setup


def test_missing_key_fails(capsys):
    assert verify_places_setup.verify(None, "123 Main Street", "us", 5.0) is False
    assert "API key not configured" in capsys.readouterr().out


@patch("services.places_provider._session.get")
def test_working_key_reports_sample(mock_get, capsys):
    resp = MagicMock()
    resp.json.return_value = {
        "status": "OK",
        "predictions": [{"description": "123 Main Street, Brooklyn, NY, USA", "place_id": "abc"}],
    }
    mock_get.return_value = resp

    code = verify_places_setup.main(["--api-key", "AIzaSyB1234567890abcdef"])

    out = capsys.readouterr().out
    assert code == 0
    assert "AIzaSyB123..." in out
    assert "1234567890abcdef" not in out
    assert "Sample result: 123 Main Street, Brooklyn, NY, USA" in out


@patch("services.places_provider._session.get")
def test_api_error_reports_status(mock_get, capsys):
    resp = MagicMock()
    resp.json.return_value = {"status": "REQUEST_DENIED", "error_message": "API key invalid"}
    mock_get.return_value = resp

    code = verify_places_setup.main(["--api-key", "bad-key-123456"])

    out = capsys.readouterr().out
    assert code == 1
    assert "REQUEST_DENIED" in out
    assert "API key invalid" in out
