from unittest.mock import MagicMock, call, patch

import pytest
import requests

from http_backoff import fetch_with_backoff


def _resp(status: int) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status
    return mock


@pytest.mark.parametrize("attempts", [1, 2, 5])
def test_all_transport_failures_make_n_attempts_and_return_none(attempts: int) -> None:
    with patch("http_backoff.requests.request",
               side_effect=requests.ConnectionError("down")) as mock_request, \
         patch("http_backoff.time.sleep") as mock_sleep:
        result = fetch_with_backoff("https://example.test", {}, attempts, 1.0)

    assert result is None
    assert mock_request.call_count == attempts
    assert mock_sleep.call_count == attempts - 1


def test_success_on_third_attempt_follows_backoff_series() -> None:
    ok = _resp(200)
    with patch("http_backoff.requests.request",
               side_effect=[requests.Timeout("slow"), _resp(503), ok]) as mock_request, \
         patch("http_backoff.time.sleep") as mock_sleep:
        result = fetch_with_backoff("https://example.test", {}, 5, 0.5)

    assert result is ok
    assert mock_request.call_count == 3
    assert mock_sleep.call_args_list == [call(0.5), call(1.0)]


def test_success_short_circuits_remaining_attempts() -> None:
    ok = _resp(204)
    with patch("http_backoff.requests.request", return_value=ok) as mock_request, \
         patch("http_backoff.time.sleep") as mock_sleep:
        result = fetch_with_backoff("https://example.test", {}, 5, 1.0)

    assert result is ok
    assert mock_request.call_count == 1
    mock_sleep.assert_not_called()


def test_rate_limit_is_retried_then_returned_on_last_attempt() -> None:
    with patch("http_backoff.requests.request", return_value=_resp(429)) as mock_request, \
         patch("http_backoff.time.sleep") as mock_sleep:
        result = fetch_with_backoff("https://example.test", {}, 3, 1.0)

    assert result is not None
    assert result.status_code == 429
    assert mock_request.call_count == 3
    assert mock_sleep.call_args_list == [call(1.0), call(2.0)]


def test_non_transient_status_is_returned_without_retry() -> None:
    with patch("http_backoff.requests.request", return_value=_resp(404)) as mock_request, \
         patch("http_backoff.time.sleep") as mock_sleep:
        result = fetch_with_backoff("https://example.test", {}, 5, 1.0)

    assert result.status_code == 404
    assert mock_request.call_count == 1
    mock_sleep.assert_not_called()


@pytest.mark.parametrize("bad_attempts", [0, -3, None, "many"])
def test_invalid_attempt_count_is_coerced_to_one(bad_attempts) -> None:
    with patch("http_backoff.requests.request",
               side_effect=requests.ConnectionError("down")) as mock_request, \
         patch("http_backoff.time.sleep"):
        assert fetch_with_backoff("https://example.test", {}, bad_attempts, 1.0) is None

    assert mock_request.call_count == 1


def test_tiny_backoff_factor_is_raised_to_minimum() -> None:
    with patch("http_backoff.requests.request", side_effect=[_resp(500), _resp(200)]), \
         patch("http_backoff.time.sleep") as mock_sleep:
        fetch_with_backoff("https://example.test", {}, 2, 0.01)

    mock_sleep.assert_called_once_with(0.1)


def test_zero_backoff_factor_falls_back_to_default() -> None:
    with patch("http_backoff.requests.request", side_effect=[_resp(502), _resp(200)]), \
         patch("http_backoff.time.sleep") as mock_sleep:
        fetch_with_backoff("https://example.test", {}, 2, 0)

    mock_sleep.assert_called_once_with(1.0)


def test_options_are_forwarded_to_requests() -> None:
    with patch("http_backoff.requests.request", return_value=_resp(200)) as mock_request:
        fetch_with_backoff(
            "https://example.test",
            {"method": "get", "headers": {"Accept": "application/json"}},
            1,
            1.0,
        )

    mock_request.assert_called_once_with(
        "GET",
        "https://example.test",
        headers={"Accept": "application/json"},
        timeout=20,
    )
