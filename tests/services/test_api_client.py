# -*- coding: utf-8 -*-
"""
Tests for ProbationerApiClient with a mocked requests session.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from services.api_client import (
    ApiConfig, ProbationerApiClient, get_api_client, reset_api_client, unwrap_data, unwrap_list
)
from services.exceptions import NetworkException, NotFoundException, ServerValidationException


def _response(status=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status
    response.reason = "Error"
    if body is None and text is None:
        response.text = ""
    else:
        response.text = text if text is not None else "json"
    response.json.return_value = body
    if body is None and text is not None:
        response.json.side_effect = ValueError("not json")
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def client():
    client = ProbationerApiClient(ApiConfig(base_url="https://api.test/", token="t0k", timeout=5, verify_ssl=True))
    client.session = MagicMock()
    return client


class TestEnvelopes:
    """Response unwrapping."""

    def test_unwrap_data(self):
        assert unwrap_data({"data": {"data": {"id": 1}}}) == {"id": 1}
        assert unwrap_data({"data": {"id": 1}}) == {"id": 1}
        assert unwrap_data({"id": 1}) == {"id": 1}

    def test_unwrap_list(self):
        assert unwrap_list([1]) == [1]
        assert unwrap_list({"data": [2]}) == [2]
        assert unwrap_list({"data": {"data": [3]}}) == [3]
        assert unwrap_list({"message": "none"}) == []


class TestRequests:
    """Transport and error translation."""

    def test_step1_posts_multipart(self, client, make_file):
        path = make_file("me.png")
        client.session.request.return_value = _response(body={"data": {"id": 7}})

        result = client.create_step1([("surname", "Doe")], [("pro_pic", path, "me.png", "image/png")])

        assert result == {"data": {"id": 7}}
        kwargs = client.session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://api.test/api/probationer/step1"
        assert kwargs["data"] == [("surname", "Doe")]
        field, (name, _handle, mime) = kwargs["files"][0]
        assert (field, name, mime) == ("pro_pic", "me.png", "image/png")
        assert kwargs["headers"]["Authorization"] == "Bearer t0k"

    def test_json_stage(self, client):
        client.session.request.return_value = _response(body={"message": "ok"})

        client.submit_step(3, "A1", json_data={"results": []})

        kwargs = client.session.request.call_args.kwargs
        assert kwargs["url"] == "https://api.test/api/probationer/A1/step3"
        assert kwargs["json"] == {"results": []}
        assert kwargs["files"] is None

    def test_external_token(self, client):
        client.session.request.return_value = _response(body={"message": "ok"})

        client.set_access_token(None)
        client.finalize_step8("A1")
        assert "Authorization" not in client.session.request.call_args.kwargs["headers"]

        client.set_access_token("fresh")
        client.finalize_step8("A1")
        assert client.session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer fresh"

    def test_submit_step_rejects_other_stages(self, client):
        with pytest.raises(ValueError):
            client.submit_step(8, "A1", json_data={})

    def test_404_is_not_found(self, client):
        client.session.request.return_value = _response(404, body={"message": "No such application"})
        with pytest.raises(NotFoundException) as exc:
            client.finalize_step8("A1")
        assert exc.value.status_code == 404
        assert exc.value.message == "No such application"

    def test_422_is_server_validation(self, client):
        client.session.request.return_value = _response(422, body={"error": "Email taken"})
        with pytest.raises(ServerValidationException) as exc:
            client.submit_step(2, "A1", form_data=[])
        assert exc.value.message == "Email taken"
        assert exc.value.response_data == {"error": "Email taken"}

    def test_connection_error_is_network(self, client):
        client.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NetworkException):
            client.search_members("123")

    def test_non_json_body(self, client):
        client.session.request.return_value = _response(text="OK")
        assert client.finalize_step8("A1") == {}


class TestApplicationFetch:
    """Record lookup across endpoints."""

    def test_falls_back_to_applications_endpoint(self, client):
        client.session.request.side_effect = [
            _response(404, body={"message": "nope"}),
            _response(body={"data": {"id": "A1", "completion_step": 2}}),
        ]

        record = client.get_application("A1")

        assert record == {"id": "A1", "completion_step": 2}
        urls = [c.kwargs["url"] for c in client.session.request.call_args_list]
        assert urls == [
            "https://api.test/api/probationer/A1",
            "https://api.test/api/probationer/applications/A1",
        ]

    def test_not_found_everywhere(self, client):
        client.session.request.side_effect = [
            _response(404, body={"message": "nope"}),
            _response(404, body={"message": "still nope"}),
        ]
        with pytest.raises(NotFoundException):
            client.get_application("A1")

    def test_server_error_falls_through_to_next_endpoint(self, client):
        client.session.request.side_effect = [
            _response(500, body={"message": "boom"}),
            _response(body={"data": {"id": "A1", "surname": "Doe"}}),
        ]

        assert client.get_application("A1") == {"id": "A1", "surname": "Doe"}
        assert client.session.request.call_count == 2

    def test_server_error_wins_over_not_found(self, client):
        client.session.request.side_effect = [
            _response(500, body={"message": "boom"}),
            _response(404, body={"message": "nope"}),
        ]
        with pytest.raises(ServerValidationException) as exc:
            client.get_application("A1")
        assert exc.value.status_code == 500

    def test_empty_records_are_not_not_found(self, client):
        client.session.request.side_effect = [
            _response(body={}),
            _response(body={"data": None}),
        ]
        assert client.get_application("A1") == {}

    def test_member_search_url(self, client):
        client.session.request.return_value = _response(body={"data": [{"id": 1}]})
        assert client.search_members("1234") == [{"id": 1}]
        assert client.session.request.call_args.kwargs["url"] == "https://api.test/api/members/search/M-1234"


class TestSingleton:
    """Shared client lifecycle."""

    def test_shared_instance(self):
        reset_api_client()
        try:
            with patch("services.api_client.requests.Session"):
                first = get_api_client(ApiConfig(base_url="https://api.test"))
                assert get_api_client() is first
        finally:
            reset_api_client()
