"""
Tests for PlanningCenterClient and Query: terminal operations, result
handling and error introspection. HTTP is replaced by MagicMock on the
session, no network access.

Run with: pytest tests/pco_api/test_client.py -v
"""

import json

import pytest
import requests
from unittest.mock import MagicMock

from pco_api import (
    APIClientTimeout,
    ClientHTTPError,
    MissingTableError,
    PagedResult,
    PlanningCenterClient,
    PlanningCenterConfig,
    PlanningCenterConfigError,
    Query,
    ServerHTTPError,
    UnknownModuleError,
)
from pco_api.config import basic_auth_header

PEOPLE = "https://api.planningcenteronline.com/people/v2"
ERRORS = {"errors": [{"status": "422", "title": "Unprocessable Entity"}]}


@pytest.fixture
def client(pco_env):
    c = PlanningCenterClient()
    c.session.request = MagicMock()
    return c


def requested(client):
    """(verb, url) of every request sent so far."""
    return [c.args[:2] for c in client.session.request.call_args_list]


# ------------------------------
# Construction
# ------------------------------


@pytest.mark.unit
def test_credentials_from_env_become_basic_auth_header(pco_env):
    client = PlanningCenterClient()

    assert client.session.headers["Authorization"] == basic_auth_header("app-id", "secret")
    assert client.timeout == 15.0


@pytest.mark.unit
def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("PCO_APPLICATION_ID", raising=False)
    monkeypatch.delenv("PCO_SECRET", raising=False)

    with pytest.raises(PlanningCenterConfigError):
        PlanningCenterClient()


@pytest.mark.unit
def test_explicit_config_wins_over_env(monkeypatch):
    monkeypatch.delenv("PCO_APPLICATION_ID", raising=False)
    config = PlanningCenterConfig(
        application_id="a", secret="b", api_host="http://localhost:8000", timeout_sec=3
    )

    client = PlanningCenterClient(config)

    assert client.people().table("people").build_url() == "http://localhost:8000/people/v2/people"
    assert client.timeout == 3


@pytest.mark.unit
def test_module_selection(client):
    assert isinstance(client.module("people"), Query)
    assert client.services().table("plans").build_url().endswith("/services/v2/plans")

    with pytest.raises(UnknownModuleError):
        client.module("check-ins-typo")


# ------------------------------
# get / first
# ------------------------------


@pytest.mark.unit
def test_get_pages_through_results(client, fake_response, make_page):
    client.session.request.side_effect = [
        fake_response(200, make_page(0, 100)),
        fake_response(200, make_page(100, 100)),
        fake_response(200, make_page(200, 37)),
    ]

    result = client.people().table("people").get()

    assert result.ok
    assert isinstance(result.value, PagedResult)
    assert len(result.value) == 237
    assert [url for _, url in requested(client)] == [
        f"{PEOPLE}/people?per_page=100&offset=0",
        f"{PEOPLE}/people?per_page=100&offset=100",
        f"{PEOPLE}/people?per_page=100&offset=200",
    ]
    assert client.error_message() is None


@pytest.mark.unit
def test_first_returns_one_record(client, fake_response, make_page):
    client.session.request.return_value = fake_response(200, make_page(0, 1))

    result = client.people().table("people").where("email", "=", "x@y.com").first()

    assert result.ok
    assert result.value == {"type": "Person", "id": "0"}
    assert requested(client) == [
        ("GET", f"{PEOPLE}/people?where[email]=x@y.com&per_page=1&offset=0")
    ]


@pytest.mark.unit
def test_first_with_no_match_is_none(client, fake_response):
    client.session.request.return_value = fake_response(200, {"data": [], "included": []})

    result = client.people().table("people").first()

    assert result.ok
    assert result.value is None


@pytest.mark.unit
def test_get_failure_returns_error_result(client, fake_response, make_page):
    client.session.request.side_effect = [
        fake_response(200, make_page(0, 100)),
        fake_response(500, {"errors": [{"status": "500"}]}),
    ]

    result = client.people().table("people").get()

    assert not result.ok
    assert not result
    assert result.value is None
    assert isinstance(result.error, ServerHTTPError)
    assert client.error_message() == {"errors": [{"status": "500"}]}


@pytest.mark.unit
def test_timeout_is_reported_not_raised(client):
    client.session.request.side_effect = requests.Timeout("slow")

    result = client.people().table("people").get()

    assert isinstance(result.error, APIClientTimeout)
    with pytest.raises(APIClientTimeout):
        result.unwrap()


@pytest.mark.unit
def test_error_is_cleared_by_next_operation(client, fake_response, make_page):
    client.session.request.side_effect = [
        fake_response(404, {"errors": [{"status": "404"}]}),
        fake_response(200, make_page(0, 2)),
    ]

    assert not client.people().table("nope").get().ok
    assert client.error_message() is not None

    assert client.people().table("people").get().ok
    assert client.error_message() is None


@pytest.mark.unit
@pytest.mark.parametrize("terminal", ["get", "first", "post", "put", "patch", "delete", "build_url"])
def test_terminal_without_table_raises(client, terminal):
    with pytest.raises(MissingTableError):
        getattr(client.people(), terminal)()

    client.session.request.assert_not_called()


@pytest.mark.unit
def test_query_is_reusable_after_execution(client, fake_response, make_page):
    client.session.request.side_effect = [
        fake_response(200, make_page(0, 3)),
        fake_response(200, make_page(0, 3)),
    ]
    query = client.people().table("people").order("last_name")

    query.get()
    query.id(5).get()

    assert [url for _, url in requested(client)] == [
        f"{PEOPLE}/people?order=last_name&per_page=100&offset=0",
        f"{PEOPLE}/people/5?order=last_name&per_page=100&offset=0",
    ]
    with pytest.raises(MissingTableError):
        client.people().get()


# ------------------------------
# Writes
# ------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("verb", ["post", "put", "patch"])
def test_write_sends_encoded_body(client, fake_response, verb):
    payload = {"data": {"attributes": {"address": "x@y.com"}}}
    client.session.request.return_value = fake_response(200, {"data": {"id": "88"}})

    query = client.people().table("people").id(1).association("emails").data(payload)
    result = getattr(query, verb)()

    assert result.ok
    assert result.value == {"data": {"id": "88"}}
    args, kwargs = client.session.request.call_args
    assert args == (verb.upper(), f"{PEOPLE}/people/1/emails")
    assert json.loads(kwargs["data"]) == payload


@pytest.mark.unit
def test_write_error_body_is_decoded(client, fake_response):
    client.session.request.return_value = fake_response(422, ERRORS)

    result = client.people().table("people").data({"data": {}}).post()

    assert isinstance(result.error, ClientHTTPError)
    assert result.error_body == ERRORS
    assert client.error_message() == ERRORS


@pytest.mark.unit
def test_unattributable_failure_is_reported(client):
    client.session.request.side_effect = requests.RequestException()

    result = client.people().table("people").data({}).patch()

    assert not result.ok
    assert client.error_message() == result.error_body
    assert str(result.error).startswith("Request failed")


@pytest.mark.unit
def test_delete_with_empty_response(client, fake_response):
    client.session.request.return_value = fake_response(204)

    result = client.people().table("people").id(3).delete()

    assert result.ok
    assert result.value == {}
    assert requested(client) == [("DELETE", f"{PEOPLE}/people/3")]


# ------------------------------
# Passthrough
# ------------------------------


@pytest.mark.unit
def test_raw_returns_whole_document(client, fake_response, make_page):
    page = make_page(0, 2)
    client.session.request.return_value = fake_response(200, page)
    url = f"{PEOPLE}/people?per_page=2"

    result = client.raw(url)

    assert result.value == page
    assert requested(client) == [("GET", url)]


@pytest.mark.unit
def test_url_unwraps_data(client, fake_response, make_page):
    client.session.request.return_value = fake_response(200, make_page(0, 2))

    result = client.url(f"{PEOPLE}/people")

    assert result.value == [{"type": "Person", "id": "0"}, {"type": "Person", "id": "1"}]


@pytest.mark.unit
def test_url_failure(client, fake_response):
    client.session.request.return_value = fake_response(401, {"errors": [{"status": "401"}]})

    result = client.url(f"{PEOPLE}/people")

    assert isinstance(result.error, ClientHTTPError)
    assert client.error_message() == {"errors": [{"status": "401"}]}


@pytest.mark.unit
def test_precondition_failure_clears_previous_error(client, fake_response):
    client.session.request.return_value = fake_response(404, {"errors": [{"status": "404"}]})
    assert not client.people().table("nope").get().ok
    assert client.error_message() is not None

    with pytest.raises(MissingTableError):
        client.people().get()
    assert client.error_message() is None

    client.people().table("nope").get()
    with pytest.raises(MissingTableError):
        client.people().data({}).post()
    assert client.error_message() is None
