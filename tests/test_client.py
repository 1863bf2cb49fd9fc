import pytest

from insee_sirene.client import InseeClient
from insee_sirene.config import InseeSettings
from insee_sirene.errors import DecodeFailure, HttpStatusFailure
from insee_sirene.token_store import CACHE_KEY, InMemoryTokenStore

from conftest import make_response, token_response

RECORD = {"header": {"statut": 200}, "uniteLegale": {"siren": "123456789"}}


def test_cold_cache_end_to_end(client, session):
    session.request.side_effect = [token_response("issued-tok"), make_response(200, RECORD)]

    assert client.siren("123 456 789") == RECORD

    assert session.request.call_count == 2
    token_call, lookup_call = session.request.call_args_list
    assert token_call.args == ("POST", "https://api.insee.fr/token")
    assert lookup_call.args == ("GET", "https://api.insee.fr/entreprises/sirene/siren/123456789")
    headers = lookup_call.kwargs["headers"]
    assert headers["Authorization"] == "Bearer issued-tok"
    assert headers["Content-Type"] == "application/json; charset=utf-8"


def test_warm_cache_skips_token_request(client, store, session):
    store.put(CACHE_KEY, "cached-tok", 3600)
    session.request.return_value = make_response(200, RECORD)

    client.siret(" 123 456 789 00012 ")

    session.request.assert_called_once()
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.insee.fr/entreprises/sirene/siret/12345678900012")
    assert kwargs["headers"]["Authorization"] == "Bearer cached-tok"


def test_token_reused_across_lookups(client, session):
    session.request.side_effect = [
        token_response("t1"),
        make_response(200, RECORD),
        make_response(200, RECORD),
    ]
    client.siren("123456789")
    client.siret("12345678900012")
    methods = [c.args[0] for c in session.request.call_args_list]
    assert methods == ["POST", "GET", "GET"]


def test_expired_token_is_reissued(client, clock, session):
    session.request.side_effect = [
        token_response("t1", 100),
        make_response(200, RECORD),
        token_response("t2", 100),
        make_response(200, RECORD),
    ]
    client.siren("123456789")
    clock.advance(100)
    client.siren("123456789")
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer t2"


def test_version_segment_in_path(store, session, sleeps):
    settings = InseeSettings(consumer_key="k", consumer_secret="s", sirene_api_version="v3")
    store.put(CACHE_KEY, "tok", 60)
    session.request.return_value = make_response(200, RECORD)
    client = InseeClient(settings=settings, store=store, session=session, sleep=sleeps.append)

    client.siren("123456789")

    assert session.request.call_args.args[1] == "https://api.insee.fr/entreprises/sirene/V3/siren/123456789"


def test_additional_data_in_query_string(client, store, session):
    store.put(CACHE_KEY, "tok", 60)
    session.request.return_value = make_response(200, RECORD)
    client.additional_data = {"date": "2024-01-01", "champs": "siren,denominationUniteLegale"}

    client.siren("123456789")

    assert session.request.call_args.args[1] == (
        "https://api.insee.fr/entreprises/sirene/siren/123456789"
        "?date=2024-01-01&champs=siren%2CdenominationUniteLegale"
    )


def test_lookup_5xx_retried_with_client_settings(client, store, session, sleeps):
    store.put(CACHE_KEY, "tok", 60)
    client.max_retries = 1
    client.retry_delay = 250
    session.request.return_value = make_response(500)

    with pytest.raises(HttpStatusFailure):
        client.siren("123456789")

    assert session.request.call_count == 2
    assert sleeps == [0.25]


def test_lookup_404_not_retried(client, store, session, sleeps):
    store.put(CACHE_KEY, "tok", 60)
    session.request.return_value = make_response(404)
    with pytest.raises(HttpStatusFailure) as excinfo:
        client.siret("00000000000000")
    assert excinfo.value.status_code == 404
    assert session.request.call_count == 1


def test_invalid_json_raises_decode_failure(client, store, session):
    store.put(CACHE_KEY, "tok", 60)
    session.request.return_value = make_response(200, text="not json")
    with pytest.raises(DecodeFailure):
        client.siren("123456789")


def test_blank_identifier_rejected_before_network(client, session):
    with pytest.raises(ValueError):
        client.siren("   ")
    session.request.assert_not_called()


def test_access_token_forces_issuance(client, store, session):
    store.put(CACHE_KEY, "old", 60)
    session.request.return_value = token_response("new")
    assert client.access_token() == "new"
    assert store.get(CACHE_KEY) == "new"


def test_defaults(client):
    assert client.max_retries == 2
    assert client.retry_delay == 500
    assert client.additional_data == {}
    assert client.transport.timeout is None


def test_context_manager_closes_session(client, session):
    with client:
        pass
    session.close.assert_called_once_with()


def test_separate_stores_keep_tokens_apart(settings, session, sleeps):
    mirror = InseeSettings(consumer_key="k", consumer_secret="s", api_url="https://mirror.example")
    prod = InseeClient(settings=settings, store=InMemoryTokenStore(), session=session, sleep=sleeps.append)
    test = InseeClient(settings=mirror, store=InMemoryTokenStore(), session=session, sleep=sleeps.append)
    session.request.side_effect = [
        token_response("prod-tok"),
        make_response(200, RECORD),
        token_response("mirror-tok"),
        make_response(200, RECORD),
    ]

    prod.siren("123456789")
    test.siren("123456789")

    last = session.request.call_args
    assert last.args[1] == "https://mirror.example/entreprises/sirene/siren/123456789"
    assert last.kwargs["headers"]["Authorization"] == "Bearer mirror-tok"
