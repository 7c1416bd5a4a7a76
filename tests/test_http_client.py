"""
Tests for the Chef HTTP client
"""

import json

import pytest
import requests
from unittest.mock import Mock, patch

from chefapi_sdk.connection import connect_url
from chefapi_sdk.exceptions import HttpStatusError, TransportError, ValidationError, SigningError
from chefapi_sdk.http_client import ChefClient, response_body, create_client, USER_AGENT
from chefapi_sdk.signing.authorizer import verify_authorization, RequestAuthorizer
from chefapi_sdk.signing.integration import SigningSession, sign_prepared_request
from chefapi_sdk.signing.utils import hash_and_base64

TIMESTAMP = "2024-01-02T15:04:05Z"


def make_response(status_code=200, content=b"{}", reason="OK", url="https://chef.example.com/nodes"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = content
    response.url = url
    return response


class TestChefClient:
    """Test request building and sending"""

    def setup_method(self):
        self.client = None

    def teardown_method(self):
        if self.client is not None:
            self.client.close()

    def make_client(self, rsa_key, url="https://chef.example.com", **kwargs):
        context = connect_url(url, "11.12.0", "tester", rsa_key, **kwargs)
        self.client = ChefClient(context, timeout=12.5, timestamp_generator=lambda: TIMESTAMP)
        return self.client

    def test_url_for(self, rsa_key):
        client = self.make_client(rsa_key, "https://chef.example.com/organizations/acme")
        assert client.url_for("nodes") == "https://chef.example.com/organizations/acme/nodes"
        assert client.url_for("/nodes") == "https://chef.example.com/organizations/acme/nodes"

    def test_get_request_is_signed(self, rsa_key):
        client = self.make_client(rsa_key)
        prepared = client.generate_request("GET", "organizations/acme/nodes")

        assert prepared.method == "GET"
        assert prepared.url == "https://chef.example.com/organizations/acme/nodes"
        assert prepared.body is None
        assert prepared.headers["X-Ops-Timestamp"] == TIMESTAMP
        assert prepared.headers["X-Ops-UserId"] == "tester"
        assert prepared.headers["Accept"] == "application/json"
        assert prepared.headers["X-Chef-Version"] == "11.12.0"
        assert prepared.headers["User-Agent"] == USER_AGENT
        assert verify_authorization(rsa_key, prepared.headers, "GET", "/organizations/acme/nodes")

    def test_get_params_go_to_query_string(self, rsa_key):
        client = self.make_client(rsa_key)
        prepared = client.generate_request("GET", "organizations/acme/search/node", {"q": "role:web"})

        assert prepared.url == "https://chef.example.com/organizations/acme/search/node?q=role%3Aweb"
        assert prepared.body is None
        # The query string is not part of the signed path
        assert verify_authorization(rsa_key, prepared.headers, "GET", "/organizations/acme/search/node")

    def test_post_params_are_sorted_form_body(self, rsa_key):
        client = self.make_client(rsa_key)
        prepared = client.generate_request("POST", "clients", {"name": "web1", "admin": "false"})

        assert prepared.body == "admin=false&name=web1"
        assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert prepared.headers["X-Ops-Content-Hash"] == hash_and_base64("admin=false&name=web1")
        assert verify_authorization(rsa_key, prepared.headers, "POST", "/clients", "admin=false&name=web1")

    def test_json_body(self, rsa_key):
        client = self.make_client(rsa_key)
        prepared = client.generate_request("PUT", "nodes/web1", json_body={"name": "web1"})

        assert json.loads(prepared.body) == {"name": "web1"}
        assert prepared.headers["Content-Type"] == "application/json"
        assert prepared.headers["X-Ops-Content-Hash"] == hash_and_base64(prepared.body)

    def test_delete_without_params(self, rsa_key):
        client = self.make_client(rsa_key)
        prepared = client.generate_request("delete", "nodes/web1")
        assert prepared.method == "DELETE"
        assert prepared.headers["X-Ops-Content-Hash"] == "2jmj7l5rSw0yVb/vlWAYkK/YBwk="

    def test_do_sends_with_verify_and_timeout(self, rsa_key):
        client = self.make_client(rsa_key)
        with patch.object(client.session.session, "send", return_value=make_response()) as send:
            response = client.get("nodes")

        assert response.status_code == 200
        args, kwargs = send.call_args
        assert args[0].headers["X-Ops-UserId"] == "tester"
        assert kwargs["verify"] is True
        assert kwargs["timeout"] == 12.5

    def test_tls_skip_verify(self, rsa_key):
        client = self.make_client(rsa_key, tls_skip_verify=True)
        with patch.object(client.session.session, "send", return_value=make_response()) as send:
            client.get("nodes")
        assert send.call_args[1]["verify"] is False

    @pytest.mark.parametrize("method,args", [
        ("get_with_params", ("search/node", {"q": "*:*"})),
        ("post", ("nodes",)),
        ("put", ("nodes/web1",)),
        ("delete", ("nodes/web1",)),
    ])
    def test_convenience_methods(self, rsa_key, method, args):
        client = self.make_client(rsa_key)
        with patch.object(client.session.session, "send", return_value=make_response()) as send:
            getattr(client, method)(*args)
        assert send.call_args[0][0].method == method.split("_")[0].upper()

    def test_connection_error(self, rsa_key):
        client = self.make_client(rsa_key)
        error = requests.exceptions.ConnectionError("refused")
        with patch.object(client.session.session, "send", side_effect=error):
            with pytest.raises(TransportError) as exc_info:
                client.get("nodes")

        assert exc_info.value.error_code == "CONNECTION_ERROR"
        assert exc_info.value.__cause__ is error

    def test_timeout(self, rsa_key):
        client = self.make_client(rsa_key)
        with patch.object(client.session.session, "send", side_effect=requests.exceptions.ReadTimeout()):
            with pytest.raises(TransportError) as exc_info:
                client.get("nodes")
        assert exc_info.value.error_code == "TIMEOUT"

    def test_signing_error_is_not_sent(self, multi_prime_key):
        client = self.make_client(multi_prime_key)
        with patch.object(client.session.session, "send") as send:
            with pytest.raises(SigningError):
                client.get("nodes")
        send.assert_not_called()

    def test_invalid_timeout(self, rsa_key):
        context = connect_url("https://chef.example.com", "11.12.0", "tester", rsa_key)
        with pytest.raises(ValidationError):
            ChefClient(context, timeout=0)

    def test_context_manager_closes_session(self, rsa_key):
        context = connect_url("https://chef.example.com", "11.12.0", "tester", rsa_key)
        session = Mock(spec=requests.Session)
        session.headers = {}
        with ChefClient(context, session=session):
            pass
        session.close.assert_called_once()


class TestResponseBody:
    """Test response status handling"""

    def test_success(self):
        assert response_body(make_response(200, b'{"name":"web1"}')) == b'{"name":"web1"}'
        assert response_body(make_response(201, b'{}', "Created")) == b'{}'

    def test_not_found(self):
        with pytest.raises(HttpStatusError) as exc_info:
            response_body(make_response(404, b'{"error":["not found"]}', "Not Found"))

        assert exc_info.value.http_status == 404
        assert exc_info.value.status_text == "404 Not Found"
        assert "404 Not Found" in str(exc_info.value)

    def test_server_error(self):
        with pytest.raises(HttpStatusError):
            response_body(make_response(500, b"", "Internal Server Error"))


class TestSignPreparedRequest:
    """Test signing requests built outside the client"""

    def test_signs_path_without_query(self, rsa_key):
        authorizer = RequestAuthorizer(rsa_key, "tester", "11.12.0")
        prepared = requests.Request("GET", "https://chef.example.com/nodes?x=1").prepare()
        sign_prepared_request(prepared, authorizer, TIMESTAMP)
        assert verify_authorization(rsa_key, prepared.headers, "GET", "/nodes")

    def test_root_path(self, rsa_key):
        authorizer = RequestAuthorizer(rsa_key, "tester", "11.12.0")
        prepared = requests.Request("GET", "https://chef.example.com").prepare()
        sign_prepared_request(prepared, authorizer, TIMESTAMP)
        assert verify_authorization(rsa_key, prepared.headers, "GET", "/")

    def test_streaming_body_rejected(self, rsa_key):
        authorizer = RequestAuthorizer(rsa_key, "tester", "11.12.0")
        prepared = requests.Request("POST", "https://chef.example.com/nodes").prepare()
        prepared.body = iter([b"chunk"])
        with pytest.raises(SigningError):
            sign_prepared_request(prepared, authorizer)

    def test_signing_session_request(self, rsa_key):
        authorizer = RequestAuthorizer(rsa_key, "tester", "11.12.0")
        with SigningSession(authorizer, verify=False, timeout=5) as session:
            with patch.object(session.session, "send", return_value=make_response()) as send:
                session.post("https://chef.example.com/nodes", data='{"name":"web1"}', timeout=1)

        prepared = send.call_args[0][0]
        assert send.call_args[1] == {"verify": False, "timeout": 1}
        assert verify_authorization(rsa_key, prepared.headers, "POST", "/nodes", '{"name":"web1"}')


def test_create_client(rsa_key):
    client = create_client("https://chef.example.com:8443", "tester", rsa_key, tls_skip_verify=True, timeout=5)
    try:
        assert client.context.port == "8443"
        assert client.session.verify is False
        assert client.timeout == 5
    finally:
        client.close()
