import httpx
import pytest
from fastapi.testclient import TestClient

from controller.controller_dependencies import get_proxy_service, rate_limiter
from main import app
from service.proxy_service import ProxyService
from util.constants import InternalURIs
from util.errors import BackendTransportError

from conftest import ANALYSIS_HIT, ScriptedProvider


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def client(make_analyzer, provider):
    # No `with` block: the lifespan (real Redis, limiter init) is skipped.
    app.state.analyzer = make_analyzer(provider)
    app.dependency_overrides[rate_limiter] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client):
    r = client.post(InternalURIs.ADMIN_LOGIN, json={"passcode": "332"})
    assert r.status_code == 200
    return r


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_initial_state(client):
    body = client.get(InternalURIs.STATE).json()

    assert body["searchMode"] == "compliance"
    assert body["viewMode"] == "user"
    assert body["isAdminAuthenticated"] is False
    assert body["provider"] == "gemini"
    assert body["isSystemReady"] is False
    assert body["entries"] == []
    assert body["history"] == []


class TestAdminGate:
    def test_wrong_passcode(self, client):
        r = client.post(InternalURIs.ADMIN_LOGIN, json={"passcode": "123"})

        assert r.status_code == 401
        assert r.json()["detail"] == "Incorrect Password"
        assert client.get(InternalURIs.STATE).json()["isAdminAuthenticated"] is False

    def test_mutations_require_admin(self, client):
        r = client.post(
            InternalURIs.ENTRIES,
            json={"code": "7604.10", "category": "Bars", "description": "Rule"},
        )
        assert r.status_code == 403

        r = client.post(InternalURIs.DOCUMENT_TEXT, json={"content": "Heading 7604"})
        assert r.status_code == 403

    def test_lock(self, client):
        login(client)
        client.put(InternalURIs.VIEW_MODE, json={"mode": "admin"})

        body = client.post(InternalURIs.ADMIN_LOCK).json()

        assert body["isAdminAuthenticated"] is False
        assert body["viewMode"] == "user"

    def test_listing_entries_is_public(self, client):
        assert client.get(InternalURIs.ENTRIES).json() == []


class TestEntries:
    def test_crud(self, client):
        login(client)
        r = client.post(
            InternalURIs.ENTRIES,
            json={
                "code": "7604.10",
                "category": "Aluminum Bars",
                "description": "Bars and rods",
                "metalType": "Aluminum",
            },
        )
        assert r.status_code == 201
        entry = r.json()

        r = client.put(
            InternalURIs.ENTRY.format(entry_id=entry["id"]),
            json={"code": "7604.10-7604.29", "category": "Aluminum Bars", "description": "Bars"},
        )
        assert r.status_code == 200
        assert r.json()["code"] == "7604.10-7604.29"

        r = client.delete(InternalURIs.ENTRY.format(entry_id=entry["id"]))
        assert r.status_code == 204
        assert client.get(InternalURIs.ENTRIES).json() == []

    def test_invalid_fields(self, client):
        login(client)

        r = client.post(InternalURIs.ENTRIES, json={"code": "abc"})

        assert r.status_code == 422
        detail = r.json()["detail"]
        assert detail["error"] == "validation_error"
        assert set(detail["fields"]) == {"code", "category", "description"}

    def test_unknown_metal_type(self, client):
        login(client)

        r = client.post(
            InternalURIs.ENTRIES,
            json={"code": "7604.10", "category": "Bars", "description": "Rule", "metalType": "Unknown"},
        )

        assert r.status_code == 422
        assert set(r.json()["detail"]["fields"]) == {"metalType"}
        assert client.get(InternalURIs.ENTRIES).json() == []

    def test_unknown_entry(self, client):
        login(client)

        r = client.delete(InternalURIs.ENTRY.format(entry_id="nope"))

        assert r.status_code == 404


class TestDocument:
    def test_paste_and_clear(self, client):
        login(client)

        body = client.post(
            InternalURIs.DOCUMENT_TEXT, json={"content": "Heading 7604", "name": "Annex I"}
        ).json()
        assert body["context"]["kind"] == "text"
        assert body["context"]["name"] == "Annex I"
        assert body["isLookupReady"] is True

        body = client.delete(InternalURIs.DOCUMENT).json()
        assert body["context"] is None

    def test_upload(self, client):
        login(client)

        r = client.post(
            InternalURIs.DOCUMENT_UPLOAD,
            files={"file": ("annex.pdf", b"%PDF-1.4 annex", "application/pdf")},
        )

        assert r.status_code == 201
        context = r.json()["context"]
        assert context["kind"] == "file"
        assert context["name"] == "annex.pdf"
        assert context["mimeType"] == "application/pdf"
        assert context["sizeBytes"] == len(b"%PDF-1.4 annex")

    def test_upload_too_large(self, client):
        login(client)

        r = client.post(
            InternalURIs.DOCUMENT_UPLOAD,
            files={"file": ("big.pdf", b"x" * (1024 * 1024 + 1), "application/pdf")},
        )

        assert r.status_code == 413

    def test_headings_without_document(self, client):
        login(client)

        assert client.post(InternalURIs.DOCUMENT_HEADINGS).status_code == 409


class TestSearch:
    def test_compliance_search(self, client, provider):
        provider.replies.append(ANALYSIS_HIT)
        login(client)
        client.post(
            InternalURIs.ENTRIES,
            json={"code": "7604.10", "category": "Aluminum Plates", "description": "Plates"},
        )

        body = client.post(InternalURIs.SEARCH, json={"code": "7604.10"}).json()

        assert body["result"]["found"] is True
        assert body["searchedHts"] == "7604.10"
        assert body["history"] == [{"code": "7604.10", "found": True}]
        assert body["error"] is None

    def test_backend_failure_is_in_state(self, client, provider):
        provider.replies.extend([BackendTransportError("Error: overloaded"), ANALYSIS_HIT])
        login(client)
        client.post(InternalURIs.DOCUMENT_TEXT, json={"content": "Heading 7604"})

        body = client.post(InternalURIs.SEARCH, json={"code": "7604.10"}).json()
        assert body["error"] == "overloaded"
        assert body["canRetry"] is True

        body = client.post(InternalURIs.SEARCH_RETRY).json()
        assert body["error"] is None
        assert body["result"]["found"] is True

    def test_lookup_without_document(self, client, provider):
        login(client)
        client.post(
            InternalURIs.ENTRIES,
            json={"code": "7604.10", "category": "Aluminum Plates", "description": "Plates"},
        )
        client.put(InternalURIs.SEARCH_MODE, json={"mode": "lookup"})

        body = client.post(InternalURIs.SEARCH, json={"code": "9903.81.91"}).json()

        assert body["provisionResult"]["found"] is False
        assert body["provisionResult"]["metalType"] == "Unknown"
        assert provider.requests == []

    def test_preferences(self, client):
        assert client.put(InternalURIs.PROVIDER, json={}).json()["provider"] == "openai"
        assert client.put(InternalURIs.PROVIDER, json={"provider": "gemini"}).json()["provider"] == "gemini"
        assert client.post(InternalURIs.THEME_TOGGLE).json()["theme"] == "dark"


class TestProxy:
    def test_forwards(self, client):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        app.dependency_overrides[get_proxy_service] = lambda: ProxyService(
            api_key="k", url="https://gemini.test/gen", transport=httpx.MockTransport(handler)
        )

        r = client.post(InternalURIs.GENERATE, json={"contents": []})

        assert r.status_code == 200
        assert r.json() == {"candidates": []}

    def test_invalid_json(self, client):
        r = client.post(
            InternalURIs.GENERATE,
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert r.status_code == 400

    def test_get_not_allowed(self, client):
        assert client.get(InternalURIs.GENERATE).status_code == 405
