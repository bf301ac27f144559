"""Tests for the /scrape, /extract and /export endpoints.

Proxy fetches go through an ``httpx.MockTransport`` so the tests run without
internet access.
"""

import json

import httpx

from tests.conftest import PAGE_HTML, make_settings


def _scrape(client, url="https://example.com"):
    return client.post("/scrape", json={"url": url})


class TestScrape:
    def test_returns_elements(self, client, install_services):
        install_services()
        resp = _scrape(client)

        assert resp.status_code == 200
        data = resp.json()
        assert data["url"] == "https://example.com"
        assert data["element_count"] == len(data["elements"])
        first = data["elements"][0]
        assert first == {
            "id": "title",
            "type": "title",
            "name": "Page Title",
            "sample": "Example Domain",
            "selected": True,
        }
        assert "raw_html" not in data

    def test_url_without_scheme_is_normalized(self, client, install_services):
        install_services()
        resp = _scrape(client, "example.com")
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://example.com"

    def test_invalid_url_returns_400(self, client, install_services):
        install_services()
        resp = _scrape(client, "ftp://example.com")
        assert resp.status_code == 400

    def test_all_proxies_failing_returns_502(self, client, install_services):
        install_services(handler=lambda request: httpx.Response(503))
        resp = _scrape(client)
        assert resp.status_code == 502
        assert "proxies failed" in resp.json()["detail"]

    def test_page_without_elements_returns_422(self, client, install_services):
        install_services(handler=lambda request: httpx.Response(200, text="<div>empty</div>"))
        resp = _scrape(client)
        assert resp.status_code == 422

    def test_second_proxy_is_used_when_first_fails(self, client, install_services):
        def handler(request):
            if request.url.host == "proxy-a.test":
                raise httpx.ConnectError("down", request=request)
            return httpx.Response(200, text=PAGE_HTML)

        install_services(handler=handler)
        assert _scrape(client).status_code == 200

    def test_empty_url_is_rejected_by_validation(self, client, install_services):
        install_services()
        assert _scrape(client, "").status_code == 422


class TestExtract:
    def test_requires_previous_scrape(self, client, install_services):
        install_services()
        resp = client.post("/extract", json={"url": "https://never.example", "element_ids": ["title"]})
        assert resp.status_code == 404

    def test_empty_selection_returns_400(self, client, install_services):
        install_services()
        _scrape(client)
        resp = client.post("/extract", json={"url": "https://example.com", "element_ids": []})
        assert resp.status_code == 400

    def test_trailing_slash_matches_scraped_url(self, client, install_services):
        install_services()
        _scrape(client, "https://example.com")
        resp = client.post("/extract", json={"url": "https://example.com/", "element_ids": ["title"]})
        assert resp.status_code == 200
        assert resp.json()["data"]["Page Title"] == "Example Domain"

    def test_new_scrape_supersedes_previous_result(self, client, install_services):
        pages = iter([
            "<html><head><title>Old</title></head></html>",
            "<html><head><title>New</title></head></html>",
        ])
        install_services(handler=lambda request: httpx.Response(200, text=next(pages)))
        _scrape(client)
        _scrape(client)
        resp = client.post("/extract", json={"url": "https://example.com", "element_ids": ["title"]})
        assert resp.json()["data"]["Page Title"] == "New"


class TestExport:
    def test_csv_download(self, client):
        resp = client.post("/export", json={"data": {"A": "1", "B": "2"}, "format": "csv"})
        assert resp.status_code == 200
        assert resp.text == "A,B\n1,2"
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="scraped-data.csv"' in resp.headers["content-disposition"]

    def test_json_download(self, client):
        resp = client.post("/export", json={"data": {"A": "1"}, "format": "json"})
        assert resp.status_code == 200
        assert resp.text == '{\n  "A": "1"\n}'
        assert 'filename="scraped-data.json"' in resp.headers["content-disposition"]

    def test_empty_data_returns_422(self, client):
        resp = client.post("/export", json={"data": {}, "format": "json"})
        assert resp.status_code == 422

    def test_unknown_format_rejected(self, client):
        resp = client.post("/export", json={"data": {"A": "1"}, "format": "xml"})
        assert resp.status_code == 422


class TestEndToEnd:
    def test_scrape_select_extract_export(self, client, install_services):
        install_services(make_settings())

        scrape = _scrape(client, "https://example.com")
        assert scrape.status_code == 200
        title = next(e for e in scrape.json()["elements"] if e["type"] == "title")

        extract = client.post(
            "/extract", json={"url": "https://example.com", "element_ids": [title["id"]]}
        )
        assert extract.status_code == 200
        data = extract.json()["data"]
        assert data["Page Title"] == "Example Domain"
        assert data["Source URL"] == "https://example.com"
        assert data["Domain"] == "example.com"
        assert "Extraction Date" in data

        export = client.post("/export", json={"data": data, "format": "json"})
        assert export.status_code == 200
        assert json.loads(export.text) == data


class TestHealth:
    def test_root_reports_configuration(self, client, install_services):
        install_services()
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["backend_configured"] is False
        assert body["gemini_configured"] is False
