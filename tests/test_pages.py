"""
PIVTOOLS Page Route Tests

End-to-end rendering of the HTML routes through FastAPI's TestClient:
- Home page in all four designs, chosen by query, cookie or default
- Design selection and cycling endpoints (cookie + 303 redirect)
- Manual overview and every manual page
- HTML and JSON 404 responses

Example usage:
    pytest tests/test_pages.py -v
"""

import pytest

from core.content import load_manual_index
from core.design import DESIGN_STORAGE_KEY, DesignVariant


def _design_cookie(response):
    return response.headers.get("set-cookie", "")


class TestHomePage:
    """Home page rendering and variant resolution."""

    def test_default_design(self, prod_client):
        response = prod_client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'data-design="A"' in response.text
        assert "design-a" in response.text
        assert 'data-hero="particles"' in response.text

    @pytest.mark.parametrize("design,marker", [
        ("A", 'data-hero="particles"'),
        ("B", "hero-glow"),
        ("C", 'data-hero="profile"'),
        ("D", 'data-hero="streamlines"'),
    ])
    def test_every_design_renders(self, prod_client, design, marker):
        response = prod_client.get(f"/?design={design}")

        assert response.status_code == 200
        assert f'data-design="{design}"' in response.text
        assert f"design-{design.lower()}" in response.text
        assert marker in response.text

    def test_sections_present_in_every_design(self, prod_client):
        for design in DesignVariant:
            text = prod_client.get(f"/?design={design.value}").text
            for section_id in ("features", "capabilities", "workflow", "documentation", "research"):
                assert f'id="{section_id}"' in text, f"{section_id} missing in design {design.value}"

    def test_lowercase_query(self, prod_client):
        assert 'data-design="C"' in prod_client.get("/?design=c").text

    def test_unknown_query_falls_back(self, prod_client):
        assert 'data-design="A"' in prod_client.get("/?design=Z").text

    def test_cookie_selects_design(self, prod_client):
        prod_client.cookies.set(DESIGN_STORAGE_KEY, "D")

        assert 'data-design="D"' in prod_client.get("/").text

    def test_query_overrides_cookie(self, prod_client):
        prod_client.cookies.set(DESIGN_STORAGE_KEY, "D")

        assert 'data-design="B"' in prod_client.get("/?design=B").text

    def test_preview_is_not_indexed(self, prod_client):
        assert 'name="robots" content="noindex' in prod_client.get("/?design=B").text
        assert 'name="robots"' not in prod_client.get("/").text

    def test_picker_lists_every_design(self, prod_client):
        text = prod_client.get("/?design=C").text

        assert 'id="design-picker"' in text
        for design in DesignVariant:
            assert f'href="/design/{design.value}"' in text
        assert 'class="design-option is-current"' in text
        assert 'href="/design/C/next"' in text
        assert 'href="/design/C/prev"' in text

    def test_keymap_embedded(self, prod_client):
        text = prod_client.get("/").text

        assert 'id="design-keymap"' in text
        assert '"storageKey":"pivtools-design"' in text

    def test_authors_and_citation(self, prod_client):
        text = prod_client.get("/").text

        assert "Citation" in text
        assert "author-card" in text


class TestDesignEndpoints:
    """Server-side design switching for clients without JavaScript."""

    def test_select_stores_cookie_and_redirects(self, prod_client):
        response = prod_client.get("/design/B")

        assert response.status_code == 303
        assert response.headers["location"] == "/"
        cookie = _design_cookie(response)
        assert f"{DESIGN_STORAGE_KEY}=B" in cookie
        assert "Secure" in cookie
        assert "samesite=lax" in cookie.lower()

    def test_development_cookie_not_secure(self, dev_client):
        cookie = _design_cookie(dev_client.get("/design/C"))

        assert f"{DESIGN_STORAGE_KEY}=C" in cookie
        assert "Secure" not in cookie

    def test_selection_is_case_insensitive(self, prod_client):
        assert f"{DESIGN_STORAGE_KEY}=D" in _design_cookie(prod_client.get("/design/d"))

    @pytest.mark.parametrize("path,expected", [
        ("/design/A/next", "B"),
        ("/design/D/next", "A"),
        ("/design/A/prev", "D"),
        ("/design/C/prev", "B"),
        ("/design/B/NEXT", "C"),
    ])
    def test_cycle(self, prod_client, path, expected):
        response = prod_client.get(path)

        assert response.status_code == 303
        assert f"{DESIGN_STORAGE_KEY}={expected}" in _design_cookie(response)

    def test_selected_design_is_rendered(self, dev_client):
        dev_client.get("/design/C")

        assert 'data-design="C"' in dev_client.get("/").text

    @pytest.mark.parametrize("path", ["/design/Z", "/design/E/next", "/design/A/sideways"])
    def test_unknown_design_or_direction(self, prod_client, path):
        response = prod_client.get(path)

        assert response.status_code == 404
        assert "set-cookie" not in response.headers


class TestManual:

    def test_overview(self, prod_client):
        response = prod_client.get("/manual")

        assert response.status_code == 200
        assert "PIVTOOLS Manual" in response.text
        assert "Manual Contents" in response.text
        assert "Coming Soon" in response.text
        assert 'class="manual-card accent-green"' in response.text
        assert 'href="/manual" data-close-manual aria-current="page"' in response.text

    def test_every_manual_page_renders(self, prod_client):
        index = load_manual_index()

        assert len(index.pages) == 15
        for section in index.pages:
            response = prod_client.get(section.href)
            assert response.status_code == 200, section.href
            for sub in section.subsections:
                assert f'id="{sub.anchor}"' in response.text, sub.href

    def test_active_section_expanded(self, prod_client):
        text = prod_client.get("/manual/masking").text

        assert 'href="/manual/masking" data-close-manual aria-current="page"' in text
        assert text.count('<details class="manual-subsections" open>') == 1
        assert text.count('aria-current="page"') == 2  # top nav + manual nav

    def test_pager_links(self, prod_client):
        text = prod_client.get("/manual/quick-start").text

        assert 'href="/manual" rel="prev"' in text
        assert 'href="/manual/cli-reference" rel="next"' in text

    def test_last_page_has_no_next(self, prod_client):
        text = prod_client.get("/manual/developer").text

        assert 'rel="prev"' in text
        assert 'rel="next"' not in text

    def test_page_title_and_summary(self, prod_client):
        text = prod_client.get("/manual/stereo-calibration").text

        assert "<title>Stereo Calibration - PIVTOOLS Manual</title>" in text
        assert "<h1>Stereo Calibration</h1>" in text

    def test_unknown_page_html(self, prod_client):
        response = prod_client.get("/manual/not-a-page")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/html")
        assert "Not Found" in response.text
        assert 'href="/manual"' in response.text

    def test_unknown_page_json(self, prod_client):
        response = prod_client.get("/manual/not-a-page", headers={"Accept": "application/json"})

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Not Found"
        assert body["code"] == 404
        assert "not-a-page" in body["detail"]

    def test_trailing_slash_redirects(self, prod_client):
        response = prod_client.get("/manual/")

        assert response.status_code in (307, 308)
        assert response.headers["location"].endswith("/manual")


class TestMisc:

    def test_health(self, prod_client):
        response = prod_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "pivtools-site"
        assert body["environment"] == "production"

    def test_request_id_header(self, prod_client):
        response = prod_client.get("/")

        assert len(response.headers["X-Request-ID"]) == 8

    def test_unknown_route_html(self, dev_client):
        response = dev_client.get("/no/such/page")

        assert response.status_code == 404
        assert "Back to Home" in response.text

    def test_static_assets(self, prod_client):
        for path in ("/static/css/site.css", "/static/js/design-selector.js", "/static/js/hero.js", "/static/favicon.svg"):
            assert prod_client.get(path).status_code == 200, path

    @pytest.mark.parametrize("path", ["/", "/manual", "/manual/masking"])
    def test_head_requests(self, prod_client, path):
        response = prod_client.head(path)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "nonce-" in response.headers["Content-Security-Policy"]

    def test_head_unknown_page(self, prod_client):
        assert prod_client.head("/manual/not-a-page").status_code == 404

    def test_error_page_not_indexed(self, prod_client):
        response = prod_client.get("/manual/not-a-page")

        assert response.text.count('name="robots" content="noindex') == 1

    def test_json_error_body(self, prod_client):
        response = prod_client.get("/no/such/page", headers={"Accept": "application/json"})

        assert set(response.json()) == {"error", "code", "detail"}

    def test_design_script_guards_session_storage(self, prod_client):
        script = prod_client.get("/static/js/design-selector.js").text
        guarded = script[script.index("function syncFlag"):script.index("return null;\n  }\n", script.index("function syncFlag"))]

        assert script.count("window.sessionStorage") == 3
        assert guarded.count("window.sessionStorage") == 3
        assert "catch (err)" in guarded
