from __future__ import annotations

from unittest.mock import patch

from storefront.domain.exceptions import PersistenceFailure

BASE = "/api/v1"


def _put(client, headers, scope_id, sections):
    return client.put(f"{BASE}/layouts/{scope_id}", json={"sections": sections}, headers=headers)


# -- Reading ------------------------------------------------------------------


class TestGetLayout:
    def test_health(self, client) -> None:
        res = client.get(f"{BASE}/health")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok", "service": "storefront-layouts"}

    def test_empty_scope(self, client) -> None:
        res = client.get(f"{BASE}/layouts/global")

        assert res.status_code == 200
        assert res.get_json() == {"scopeId": "global", "sections": []}

    def test_inherit_uses_template_scope(self, client, admin_headers) -> None:
        _put(client, admin_headers, "global", [{"id": "h1", "type": "Hero"}])

        plain = client.get(f"{BASE}/layouts/product-7").get_json()
        inherited = client.get(f"{BASE}/layouts/product-7?inherit=1").get_json()

        assert plain["sections"] == []
        assert inherited["scopeId"] == "product-7"
        assert [s["id"] for s in inherited["sections"]] == ["h1"]


# -- Writing ------------------------------------------------------------------


class TestReplaceLayout:
    def test_requires_token(self, client) -> None:
        res = _put(client, {}, "global", [])
        assert res.status_code == 401

    def test_requires_admin_role(self, client, editor_headers) -> None:
        res = _put(client, editor_headers, "global", [])
        assert res.status_code == 403

    def test_replace_and_read_back(self, client, admin_headers) -> None:
        sections = [
            {"id": "c1", "type": "Collections", "title": "Shop", "isActive": True,
             "settings": {"limit": 8}, "code": ""},
            {"id": "h1", "type": "Hero", "title": None, "isActive": False,
             "settings": {}, "code": "", "style": {"paddingTop": 40, "mobile": {"paddingTop": 20}}},
        ]

        res = _put(client, admin_headers, "global", sections)
        assert res.status_code == 200

        body = client.get(f"{BASE}/layouts/global").get_json()
        assert body == {"scopeId": "global", "sections": sections}

    def test_unknown_type_is_400(self, client, admin_headers) -> None:
        res = _put(client, admin_headers, "global", [{"id": "x", "type": "Marquee"}])

        assert res.status_code == 400
        assert res.get_json()["error"] == "UnknownSectionKind"
        assert res.get_json()["kind"] == "Marquee"

    def test_duplicate_ids_are_400(self, client, admin_headers) -> None:
        res = _put(client, admin_headers, "global", [
            {"id": "x", "type": "Hero"},
            {"id": "x", "type": "Videos"},
        ])

        assert res.status_code == 400
        assert res.get_json()["error"] == "InvariantViolation"

    def test_non_object_body_is_400(self, client, admin_headers) -> None:
        res = client.put(f"{BASE}/layouts/global", json=[1, 2], headers=admin_headers)
        assert res.status_code == 400

    def test_oversized_numbers_are_dropped(self, client, admin_headers) -> None:
        res = _put(client, admin_headers, "global", [
            {"id": "h1", "type": "Hero", "style": {"paddingTop": 10**400, "marginTop": 8}},
        ])

        assert res.status_code == 200
        (section,) = res.get_json()["sections"]
        assert section["style"] == {"marginTop": 8}

        css = client.get(f"{BASE}/layouts/global/styles.css").get_data(as_text=True)
        assert css == "#sec-h1 { margin-top: 8px !important; }"

    def test_storage_failure_is_503(self, client, admin_headers) -> None:
        with patch(
            "storefront.application.layout.sql_document_store.SqlDocumentStore.put",
            side_effect=PersistenceFailure("save", "global", "disk full"),
        ):
            res = _put(client, admin_headers, "global", [{"id": "x", "type": "Hero"}])

        body = res.get_json()
        assert res.status_code == 503
        assert body["error"] == "PersistenceFailure"
        assert body["operation"] == "save"
        assert body["scopeId"] == "global"


class TestOperations:
    def test_batch_is_applied_and_saved(self, client, admin_headers) -> None:
        _put(client, admin_headers, "global", [{"id": "h1", "type": "Hero"}])

        res = client.post(
            f"{BASE}/layouts/global/operations",
            json={"operations": [
                {"op": "add", "type": "Collections"},
                {"op": "move", "id": "h1", "direction": "down"},
                {"op": "set_active", "id": "h1", "active": False},
            ]},
            headers=admin_headers,
        )

        assert res.status_code == 200
        stored = client.get(f"{BASE}/layouts/global").get_json()["sections"]
        assert [(s["type"], s["isActive"]) for s in stored] == [
            ("Collections", True),
            ("Hero", False),
        ]

    def test_string_active_flag_is_rejected(self, client, admin_headers) -> None:
        _put(client, admin_headers, "global", [{"id": "h1", "type": "Hero", "isActive": False}])

        res = client.post(
            f"{BASE}/layouts/global/operations",
            json={"operations": [{"op": "set_active", "id": "h1", "active": "false"}]},
            headers=admin_headers,
        )

        assert res.status_code == 400
        assert res.get_json()["error"] == "InvariantViolation"
        stored = client.get(f"{BASE}/layouts/global").get_json()["sections"]
        assert stored[0]["isActive"] is False

    def test_bad_operation_saves_nothing(self, client, admin_headers) -> None:
        res = client.post(
            f"{BASE}/layouts/global/operations",
            json={"operations": [
                {"op": "add", "type": "Hero"},
                {"op": "rename", "id": "x"},
            ]},
            headers=admin_headers,
        )

        assert res.status_code == 400
        assert client.get(f"{BASE}/layouts/global").get_json()["sections"] == []

    def test_operations_must_be_a_list(self, client, admin_headers) -> None:
        res = client.post(
            f"{BASE}/layouts/global/operations",
            json={"operations": "add"},
            headers=admin_headers,
        )
        assert res.status_code == 400


# -- Rendering ----------------------------------------------------------------


class TestRender:
    def test_render_plan(self, client, admin_headers) -> None:
        _put(client, admin_headers, "global", [
            {"id": "h1", "type": "Hero", "style": {"paddingTop": 40}},
            {"id": "v1", "type": "Videos", "isActive": False},
            {"id": "cc", "type": "CustomCode", "code": "<p>Hi<script>x()</script></p>"},
        ])

        body = client.get(f"{BASE}/layouts/global/render").get_json()

        assert [s["id"] for s in body["sections"]] == ["h1", "cc"]
        hero, custom = body["sections"]
        assert hero["settings"]["ctaLabel"] == "Shop Now"
        assert hero["css"] == "#sec-h1 { padding-top: 40px !important; }"
        assert custom["markup"] == "<p>Hi</p>"
        assert body["css"] == "#sec-h1 { padding-top: 40px !important; }"

    def test_stylesheet(self, client, admin_headers) -> None:
        _put(client, admin_headers, "global", [
            {"id": "h1", "type": "Hero", "style": {"laptop": {"textAlign": "center"}}},
        ])

        res = client.get(f"{BASE}/layouts/global/styles.css")

        assert res.status_code == 200
        assert res.mimetype == "text/css"
        assert res.get_data(as_text=True) == (
            "@media (max-width: 1024px) { #sec-h1 { text-align: center !important; } }"
        )


# -- Audit trail --------------------------------------------------------------


class TestAudit:
    def test_saves_are_listed_newest_first(self, client, admin_headers) -> None:
        for _ in range(3):
            _put(client, admin_headers, "global", [])

        res = client.get(f"{BASE}/layouts/global/audit?limit=2", headers=admin_headers)
        body = res.get_json()

        assert res.status_code == 200
        assert len(body["data"]) == 2
        assert body["meta"]["hasMore"] is True
        assert body["data"][0]["action"] == "layout.save"
        assert body["data"][0]["actorId"] == "admin-1"

        rest = client.get(
            f"{BASE}/layouts/global/audit",
            query_string={"limit": 2, "cursor": body["meta"]["nextCursor"]},
            headers=admin_headers,
        ).get_json()
        assert len(rest["data"]) == 1
        assert rest["meta"]["hasMore"] is False

    def test_requires_admin(self, client, editor_headers) -> None:
        res = client.get(f"{BASE}/layouts/global/audit", headers=editor_headers)
        assert res.status_code == 403

    def test_invalid_cursor(self, client, admin_headers) -> None:
        res = client.get(f"{BASE}/layouts/global/audit?cursor=nope", headers=admin_headers)
        assert res.status_code == 400


# -- Section catalog ----------------------------------------------------------


class TestSectionKinds:
    def test_catalog(self, client) -> None:
        body = client.get(f"{BASE}/sections/kinds").get_json()
        assert len(body["data"]) == 8

    def test_defaults(self, client) -> None:
        body = client.get(f"{BASE}/sections/kinds/NewArrivals/defaults").get_json()

        assert body["type"] == "NewArrivals"
        assert body["title"] == "New NewArrivals Section"
        assert body["settings"]["dataSource"] == "all-active"
        assert "style" not in body

    def test_unknown_kind(self, client) -> None:
        res = client.get(f"{BASE}/sections/kinds/Carousel/defaults")
        assert res.status_code == 400


def test_openapi_document_is_served(client) -> None:
    res = client.get("/openapi/layouts.yaml")
    assert res.status_code == 200
    assert b"Storefront Layouts API" in res.data
