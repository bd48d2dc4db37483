"""Product endpoints over HTTP."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from minimal_api.api.http.deps import get_product_repository
from minimal_api.entities import ProductRepository, ProductTable
from minimal_api.api.http.routers.service.product import (
    CREATE_FAILED,
    DELETE_FAILED,
    UPDATE_FAILED,
)


def count_products(engine: Engine) -> int:
    with Session(engine) as session:
        return len(session.exec(select(ProductTable)).all())


def create(client: TestClient, headers: dict, payload: dict) -> dict:
    response = client.post("/product", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateProduct:
    def test_created_product_is_returned_with_location(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        response = client.post("/product", json=product_payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert response.headers["Location"] == f"/product/{body['id']}"
        for key, value in product_payload.items():
            assert body[key] == value

    def test_get_after_create_returns_equal_record(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, product_payload)

        response = client.get(f"/product/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_client_supplied_id_is_ignored(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, {**product_payload, "id": "chosen-by-client"})
        assert created["id"] != "chosen-by-client"
        assert client.get("/product/chosen-by-client").status_code == 404

    def test_optional_fields_may_be_omitted(self, client: TestClient, auth_headers: dict):
        created = create(
            client, auth_headers, {"name": "Cable", "description": "USB-C", "active": False}
        )
        assert created["price"] is None
        assert created["amount"] is None
        assert created["teste"] is False

    def test_name_over_80_characters_is_a_validation_problem(
        self, client: TestClient, auth_headers: dict, product_payload: dict, engine: Engine
    ):
        response = client.post(
            "/product", json={**product_payload, "name": "n" * 81}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/problem+json")
        problem = response.json()
        assert problem["status"] == 400
        assert problem["title"] == "One or more validation errors occurred."
        assert list(problem["errors"]) == ["name"]
        assert count_products(engine) == 0

    def test_missing_name_and_description(
        self, client: TestClient, auth_headers: dict, engine: Engine
    ):
        response = client.post("/product", json={"active": True}, headers=auth_headers)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"name", "description"}
        assert count_products(engine) == 0

    def test_storage_error_is_a_generic_bad_request(
        self,
        client: TestClient,
        auth_headers: dict,
        product_payload: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def broken_create(self, product):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(ProductRepository, "create", broken_create)

        response = client.post("/product", json=product_payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == CREATE_FAILED

    def test_zero_rows_is_a_generic_bad_request(
        self,
        client: TestClient,
        auth_headers: dict,
        product_payload: dict,
        monkeypatch: pytest.MonkeyPatch,
        engine: Engine,
    ):
        monkeypatch.setattr(ProductRepository, "create", lambda self, product: 0)

        response = client.post("/product", json=product_payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == CREATE_FAILED
        assert count_products(engine) == 0


class TestReadProducts:
    def test_list_returns_every_product(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        ids = {create(client, auth_headers, product_payload)["id"] for _ in range(3)}

        response = client.get("/products", headers=auth_headers)

        assert response.status_code == 200
        assert {p["id"] for p in response.json()} == ids

    def test_list_is_empty_initially(self, client: TestClient, auth_headers: dict):
        assert client.get("/products", headers=auth_headers).json() == []

    def test_get_does_not_require_a_token(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, product_payload)
        assert client.get(f"/product/{created['id']}").status_code == 200

    def test_get_missing_is_404(self, client: TestClient):
        assert client.get("/product/does-not-exist").status_code == 404

    def test_repository_comes_from_the_request_dependency(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        class EmptyRepository:
            def get(self, product_id):
                return None

            def list_all(self):
                return []

        created = create(client, auth_headers, product_payload)

        client.app.dependency_overrides[get_product_repository] = EmptyRepository
        try:
            assert client.get(f"/product/{created['id']}").status_code == 404
            assert client.get("/products", headers=auth_headers).json() == []
        finally:
            client.app.dependency_overrides.clear()

        assert client.get(f"/product/{created['id']}").status_code == 200


class TestUpdateProduct:
    def test_update_replaces_the_record(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, product_payload)
        replacement = {"name": "Keyboard v2", "description": "Silent switches", "active": False}

        response = client.put(
            f"/product/{created['id']}", json=replacement, headers=auth_headers
        )

        assert response.status_code == 204
        assert response.content == b""
        stored = client.get(f"/product/{created['id']}").json()
        assert stored == {
            "id": created["id"],
            **replacement,
            "price": None,
            "amount": None,
            "teste": False,
        }

    def test_path_id_wins_over_body_id(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, product_payload)

        response = client.put(
            f"/product/{created['id']}",
            json={**product_payload, "id": "other", "name": "Renamed"},
            headers=auth_headers,
        )

        assert response.status_code == 204
        assert client.get(f"/product/{created['id']}").json()["name"] == "Renamed"
        assert client.get("/product/other").status_code == 404

    def test_update_missing_is_404_and_creates_nothing(
        self, client: TestClient, auth_headers: dict, product_payload: dict, engine: Engine
    ):
        response = client.put("/product/missing", json=product_payload, headers=auth_headers)

        assert response.status_code == 404
        assert count_products(engine) == 0

    def test_invalid_update_is_a_validation_problem(
        self, client: TestClient, auth_headers: dict, product_payload: dict
    ):
        created = create(client, auth_headers, product_payload)

        response = client.put(
            f"/product/{created['id']}",
            json={**product_payload, "name": "n" * 81},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "name" in response.json()["errors"]
        assert client.get(f"/product/{created['id']}").json() == created

    def test_zero_rows_is_a_generic_bad_request(
        self,
        client: TestClient,
        auth_headers: dict,
        product_payload: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        created = create(client, auth_headers, product_payload)
        monkeypatch.setattr(ProductRepository, "update", lambda self, product_id, product: 0)

        response = client.put(
            f"/product/{created['id']}", json=product_payload, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == UPDATE_FAILED


class TestDeleteProduct:
    def test_delete(self, client: TestClient, auth_headers: dict, product_payload: dict):
        created = create(client, auth_headers, product_payload)

        response = client.delete(f"/product/{created['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/product/{created['id']}").status_code == 404

    def test_delete_missing_is_404(self, client: TestClient, auth_headers: dict):
        assert client.delete("/product/missing", headers=auth_headers).status_code == 404

    def test_storage_error_is_a_generic_bad_request(
        self,
        client: TestClient,
        auth_headers: dict,
        product_payload: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        created = create(client, auth_headers, product_payload)

        def broken_delete(self, product_id):
            raise OperationalError("DELETE", {}, Exception("database is locked"))

        monkeypatch.setattr(ProductRepository, "delete", broken_delete)

        response = client.delete(f"/product/{created['id']}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == DELETE_FAILED
        monkeypatch.undo()
        assert client.get(f"/product/{created['id']}").status_code == 200


class TestProductAuthorization:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/products"),
            ("POST", "/product"),
            ("PUT", "/product/some-id"),
            ("DELETE", "/product/some-id"),
        ],
    )
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer not-a-token"},
            {"Authorization": "Basic dXNlcjpwYXNz"},
        ],
    )
    def test_protected_routes_require_a_valid_token(
        self, client: TestClient, product_payload: dict, method: str, path: str, headers: dict
    ):
        response = client.request(method, path, json=product_payload, headers=headers)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_body_without_token_is_401(self, client: TestClient, engine: Engine):
        response = client.post("/product", json={"name": "n" * 200})
        assert response.status_code == 401
        assert count_products(engine) == 0

    @pytest.mark.parametrize("method, path", [("POST", "/product"), ("PUT", "/product/abc")])
    def test_malformed_json_without_token_is_401(
        self, client: TestClient, engine: Engine, method: str, path: str
    ):
        response = client.request(
            method, path, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert count_products(engine) == 0

    def test_malformed_json_with_token_is_a_validation_problem(
        self, client: TestClient, auth_headers: dict
    ):
        response = client.post(
            "/product",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert list(response.json()["errors"]) == ["$"]

    def test_token_signed_with_another_secret_is_rejected(
        self, client: TestClient, jwt_generator
    ):
        token = jwt_generator.generate_jwt(
            "user-1", secret="a-completely-different-secret-0123456789"
        )
        response = client.get("/products", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
