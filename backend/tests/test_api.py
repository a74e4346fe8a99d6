"""
Library Store Backend - API Endpoint Tests
===========================================

What:  HTTP-level behaviour through the real app (ASGITransport, SQLite).

What we test:
    ✅ Checkout status codes: 201, 400, 401, 404, 409
    ✅ Error body shape {success: false, message, errors?} and X-Request-ID
    ✅ Register → login → /me flow
    ✅ camelCase resource bodies and list envelopes with pagination meta
    ✅ Health check
"""

from uuid import uuid4

import pytest


class TestCheckoutEndpoint:
    @pytest.mark.asyncio
    async def test_checkout_created(self, test_client, auth_headers, seed):
        response = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(seed.dune_id), "quantity": 2}]},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"transaction_id", "total_quantity", "total_price"}
        assert body["total_quantity"] == 2
        assert body["total_price"] == pytest.approx(21.0)

        book = await test_client.get(f"/api/books/{seed.dune_id}", headers=auth_headers)
        assert book.json()["data"]["stockQuantity"] == 3

    @pytest.mark.asyncio
    async def test_checkout_requires_token(self, test_client, seed):
        response = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(seed.dune_id), "quantity": 1}]},
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Unauthorized: No or invalid token provided",
        }

    @pytest.mark.asyncio
    async def test_checkout_rejects_invalid_token(self, test_client, seed):
        response = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(seed.dune_id), "quantity": 1}]},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: Invalid token"

    @pytest.mark.asyncio
    async def test_checkout_schema_error_names_the_index(self, test_client, auth_headers, seed):
        response = await test_client.post(
            "/api/transactions",
            json={
                "books": [
                    {"bookId": str(seed.dune_id), "quantity": 1},
                    {"bookId": str(seed.dune_id), "quantity": "two"},
                ]
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0].startswith("books[1].quantity")

    @pytest.mark.asyncio
    async def test_checkout_non_positive_quantity(self, test_client, auth_headers, seed):
        response = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(seed.dune_id), "quantity": 0}]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"] == ["books[0].quantity must be a positive integer"]

    @pytest.mark.asyncio
    async def test_checkout_empty_books(self, test_client, auth_headers, seed):
        response = await test_client.post(
            "/api/transactions", json={"books": []}, headers=auth_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_checkout_unknown_book(self, test_client, auth_headers, seed):
        missing = uuid4()
        response = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(missing), "quantity": 1}]},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == f"Book(s) not found: {missing}"

    @pytest.mark.asyncio
    async def test_checkout_insufficient_stock(self, test_client, auth_headers, seed):
        response = await test_client.post(
            "/api/transactions",
            json={
                "books": [
                    {"bookId": str(seed.dune_id), "quantity": 1},
                    {"bookId": str(seed.cosmos_id), "quantity": 9},
                ]
            },
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == (
            "Insufficient stock for book: Cosmos. Available: 2, Requested: 9"
        )
        assert "X-Request-ID" in response.headers

        book = await test_client.get(f"/api/books/{seed.dune_id}", headers=auth_headers)
        assert book.json()["data"]["stockQuantity"] == 5


class TestTransactionQueriesEndpoint:
    @pytest.mark.asyncio
    async def test_list_detail_and_statistics(self, test_client, auth_headers, seed):
        created = await test_client.post(
            "/api/transactions",
            json={"books": [{"bookId": str(seed.cosmos_id), "quantity": 1}]},
            headers=auth_headers,
        )
        transaction_id = created.json()["transaction_id"]

        listing = await test_client.get(
            "/api/transactions", params={"orderByPrice": "desc"}, headers=auth_headers
        )
        assert listing.status_code == 200
        body = listing.json()
        assert body["meta"] == {
            "page": 1,
            "limit": 10,
            "total": 1,
            "next_page": None,
            "prev_page": None,
        }
        row = body["data"][0]
        assert row["totalPrice"] == pytest.approx(20.0)
        assert row["totalAmount"] == 1
        assert row["user"]["email"] == "reader@example.com"

        detail = await test_client.get(f"/api/transactions/{transaction_id}", headers=auth_headers)
        assert detail.status_code == 200
        assert detail.json()["data"]["books"][0]["book"]["writer"] == "Carl Sagan"

        stats = await test_client.get("/api/transactions/statistics", headers=auth_headers)
        assert stats.status_code == 200
        assert stats.json()["total_transactions"] == 1
        assert stats.json()["most_book_sales_genre"] == "Science"

    @pytest.mark.asyncio
    async def test_unknown_sort_value_rejected(self, test_client, auth_headers, seed):
        response = await test_client.get(
            "/api/transactions", params={"orderById": "sideways"}, headers=auth_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_detail_not_found_and_malformed_id(self, test_client, auth_headers, seed):
        missing = await test_client.get(f"/api/transactions/{uuid4()}", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Transaction not found"

        malformed = await test_client.get("/api/transactions/abc", headers=auth_headers)
        assert malformed.status_code == 400


class TestAuthEndpoints:
    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client, database):
        registered = await test_client.post(
            "/api/auth/register",
            json={"email": "alice@example.com", "password": "Str0ng!pass", "username": "alice"},
        )
        assert registered.status_code == 201
        user = registered.json()["data"]
        assert user["email"] == "alice@example.com"
        assert "createdAt" in user
        assert "password" not in user

        duplicate = await test_client.post(
            "/api/auth/register",
            json={"email": "alice@example.com", "password": "Str0ng!pass"},
        )
        assert duplicate.status_code == 409

        login = await test_client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "Str0ng!pass"},
        )
        assert login.status_code == 200
        token = login.json()["data"]["access_token"]

        me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"] == {"id": user["id"], "email": "alice@example.com", "username": "alice"}

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, test_client, database):
        response = await test_client.post(
            "/api/auth/register", json={"email": "not-an-email", "password": "Str0ng!pass"}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0].startswith("email")

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client, seed):
        response = await test_client.post(
            "/api/auth/login", json={"email": "reader@example.com", "password": "Wrong#pass1"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestCatalogEndpoints:
    @pytest.mark.asyncio
    async def test_book_lifecycle(self, test_client, auth_headers, seed):
        created = await test_client.post(
            "/api/books",
            json={
                "title": "Neuromancer",
                "writer": "William Gibson",
                "publisher": "Ace",
                "publicationYear": 1984,
                "price": 15.25,
                "stockQuantity": 4,
                "genreId": str(seed.fiction_id),
            },
            headers=auth_headers,
        )
        assert created.status_code == 201
        book_id = created.json()["data"]["id"]

        patched = await test_client.patch(
            f"/api/books/{book_id}", json={"price": 17.5}, headers=auth_headers
        )
        assert patched.status_code == 200
        assert patched.json()["data"]["price"] == pytest.approx(17.5)

        forbidden = await test_client.patch(
            f"/api/books/{book_id}", json={"title": "Count Zero"}, headers=auth_headers
        )
        assert forbidden.status_code == 400

        listing = await test_client.get(
            "/api/books", params={"limit": 2, "orderByTitle": "asc"}, headers=auth_headers
        )
        meta = listing.json()["meta"]
        assert meta["total"] == 3
        assert meta["next_page"] == 2
        assert [b["title"] for b in listing.json()["data"]] == ["Cosmos", "Dune"]

        removed = await test_client.delete(f"/api/books/{book_id}", headers=auth_headers)
        assert removed.status_code == 200
        assert removed.json()["success"] is True

        again = await test_client.delete(f"/api/books/{book_id}", headers=auth_headers)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_books_require_token(self, test_client, seed):
        response = await test_client.get("/api/books")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_genre_endpoints(self, test_client, auth_headers, seed):
        created = await test_client.post(
            "/api/genre", json={"name": "Horror"}, headers=auth_headers
        )
        assert created.status_code == 201
        genre_id = created.json()["data"]["id"]

        duplicate = await test_client.post(
            "/api/genre", json={"name": "Horror"}, headers=auth_headers
        )
        assert duplicate.status_code == 409

        in_use = await test_client.delete(f"/api/genre/{seed.fiction_id}", headers=auth_headers)
        assert in_use.status_code == 400

        removed = await test_client.delete(f"/api/genre/{genre_id}", headers=auth_headers)
        assert removed.status_code == 200

        listing = await test_client.get("/api/genre", headers=auth_headers)
        assert listing.json()["meta"]["total"] == 2


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_check(self, test_client):
        response = await test_client.get("/health-check")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["database"] == "connected"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"
