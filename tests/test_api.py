"""
End-to-end tests through the HTTP API.
"""

from decimal import Decimal

from app.models import UserRole


class TestEnvelope:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_detailed_health_reports_fallback_cache(self, client):
        response = await client.get("/health/detailed")

        body = response.json()
        assert body["components"]["database"]["status"] == "healthy"
        assert body["components"]["cache"]["status"] == "degraded"
        assert body["status"] == "degraded"

    async def test_missing_product_uses_error_envelope(self, client):
        response = await client.get("/api/v1/products/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Product not found",
            "error_code": "NOT_FOUND",
        }

    async def test_invalid_body_lists_field_errors(self, client):
        response = await client.post("/api/v1/auth/signup", json={"email": "x@example.com"})

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error_code"] == "VALIDATION_ERROR"
        assert {error["field"] for error in body["errors"]} >= {"full_name", "password"}

    async def test_missing_token_is_unauthorized(self, client):
        response = await client.get("/api/v1/cart")

        assert response.status_code == 401
        assert response.json()["success"] is False


class TestAuth:
    async def test_signup_login_and_profile(self, client):
        signup = await client.post(
            "/api/v1/auth/signup",
            json={"full_name": "Jane  Doe", "email": "Jane@Example.com", "password": "secret123"},
        )
        assert signup.status_code == 201
        assert signup.json()["data"]["user"]["email"] == "jane@example.com"
        assert signup.json()["data"]["user"]["full_name"] == "Jane Doe"

        duplicate = await client.post(
            "/api/v1/auth/signup",
            json={"full_name": "Jane", "email": "jane@example.com", "password": "secret123"},
        )
        assert duplicate.status_code == 409

        login = await client.post(
            "/api/v1/auth/login", json={"email": "JANE@example.com", "password": "secret123"}
        )
        assert login.status_code == 200
        token = login.json()["data"]["tokens"]["access_token"]

        profile = await client.get("/api/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert profile.json()["data"]["role"] == "customer"

    async def test_wrong_password(self, client, make_user):
        await make_user(email="bob@example.com")

        response = await client.post(
            "/api/v1/auth/login", json={"email": "bob@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_refresh_token_rotates(self, client):
        signup = await client.post(
            "/api/v1/auth/signup",
            json={"full_name": "Ann", "email": "ann@example.com", "password": "secret123"},
        )
        refresh = signup.json()["data"]["tokens"]["refresh_token"]

        rotated = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
        assert rotated.status_code == 200

        reused = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
        assert reused.status_code == 401


class TestCheckoutFlow:
    async def test_cart_to_order(self, client, gateway, make_user, make_product, make_coupon, auth_headers):
        user = await make_user()
        product = await make_product(name="Headphones", price="125.00")
        await make_coupon(user, code="SAVE20", discount_percentage="20", usage_limit=1)
        headers = auth_headers(user)

        added = await client.post(
            "/api/v1/cart", json={"product_id": str(product.id), "quantity": 2}, headers=headers
        )
        assert added.status_code == 201
        assert Decimal(added.json()["data"]["subtotal"]) == Decimal("250.00")

        validation = await client.post(
            "/api/v1/coupons/validate", json={"code": "save20", "cart_total": "250.00"}, headers=headers
        )
        assert validation.json()["data"]["valid"] is True
        assert Decimal(validation.json()["data"]["discount_amount"]) == Decimal("50.00")

        session = await client.post(
            "/api/v1/payments/create-checkout-session",
            json={
                "products": [{"_id": str(product.id), "quantity": 2, "price": 0.01}],
                "couponCode": "SAVE20",
            },
            headers=headers,
        )
        assert session.status_code == 201
        data = session.json()["data"]
        assert Decimal(data["total_amount"]) == Decimal("216.00")
        session_id = data["session_id"]

        unpaid = await client.post(
            "/api/v1/payments/checkout-success", json={"sessionId": session_id}, headers=headers
        )
        assert unpaid.status_code == 400
        assert unpaid.json()["error_code"] == "PAYMENT_INCOMPLETE"

        gateway.mark_paid(session_id)
        completed = await client.post(
            "/api/v1/payments/checkout-success", json={"sessionId": session_id}, headers=headers
        )
        assert completed.status_code == 200
        order = completed.json()["data"]
        assert order["status"] == "completed"
        assert Decimal(order["total_amount"]) == Decimal("216.00")

        repeated = await client.post(
            "/api/v1/payments/checkout-success", json={"session_id": session_id}, headers=headers
        )
        assert repeated.json()["data"]["id"] == order["id"]

        orders = await client.get("/api/v1/orders", headers=headers)
        assert [o["id"] for o in orders.json()["data"]] == [order["id"]]

        cart = await client.get("/api/v1/cart", headers=headers)
        assert cart.json()["data"]["items"] == []

        coupons = await client.get("/api/v1/coupons/mine", headers=headers)
        codes = {c["code"]: c for c in coupons.json()["data"]}
        assert codes["SAVE20"]["is_active"] is False
        assert len([code for code in codes if code.startswith("REWARD")]) == 1

    async def test_invalid_coupon_is_reported_not_raised(self, client, make_user, auth_headers):
        user = await make_user()

        response = await client.post(
            "/api/v1/coupons/validate", json={"code": "NOPE", "cart_total": "10"}, headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["data"]["valid"] is False
        assert response.json()["data"]["reason"] == "not_found"

    async def test_fully_discounted_cart_needs_no_payment(
        self, client, gateway, make_user, make_product, make_coupon, auth_headers
    ):
        user = await make_user()
        product = await make_product(price="50.00")
        await make_coupon(user, code="FREE100", discount_percentage="100", usage_limit=1)
        headers = auth_headers(user)

        response = await client.post(
            "/api/v1/payments/create-checkout-session",
            json={"products": [{"id": str(product.id), "quantity": 1}], "coupon_code": "FREE100"},
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["session_id"] is None
        assert data["url"] is None
        assert Decimal(data["total_amount"]) == Decimal("0.00")
        assert gateway.sessions == {}

        orders = await client.get("/api/v1/orders", headers=headers)
        assert [o["id"] for o in orders.json()["data"]] == [data["order_id"]]


class TestAdminGuard:
    async def test_customer_cannot_read_analytics(self, client, make_user, auth_headers):
        user = await make_user()

        response = await client.get("/api/v1/analytics", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    async def test_admin_dashboard(self, client, make_user, auth_headers):
        admin = await make_user(role=UserRole.ADMIN)

        response = await client.get("/api/v1/analytics", params={"days": 3}, headers=auth_headers(admin))

        assert response.status_code == 200
        assert len(response.json()["data"]["daily_sales"]) == 3

        cleared = await client.delete("/api/v1/analytics/cache", headers=auth_headers(admin))
        assert cleared.json()["data"]["cleared"] == 1

    async def test_featured_cache_follows_toggle(self, client, make_user, make_product, auth_headers):
        admin = await make_user(role=UserRole.ADMIN)
        product = await make_product(name="Kettle")

        assert (await client.get("/api/v1/products/featured")).json()["data"] == []

        toggled = await client.patch(f"/api/v1/products/{product.id}/featured", headers=auth_headers(admin))
        assert toggled.json()["data"]["is_featured"] is True

        featured = (await client.get("/api/v1/products/featured")).json()["data"]
        assert [p["name"] for p in featured] == ["Kettle"]
