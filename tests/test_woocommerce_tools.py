"""Tests for the WooCommerce product, order and customer tools."""

from conftest import call_tool, payload


class TestProducts:
    async def test_list_products_without_active_site(self, server):
        resp = await call_tool(server, "list_products")
        assert resp["result"]["isError"] is True
        assert payload(resp)["status"] == "error"

    async def test_list_products(self, server, backend, shop):
        backend.add("GET", "/wp-json/wc/v3/products", [{"id": 1, "name": "Mug"}],
                    headers={"X-WP-Total": "1", "X-WP-TotalPages": "1"})
        body = payload(await call_tool(server, "list_products", {"category": 15, "per_page": 5}))
        assert body["count"] == 1
        assert body["products"][0]["name"] == "Mug"
        assert backend.last.url.params["category"] == "15"
        assert backend.last.url.host == "shop.example.com"

    async def test_create_product_shapes_categories_and_images(self, server, backend, shop):
        backend.add("POST", "/wp-json/wc/v3/products", {"id": 21, "name": "Mug"}, status=201)
        body = payload(await call_tool(server, "create_product", {
            "name": "Mug",
            "regular_price": "9.99",
            "categories": [3, 4],
            "images": ["https://cdn.example.com/mug.png"],
        }))
        assert body["message"] == "Product 'Mug' created successfully"
        assert body["product"]["id"] == 21
        assert backend.last_json() == {
            "name": "Mug",
            "type": "simple",
            "regular_price": "9.99",
            "categories": [{"id": 3}, {"id": 4}],
            "images": [{"src": "https://cdn.example.com/mug.png"}],
        }

    async def test_create_product_missing_price(self, server, backend, shop):
        resp = await call_tool(server, "create_product", {"name": "Mug"})
        assert payload(resp)["message"] == "Missing required argument(s) for create_product: regular_price"
        assert backend.requests == []

    async def test_update_product(self, server, backend, shop):
        backend.add("PUT", "/wp-json/wc/v3/products/21", {"id": 21, "regular_price": "12.00"})
        body = payload(await call_tool(server, "update_product", {"id": 21, "regular_price": "12.00"}))
        assert body["message"] == "Product '21' updated successfully"
        assert backend.last_json() == {"regular_price": "12.00"}

    async def test_delete_product_forces(self, server, backend, shop):
        backend.add("DELETE", "/wp-json/wc/v3/products/21", {"id": 21, "name": "Mug"})
        body = payload(await call_tool(server, "delete_product", {"id": 21}))
        assert body["message"] == "Product '21' deleted successfully"
        assert backend.last.url.params["force"] == "true"

    async def test_site_without_woocommerce_keys(self, server, registry):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com"})
        resp = await call_tool(server, "list_products", {"site_id": site.id})
        assert payload(resp)["message"] == "Missing required credentials: consumerKey and consumerSecret"


class TestOrders:
    async def test_create_order(self, server, backend, shop):
        backend.add("POST", "/wp-json/wc/v3/orders", {"id": 100, "status": "pending"}, status=201)
        items = [{"product_id": 21, "quantity": 2}]
        body = payload(await call_tool(server, "create_order", {"customer_id": 5, "line_items": items}))
        assert body["message"] == "Order created successfully"
        assert backend.last_json() == {"customer_id": 5, "line_items": items}

    async def test_update_order_status(self, server, backend, shop):
        backend.add("PUT", "/wp-json/wc/v3/orders/100", {"id": 100, "status": "completed"})
        body = payload(await call_tool(server, "update_order", {"id": 100, "status": "completed"}))
        assert body["order"]["status"] == "completed"

    async def test_delete_order(self, server, backend, shop):
        backend.add("DELETE", "/wp-json/wc/v3/orders/100", {"id": 100})
        body = payload(await call_tool(server, "delete_order", {"id": 100}))
        assert body["order"] == {"id": 100}


class TestCustomers:
    async def test_list_customers(self, server, backend, shop):
        backend.add("GET", "/wp-json/wc/v3/customers", [{"id": 5, "email": "a@example.com"}],
                    headers={"X-WP-Total": "30", "X-WP-TotalPages": "3"})
        body = payload(await call_tool(server, "list_customers", {"page": 2, "orderby": "email"}))
        assert body["total"] == 30
        assert body["current_page"] == 2
        assert body["customers"][0]["email"] == "a@example.com"

    async def test_create_customer(self, server, backend, shop):
        backend.add("POST", "/wp-json/wc/v3/customers", {"id": 6}, status=201)
        billing = {"first_name": "Ada", "city": "London"}
        await call_tool(server, "create_customer", {
            "email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace", "billing": billing,
        })
        assert backend.last_json()["billing"] == billing

    async def test_create_customer_upstream_rejects(self, server, backend, shop):
        backend.add("POST", "/wp-json/wc/v3/customers",
                    {"code": "registration-error-email-exists", "message": "An account is already registered"},
                    status=400)
        resp = await call_tool(server, "create_customer", {
            "email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace",
        })
        assert resp["result"]["isError"] is True
        assert "An account is already registered" in payload(resp)["message"]

    async def test_delete_customer(self, server, backend, shop):
        backend.add("DELETE", "/wp-json/wc/v3/customers/6", {"id": 6})
        body = payload(await call_tool(server, "delete_customer", {"id": 6}))
        assert body["message"] == "Customer '6' deleted successfully"
        assert backend.last.url.params["force"] == "true"
