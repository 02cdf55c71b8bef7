ADMIN_PRODUCTS_URL = "/api/v1/admin/products"

NEW_PRODUCT = {
    "title": "Rain Jacket",
    "sku": "SKU-JACKET",
    "price": 89.9,
    "stock": 0,
    "variants": [
        {"sku": "SKU-JACKET-S", "stock": 2, "options": {"size": "S"}},
        {"sku": "SKU-JACKET-XL", "price": 94.9, "stock": 0, "options": {"size": "XL"}},
    ],
}


class TestAccess:
    def test_missing_token_is_forbidden(self, client, catalog):
        response = client.get(ADMIN_PRODUCTS_URL)

        assert response.status_code == 403
        assert response.mimetype == "application/problem+json"

    def test_customer_is_forbidden(self, client, catalog, user_headers):
        assert client.get(ADMIN_PRODUCTS_URL, headers=user_headers).status_code == 403
        assert client.post(ADMIN_PRODUCTS_URL, json=NEW_PRODUCT, headers=user_headers).status_code == 403


class TestListProducts:
    def test_lists_unpublished_products_too(self, client, catalog, admin_headers):
        body = client.get(ADMIN_PRODUCTS_URL, headers=admin_headers).get_json()

        assert "SKU-BOOT" in {p["sku"] for p in body["data"]}
        assert body["meta"]["total"] == 6
        assert body["meta"]["limit"] == 20

    def test_price_range_is_inclusive(self, client, catalog, admin_headers):
        response = client.get(
            ADMIN_PRODUCTS_URL,
            query_string={"minPrice": "10", "maxPrice": "50", "limit": 3, "sort": "price-asc"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.get_json()
        assert [p["price"] for p in body["data"]] == [10.0, 20.0, 25.0]
        assert body["meta"] == {"total": 4, "page": 1, "limit": 3, "totalPages": 2}

    def test_filter_by_variant_sku(self, client, catalog, admin_headers):
        body = client.get(ADMIN_PRODUCTS_URL, query_string={"sku": "tshirt-l"}, headers=admin_headers).get_json()

        assert [p["sku"] for p in body["data"]] == ["SKU-TSHIRT"]

    def test_sku_wildcards_are_literal(self, client, catalog, admin_headers):
        body = client.get(ADMIN_PRODUCTS_URL, query_string={"sku": "SKU_"}, headers=admin_headers).get_json()

        assert body["meta"]["total"] == 0

    def test_non_ascii_digit_brand_matches_nothing(self, client, catalog, admin_headers):
        response = client.get(ADMIN_PRODUCTS_URL, query_string={"brand": "²"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()["meta"]["total"] == 0

    def test_filter_by_brand(self, client, catalog, admin_headers):
        body = client.get(ADMIN_PRODUCTS_URL, query_string={"brand": "acme"}, headers=admin_headers).get_json()

        assert body["meta"]["total"] == 6

    def test_negative_price_is_rejected(self, client, catalog, admin_headers):
        response = client.get(ADMIN_PRODUCTS_URL, query_string={"minPrice": "-1"}, headers=admin_headers)

        assert response.status_code == 400
        assert "minPrice" in response.get_json()["errors"]


class TestGetProduct:
    def test_get_by_id(self, client, catalog, admin_headers):
        boot = catalog["boot"]

        response = client.get(f"{ADMIN_PRODUCTS_URL}/{boot.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()["published"] is False

    def test_unknown_id(self, client, admin_headers):
        assert client.get(f"{ADMIN_PRODUCTS_URL}/12345", headers=admin_headers).status_code == 404


class TestCreateProduct:
    def test_create_with_variants(self, client, catalog, admin_headers):
        payload = dict(NEW_PRODUCT, categoryId=catalog["shoes"].id)

        response = client.post(ADMIN_PRODUCTS_URL, json=payload, headers=admin_headers)

        assert response.status_code == 201
        body = response.get_json()
        assert body["slug"] == "rain-jacket"
        assert body["price"] == 89.9
        assert body["inStock"] is True
        assert body["published"] is True
        assert body["currency"] == "USD"
        assert body["category"]["slug"] == "shoes"
        assert [v["price"] for v in body["variants"]] == [89.9, 94.9]

        listed = client.get(f"/api/v1/products/{body['slug']}").get_json()
        assert listed["id"] == body["id"]

    def test_duplicate_sku_conflicts(self, client, catalog, admin_headers):
        response = client.post(
            ADMIN_PRODUCTS_URL,
            json={"title": "Another Sock", "sku": "SKU-SOCK", "price": 3},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.get_json()["detail"] == "A product with this SKU or slug already exists"

    def test_duplicate_slug_conflicts(self, client, catalog, admin_headers):
        response = client.post(
            ADMIN_PRODUCTS_URL,
            json={"title": "Wool Sock", "sku": "SKU-SOCK-2", "price": 3},
            headers=admin_headers,
        )

        assert response.status_code == 409

    def test_conflict_leaves_the_catalog_usable(self, client, catalog, admin_headers):
        client.post(ADMIN_PRODUCTS_URL, json={"title": "X", "sku": "SKU-SOCK", "price": 1}, headers=admin_headers)

        response = client.post(ADMIN_PRODUCTS_URL, json=NEW_PRODUCT, headers=admin_headers)

        assert response.status_code == 201

    def test_unknown_category(self, client, admin_headers):
        response = client.post(ADMIN_PRODUCTS_URL, json=dict(NEW_PRODUCT, categoryId=999), headers=admin_headers)

        assert response.status_code == 400
        assert "999" in response.get_json()["detail"]

    def test_invalid_payload(self, client, admin_headers):
        response = client.post(
            ADMIN_PRODUCTS_URL,
            json={"title": "", "price": -5, "currency": "usd"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        errors = response.get_json()["errors"]
        assert {"title", "sku", "price", "currency"} <= set(errors)

    def test_unpublished_product_stays_off_the_storefront(self, client, admin_headers):
        payload = dict(NEW_PRODUCT, published=False, slug="hidden-jacket")

        created = client.post(ADMIN_PRODUCTS_URL, json=payload, headers=admin_headers)

        assert created.status_code == 201
        assert client.get("/api/v1/products/hidden-jacket").status_code == 404
