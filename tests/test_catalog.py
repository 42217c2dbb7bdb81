"""Tests for the product and category endpoints."""

from decimal import Decimal

import pytest

from conftest import admin_headers, user_headers
from storefront.data.models import ProductTagModel
from storefront.domain.schemas import ProductFilter
from storefront.repos.product_repo import ProductRepo


@pytest.fixture
def catalog(db, make_product):
    cheap = make_product(price="99.00", quantity=50, name="Ceramic Mug", rating_average=4.5, rating_count=10)
    mid = make_product(price="499.00", quantity=3, name="Linen Throw", is_featured=True, rating_average=3.0)
    pricey = make_product(price="1499.00", quantity=0, name="Denim Jacket", rating_count=40)
    make_product(price="10.00", name="Hidden", is_active=False)
    db.add(ProductTagModel(product_id=mid.id, tag="linen"))
    db.commit()
    return cheap, mid, pricey


class TestListProducts:
    def test_active_only_newest_first(self, client, catalog):
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        names = [p["name"] for p in body["data"]]
        assert "Hidden" not in names
        assert len(names) == 3
        assert body["pagination"] == {
            "page": 1,
            "limit": 12,
            "total": 3,
            "totalPages": 1,
            "hasNextPage": False,
            "hasPrevPage": False,
        }

    def test_price_range(self, client, catalog):
        response = client.get("/api/products", params={"minPrice": "100", "maxPrice": "1000"})
        assert [p["name"] for p in response.json()["data"]] == ["Linen Throw"]

    def test_sort_by_price(self, client, catalog):
        response = client.get("/api/products", params={"sortBy": "price-asc"})
        assert [Decimal(p["price"]) for p in response.json()["data"]] == [
            Decimal("99.00"),
            Decimal("499.00"),
            Decimal("1499.00"),
        ]

    def test_sort_by_popularity(self, client, catalog):
        response = client.get("/api/products", params={"sortBy": "popular"})
        assert response.json()["data"][0]["name"] == "Denim Jacket"

    def test_filters(self, client, catalog):
        assert [p["name"] for p in client.get("/api/products", params={"featured": "true"}).json()["data"]] == [
            "Linen Throw"
        ]
        assert [p["name"] for p in client.get("/api/products", params={"rating": 4}).json()["data"]] == [
            "Ceramic Mug"
        ]
        assert [p["name"] for p in client.get("/api/products", params={"tags": "linen,wool"}).json()["data"]] == [
            "Linen Throw"
        ]
        in_stock = [p["name"] for p in client.get("/api/products", params={"inStock": "true"}).json()["data"]]
        assert "Denim Jacket" not in in_stock

    def test_search(self, client, catalog):
        response = client.get("/api/products", params={"search": "mug"})
        assert [p["name"] for p in response.json()["data"]] == ["Ceramic Mug"]

    def test_pagination(self, client, catalog):
        response = client.get("/api/products", params={"page": 2, "limit": 2, "sortBy": "price-asc"})
        body = response.json()
        assert [p["name"] for p in body["data"]] == ["Denim Jacket"]
        assert body["pagination"]["hasPrevPage"] is True
        assert body["pagination"]["hasNextPage"] is False

    @pytest.mark.parametrize(
        "params",
        [
            {"minPrice": "cheap"},
            {"sortBy": "random"},
            {"page": 0},
            {"limit": 500},
            {"minPrice": "500", "maxPrice": "100"},
        ],
    )
    def test_bad_query(self, client, catalog, params):
        response = client.get("/api/products", params=params)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_derived_fields(self, client, catalog):
        cheap, mid, pricey = catalog
        products = {p["id"]: p for p in client.get("/api/products").json()["data"]}
        assert products[cheap.id]["stockStatus"] == "in_stock"
        assert products[mid.id]["stockStatus"] == "low_stock"
        assert products[pricey.id]["stockStatus"] == "out_of_stock"


class TestGetProduct:
    def test_by_id_and_slug(self, client, catalog):
        cheap = catalog[0]
        by_id = client.get(f"/api/products/{cheap.id}")
        by_slug = client.get(f"/api/products/{cheap.slug}")
        assert by_id.status_code == by_slug.status_code == 200
        assert by_id.json()["data"]["id"] == by_slug.json()["data"]["id"] == cheap.id

    def test_missing(self, client, catalog):
        response = client.get("/api/products/no-such-thing")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Product not found"}


class TestProductAdmin:
    def _body(self, category, **overrides):
        body = {
            "name": "Wool Scarf",
            "description": "Warm scarf",
            "price": "799.00",
            "comparePrice": "999.00",
            "categoryId": category.id,
            "sku": "APP-SCF-010",
            "tags": ["Wool", "winter", "wool"],
            "inventory": {"quantity": 12},
        }
        body.update(overrides)
        return body

    def test_create(self, client, category):
        response = client.post("/api/products", json=self._body(category), headers=admin_headers())

        assert response.status_code == 201
        product = response.json()["data"]
        assert product["slug"] == "wool-scarf"
        assert sorted(product["tags"]) == ["winter", "wool"]
        assert product["discountPercentage"] == 20
        assert product["inventory"]["quantity"] == 12

    def test_duplicate_sku(self, client, category):
        client.post("/api/products", json=self._body(category), headers=admin_headers())
        response = client.post("/api/products", json=self._body(category, name="Other"), headers=admin_headers())
        assert response.status_code == 400
        assert response.json()["error"] == "SKU already exists"

    def test_unknown_category(self, client, category):
        response = client.post("/api/products", json=self._body(category, categoryId=999), headers=admin_headers())
        assert response.status_code == 404

    def test_non_admin(self, client, category):
        response = client.post("/api/products", json=self._body(category), headers=user_headers())
        assert response.status_code == 401

    def test_update_and_delete(self, client, category):
        product = client.post("/api/products", json=self._body(category), headers=admin_headers()).json()["data"]

        response = client.put(
            f"/api/products/{product['id']}",
            json={"price": "699.00", "tags": ["winter", "gift"], "inventory": {"quantity": 2}},
            headers=admin_headers(),
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert Decimal(updated["price"]) == Decimal("699.00")
        assert sorted(updated["tags"]) == ["gift", "winter"]
        assert updated["stockStatus"] == "low_stock"
        assert updated["name"] == "Wool Scarf"

        assert client.delete(f"/api/products/{product['id']}", headers=admin_headers()).status_code == 200
        assert client.get(f"/api/products/{product['id']}").status_code == 404

    def test_slug_collision_falls_back_to_sku_then_counter(self, client, category):
        created = [
            client.post(
                "/api/products", json=self._body(category, name=name, sku=sku), headers=admin_headers()
            ).json()["data"]["slug"]
            for name, sku in (("Mug", "X1"), ("Mug X1", "Y2"), ("Mug", "x1-b"))
        ]
        # "mug-x1" jest juz zajety przez drugi produkt
        assert created == ["mug", "mug-x1", "mug-x1-b"]

        response = client.post(
            "/api/products", json=self._body(category, name="Mug", sku="x1"), headers=admin_headers()
        )
        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "mug-x1-2"

    def test_slug_is_transliterated(self, client, category):
        response = client.post(
            "/api/products", json=self._body(category, name="Café Crème Mug"), headers=admin_headers()
        )
        assert response.json()["data"]["slug"] == "cafe-creme-mug"

    def test_delete_ordered_product_rejected(self, client, place_order, make_product):
        p = make_product()
        place_order([{"productId": p.id, "quantity": 1}])

        response = client.delete(f"/api/products/{p.id}", headers=admin_headers())
        assert response.status_code == 400


class TestCategories:
    def test_create_and_list(self, client, users):
        response = client.post("/api/categories", json={"name": "Home & Living"}, headers=admin_headers())
        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "home-living"

        listed = client.get("/api/categories").json()["data"]
        assert [c["name"] for c in listed] == ["Home & Living"]

    def test_duplicate_slug(self, client, category):
        response = client.post("/api/categories", json={"name": "Apparel"}, headers=admin_headers())
        assert response.status_code == 400


class TestProductRepo:
    def test_list_and_low_stock(self, db, catalog):
        cheap, mid, pricey = catalog
        repo = ProductRepo(db)

        items, total = repo.list_products(ProductFilter(), "price-asc", 1, 10)
        assert [p.id for p in items] == [cheap.id, mid.id, pricey.id]
        assert total == 3

        _, with_hidden = repo.list_products(ProductFilter(), "newest", 1, 10, active_only=False)
        assert with_hidden == 4

        assert [p.id for p in repo.low_stock()] == [mid.id]
        assert repo.low_stock(limit=1) == [mid]
