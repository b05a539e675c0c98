from __future__ import annotations

from datetime import datetime, timedelta, timezone

from storefront.catalog.models import Product
from storefront.leads.models import Lead


def test_stats_overview(client, auth_headers, make_product, make_promo):
    promo = make_promo("flash")
    make_promo("old", start_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
               end_date=datetime(2025, 2, 1, tzinfo=timezone.utc))
    make_product("tote", price=100000, views=40, stock=2, promo_id=promo.id)
    make_product("clutch", price=50000, views=10, stock=20)
    make_product("hidden", price=70000, views=99, is_published=False)
    client.post("/api/products/tote/view", json={"create_lead": True})

    r = client.get("/api/admin/stats", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["overview"] == {
        "total_products": 3,
        "published_products": 2,
        "unpublished_products": 1,
        "total_categories": 1,
        "total_promos": 2,
        "active_promos": 1,
        "total_leads": 1,
        "total_views": 150,
    }
    assert [p["slug"] for p in data["most_viewed_products"]] == ["tote", "clutch"]
    assert [p["slug"] for p in data["low_stock_products"]] == ["tote"]
    assert [row["count"] for row in data["leads_by_day"]] == [1]
    assert data["category_stats"] == [{"name": "Tas Wanita", "count": 2, "total_views": 51}]


def test_stats_requires_admin(client):
    assert client.get("/api/admin/stats").status_code == 401
    assert client.post("/api/admin/reset-views").status_code == 401


def test_reset_views(client, auth_headers, db, make_product):
    make_product("tote", views=12)
    make_product("clutch", views=0)
    make_product("hidden", views=3, is_published=False)

    r = client.post("/api/admin/reset-views", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"] == {"modified_count": 2}
    db.expire_all()
    assert {p.views for p in db.query(Product).all()} == {0}


def test_stats_period_excludes_old_leads(client, auth_headers, db, make_product):
    make_product("tote")
    db.add(Lead(product_name="Tote", product_price=1, wa_prefill_message="hi", visitor_ip="x",
                created_at=datetime.now(timezone.utc) - timedelta(days=60)))
    db.commit()

    data = client.get("/api/admin/stats", params={"period": 30}, headers=auth_headers).json()["data"]
    assert data["overview"]["total_leads"] == 1
    assert data["leads_by_day"] == []
