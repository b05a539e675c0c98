from __future__ import annotations

from urllib.parse import unquote

from storefront.leads.models import Lead
from storefront.leads.whatsapp import build_cart_message, format_rupiah, render_product_message, whatsapp_url
from storefront.settings_service import get_app_config


def test_format_rupiah():
    assert format_rupiah(0) == "Rp 0"
    assert format_rupiah(80000) == "Rp 80.000"
    assert format_rupiah(1234567) == "Rp 1.234.567"


def test_render_product_message():
    msg = render_product_message("*{productName}* {productPrice} {productUrl}", "Tote", 80000, "http://x/products/tote")
    assert msg == "*Tote* Rp 80.000 http://x/products/tote"


def test_whatsapp_url_encodes_message():
    url = whatsapp_url("6281234567890", "Halo & *bold*\nline")
    assert url.startswith("https://wa.me/6281234567890?text=")
    assert "\n" not in url and "&" not in url.split("?text=")[1]
    assert unquote(url.split("?text=")[1]) == "Halo & *bold*\nline"


def test_build_cart_message_totals():
    msg = build_cart_message([("Tote", 80000, 2), ("Clutch", 45000, 1)])
    assert "1. *Tote*" in msg
    assert "   Subtotal: Rp 160.000" in msg
    assert "2. *Clutch*" in msg
    assert "*Total: Rp 205.000*" in msg


def test_view_increments_counter(client, make_product):
    make_product("tote")
    r = client.post("/api/products/tote/view", json={})
    assert r.status_code == 200
    assert r.json()["data"] == {"views": 1}
    r = client.post("/api/products/tote/view")
    assert r.json()["data"]["views"] == 2


def test_view_unknown_or_unpublished_product(client, make_product):
    make_product("hidden", is_published=False)
    assert client.post("/api/products/hidden/view", json={}).status_code == 404
    assert client.post("/api/products/nope/view", json={}).status_code == 404


def test_lead_quotes_effective_price(client, db, make_product, make_promo):
    promo = make_promo("flash", type="fixed", value=15000)
    make_product("tote", price=50000, promo_id=promo.id)

    r = client.post(
        "/api/products/tote/view",
        json={"create_lead": True},
        headers={"User-Agent": "pytest", "Referer": "http://ref", "X-Forwarded-For": "10.0.0.7, 10.0.0.1"},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert "Rp 35.000" in data["message"]
    assert "/products/tote" in data["message"]
    assert data["whatsapp_url"].startswith("https://wa.me/6281234567890?text=")

    lead = db.query(Lead).one()
    assert lead.product_price == 35000
    assert lead.product_name == "Tote"
    assert lead.category_name == "Tas Wanita"
    assert lead.visitor_ip == "10.0.0.7"
    assert lead.user_agent == "pytest"
    assert lead.referrer == "http://ref"


def test_cart_checkout(client, make_product, make_promo):
    promo = make_promo("flash", value=20)
    make_product("tote", price=100000, promo_id=promo.id)
    make_product("clutch", price=50000, price_after_discount=45000)

    r = client.post("/api/leads/cart", json={"items": [{"slug": "tote", "quantity": 2}, {"slug": "clutch"}]})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["total"] == 205000
    assert "*Total: Rp 205.000*" in data["message"]

    r = client.post("/api/leads/cart", json={"items": [{"slug": "nope"}]})
    assert r.status_code == 404

    r = client.post("/api/leads/cart", json={"items": []})
    assert r.status_code == 400


def test_admin_leads_list(client, auth_headers, make_product):
    make_product("tote")
    client.post("/api/products/tote/view", json={"create_lead": True})
    r = client.get("/api/admin/leads", headers=auth_headers)
    assert r.status_code == 200
    assert len(r.json()["data"]) == 1
    assert r.json()["data"][0]["product_name"] == "Tote"
    assert client.get("/api/admin/leads").status_code == 401


def test_lead_keeps_full_message(client, db, make_product):
    config = get_app_config(db)
    config.whatsapp_template = "{productName} " * 30
    db.commit()
    make_product("tote", name="Tote " * 20)

    r = client.post("/api/products/tote/view", json={"create_lead": True})
    message = r.json()["data"]["message"]
    assert len(message) > 1000

    lead = db.query(Lead).one()
    assert lead.wa_prefill_message == message
