"""
Minimal integration test to ensure reservation routes are protected:
anonymous callers are refused and customers can not reach admin routes.
"""

from conftest import login


def test_reservation_pages_require_login(client):
    r = client.get("/reservations/auth/all")
    assert r.status_code in (401, 403)


def test_admin_pages_reject_customers(client, customer):
    login(client, customer)
    assert client.get("/reservations/admin/all").status_code == 403
    assert client.delete("/reservations/admin/anything/auth").status_code == 403


def test_admin_listing_smoke(client, admin):
    login(client, admin)
    r = client.get("/reservations/admin/all")
    assert r.status_code == 200
    assert r.get_json() == []
