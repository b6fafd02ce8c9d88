"""HTTP tests against the API with an in-memory database."""

API = "/api/v1"


def _create_member(client, name="Ayşe Yılmaz", join_date="2025-09-01"):
    response = client.post(f"{API}/members", json={"full_name": name, "join_date": join_date})
    assert response.status_code == 201
    return response.json()


def test_create_and_list_members(test_client):
    created = _create_member(test_client)
    assert created["id"]

    response = test_client.get(f"{API}/members", params={"status": "active"})
    assert response.status_code == 200
    assert [m["full_name"] for m in response.json()] == ["Ayşe Yılmaz"]


def test_duplicate_member_conflict(test_client):
    _create_member(test_client, "Ali Veli")

    response = test_client.post(f"{API}/members", json={"full_name": "ali veli"})

    assert response.status_code == 409


def test_leave_before_join_rejected(test_client):
    member = _create_member(test_client)

    response = test_client.post(f"{API}/members/{member['id']}/leave", json={"leave_date": "2025-01-01"})

    assert response.status_code == 400


def test_member_import_upload(test_client):
    content = b'[{"\xc4\xb0sim Soyisim": "Mehmet Kaya", "Ekip": "Doruk"}, {"full_name": "mehmet kaya"}]'

    response = test_client.post(
        f"{API}/members/import",
        files={"file": ("members.json", content, "application/json")}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["imported"] == 1
    assert body["skipped"] == 1


def test_fee_generation_payment_and_balance(test_client):
    member = _create_member(test_client)

    generated = test_client.post(f"{API}/fees/generate", json={"month": "2026-01"})
    assert generated.status_code == 200
    assert generated.json()["created"] == 1

    fees = test_client.get(f"{API}/fees", params={"month": "2026-01"}).json()
    assert fees[0]["member_name"] == "Ayşe Yılmaz"

    balances = test_client.get(f"{API}/reports/balances").json()
    assert balances[0]["member_id"] == member["id"]
    assert balances[0]["net_balance_cents"] == 20000

    paid = test_client.post(
        f"{API}/fees/{fees[0]['id']}/pay",
        json={"payment_method": "cash", "payment_date": "2026-01-05"}
    )
    assert paid.status_code == 200

    cashflow = test_client.get(f"{API}/reports/cashflow").json()
    assert cashflow == [{"month": "2026-01", "inflow_cents": 20000, "outflow_cents": 0, "net_cents": 20000}]


def test_fee_amount_follows_settings(test_client):
    _create_member(test_client)

    updated = test_client.put(f"{API}/settings", json={"membership_fee_cents": 25000})
    assert updated.status_code == 200
    assert updated.json()["default_projects"] == ["Corsa", "Doruk", "General"]

    generated = test_client.post(f"{API}/fees/generate", json={"month": "2026-01"}).json()
    assert generated["amount_cents"] == 25000


def test_paying_unknown_fee_is_not_found(test_client):
    response = test_client.post(f"{API}/fees/000000000000000000000000/pay", json={"payment_method": "cash"})
    assert response.status_code == 404


def test_invalid_month_rejected(test_client):
    response = test_client.post(f"{API}/fees/generate", json={"month": "January"})
    assert response.status_code == 422


def test_sale_flow(test_client):
    member = _create_member(test_client)
    product = test_client.post(
        f"{API}/products",
        json={"name": "Hoodie", "unit_price_cents": 5000, "stock_quantity": 4}
    ).json()

    sale = test_client.post(
        f"{API}/sales",
        json={"member_id": member["id"], "items": [{"product_id": product["id"], "quantity": 3}]}
    )
    assert sale.status_code == 201
    assert sale.json()["total_amount_cents"] == 15000

    items = test_client.get(f"{API}/sales/{sale.json()['id']}/items").json()
    assert items[0]["line_total_cents"] == 15000

    inventory = test_client.get(f"{API}/reports/inventory").json()
    assert inventory[0]["stock"] == 1
    assert inventory[0]["total_sold"] == 3


def test_reimbursement_for_unknown_member(test_client):
    response = test_client.post(
        f"{API}/reimbursements",
        json={"member_id": "nobody", "description": "Tires", "amount_cents": 1000}
    )
    assert response.status_code == 400


def test_bank_csv_import_and_pl_export(test_client):
    content = (
        "Hesap Hareketleri,,\n"
        "Tarih/Saat,Açıklama,İşlem Tutarı*\n"
        "04/01/2026-15:29:07,Sponsor,1500\n"
        "05/01/2026-10:00:00,Fuel,-250.5\n"
    ).encode("utf-8")

    first = test_client.post(f"{API}/bank/import", files={"file": ("statement.csv", content, "text/csv")})
    second = test_client.post(f"{API}/bank/import", files={"file": ("statement.csv", content, "text/csv")})

    assert first.status_code == 200
    assert first.json()["imported"] == 2
    assert second.json()["imported"] == 0
    assert second.json()["skipped_duplicates"] == 2

    recent = test_client.get(f"{API}/bank").json()
    assert len(recent) == 2

    export = test_client.get(f"{API}/reports/pl", params={"format": "csv"})
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert export.text.splitlines() == [
        "category,project,income_cents,expense_cents,net_cents",
        "bank,General,150000,25050,124950",
    ]


def test_bank_import_with_mapping_form_field(test_client):
    content = b"When,What,Sum\n2026-02-01,Grant,300\n"

    response = test_client.post(
        f"{API}/bank/import",
        files={"file": ("grant.csv", content, "text/csv")},
        data={"mapping": '{"txn_date": "When", "description": "What", "amount": "Sum"}'}
    )

    assert response.status_code == 200
    assert response.json()["transactions"][0]["amount_cents"] == 30000


def test_bank_import_without_mapping_rejected(test_client):
    response = test_client.post(
        f"{API}/bank/import",
        files={"file": ("grant.csv", b"When,What,Sum\n2026-02-01,Grant,300\n", "text/csv")}
    )
    assert response.status_code == 400


def test_dashboard(test_client):
    response = test_client.get(f"{API}/reports/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["pending_reimbursements"] == 0
    assert body["recent_activity"] == []


def test_load_demo_data(test_client):
    response = test_client.post(f"{API}/settings/demo-data")

    assert response.status_code == 200
    assert response.json() == {"members_created": 3, "products_created": 3}
    assert len(test_client.get(f"{API}/products").json()) == 3
