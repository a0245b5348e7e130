import uuid

from comicapi.models import CurrencyLedger, WithdrawRequest
from comicapi.models.currency import LedgerEntryType
from conftest import auth_headers


def _ledger(db, user, entry_type, amount):
    db.add(CurrencyLedger(user_id=user.id, entry_type=entry_type.value, amount=amount))
    db.commit()


def _withdraw(client, headers, amount):
    return client.post(
        "/withdraws",
        json={
            "amount": amount,
            "bankName": "Kookmin",
            "bankAccount": "123-456-789",
            "bankAccountName": "Reader",
        },
        headers=headers,
    )


class TestBalance:
    def test_balance_is_credits_minus_debits(self, client, db, reader, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)
        _ledger(db, reader, LedgerEntryType.CREDIT, 50)
        _ledger(db, reader, LedgerEntryType.DEBIT, 30)

        res = client.get("/currency/balance", headers=auth_headers(token_service, reader))
        assert res.status_code == 200
        assert res.json()["data"]["balance"] == 120

    def test_empty_ledger_balance_is_zero(self, client, reader, token_service):
        res = client.get("/currency/balance", headers=auth_headers(token_service, reader))
        assert res.json()["data"]["balance"] == 0

    def test_history_is_own_and_paged(self, client, db, reader, admin, token_service):
        for amount in (10, 20, 30):
            _ledger(db, reader, LedgerEntryType.CREDIT, amount)
        _ledger(db, admin, LedgerEntryType.CREDIT, 999)

        res = client.get(
            "/currency/history",
            params={"pageNumber": 1, "pageSize": 2},
            headers=auth_headers(token_service, reader),
        )
        data = res.json()["data"]
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert all(item["userId"] == str(reader.id) for item in data["items"])


class TestAdminLedgerEntry:
    def test_admin_credits_user(self, client, reader, admin, token_service):
        res = client.post(
            "/currency",
            json={"userId": str(reader.id), "entryType": "CREDIT", "amount": 500},
            headers=auth_headers(token_service, admin),
        )
        assert res.status_code == 200

        balance = client.get("/currency/balance", headers=auth_headers(token_service, reader))
        assert balance.json()["data"]["balance"] == 500

    def test_regular_user_forbidden(self, client, reader, token_service):
        res = client.post(
            "/currency",
            json={"userId": str(reader.id), "entryType": "CREDIT", "amount": 500},
            headers=auth_headers(token_service, reader),
        )
        assert res.status_code == 403
        assert res.json()["message"] == "Access denied"

    def test_unknown_user_is_404(self, client, admin, token_service):
        res = client.post(
            "/currency",
            json={"userId": str(uuid.uuid4()), "entryType": "DEBIT", "amount": 5},
            headers=auth_headers(token_service, admin),
        )
        assert res.status_code == 404

    def test_non_positive_amount_is_validation_error(self, client, reader, admin, token_service):
        res = client.post(
            "/currency",
            json={"userId": str(reader.id), "entryType": "CREDIT", "amount": 0},
            headers=auth_headers(token_service, admin),
        )
        assert res.status_code == 400


class TestWithdraws:
    def test_withdraw_within_balance(self, client, db, reader, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)
        headers = auth_headers(token_service, reader)

        res = _withdraw(client, headers, 100)
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "PENDING"

        mine = client.get("/withdraws/me", headers=headers)
        assert len(mine.json()["data"]) == 1

    def test_withdraw_over_balance_rejected(self, client, db, reader, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)
        _ledger(db, reader, LedgerEntryType.DEBIT, 40)

        res = _withdraw(client, auth_headers(token_service, reader), 61)
        assert res.status_code == 400
        assert res.json()["message"] == "Insufficient balance"
        assert db.query(WithdrawRequest).count() == 0

    def test_bank_fields_are_stored_trimmed(self, client, db, reader, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)

        res = client.post(
            "/withdraws",
            json={
                "amount": 50,
                "bankName": "  Kookmin ",
                "bankAccount": " 123-456-789\t",
                "bankAccountName": " Reader ",
            },
            headers=auth_headers(token_service, reader),
        )
        assert res.status_code == 200

        stored = db.query(WithdrawRequest).one()
        assert stored.bank_name == "Kookmin"
        assert stored.bank_account == "123-456-789"
        assert stored.bank_account_name == "Reader"

    def test_blank_bank_field_is_validation_error(self, client, db, reader, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)

        res = client.post(
            "/withdraws",
            json={
                "amount": 50,
                "bankName": "   ",
                "bankAccount": "123-456-789",
                "bankAccountName": "Reader",
            },
            headers=auth_headers(token_service, reader),
        )
        assert res.status_code == 400
        assert res.json()["success"] is False
        assert db.query(WithdrawRequest).count() == 0

    def test_admin_review(self, client, db, reader, admin, token_service):
        _ledger(db, reader, LedgerEntryType.CREDIT, 100)
        withdraw_id = _withdraw(client, auth_headers(token_service, reader), 80).json()["data"]["id"]
        admin_headers = auth_headers(token_service, admin)

        assert client.get("/withdraws/admin", headers=auth_headers(token_service, reader)).status_code == 403

        pending = client.get("/withdraws/admin", params={"status": "PENDING"}, headers=admin_headers)
        assert [w["id"] for w in pending.json()["data"]] == [withdraw_id]

        res = client.put(
            f"/withdraws/{withdraw_id}",
            json={"status": "APPROVED", "adminNote": "paid out"},
            headers=admin_headers,
        )
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "APPROVED"
        assert res.json()["data"]["adminNote"] == "paid out"

        rejected = client.get("/withdraws/admin", params={"status": "REJECTED"}, headers=admin_headers)
        assert rejected.json()["data"] == []

    def test_review_missing_request_is_404(self, client, admin, token_service):
        res = client.put(
            f"/withdraws/{uuid.uuid4()}",
            json={"status": "REJECTED"},
            headers=auth_headers(token_service, admin),
        )
        assert res.status_code == 404
