import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from comicapi.core.exceptions import NotFoundError
from comicapi.models import Transaction, UserPurchase
from comicapi.models.payment import PurchaseType, TransactionStatus
from comicapi.repositories.purchase_repository import PurchaseRepository
from comicapi.schemas.auth import CurrentUser
from comicapi.services.payment_service import PaymentService
from conftest import auth_headers, create_chapter, create_user


def _purchase(client, headers, chapter_id):
    return client.post(
        "/payments/purchased-chapter", json={"chapterId": str(chapter_id)}, headers=headers
    )


class TestPurchase:
    def test_purchase_records_transaction_and_entitlement(self, client, db, reader, token_service):
        chapter = create_chapter(db, unit_price=150)
        headers = auth_headers(token_service, reader)

        res = _purchase(client, headers, chapter.id)
        assert res.status_code == 200
        assert res.json()["data"]["alreadyOwned"] is False

        tx = db.query(Transaction).one()
        assert tx.amount == 150
        assert tx.status == TransactionStatus.SUCCESS.value
        assert tx.provider == "MANUAL"
        assert db.query(UserPurchase).count() == 1

        pages = client.get(f"/chapters/{chapter.id}/pages", headers=headers)
        assert pages.status_code == 200

    def test_purchase_is_idempotent(self, client, db, reader, token_service):
        chapter = create_chapter(db)
        headers = auth_headers(token_service, reader)

        _purchase(client, headers, chapter.id)
        again = _purchase(client, headers, chapter.id)
        assert again.status_code == 200
        assert again.json()["data"]["alreadyOwned"] is True
        assert db.query(Transaction).count() == 1
        assert db.query(UserPurchase).count() == 1

    def test_missing_chapter_is_404(self, client, reader, token_service):
        res = _purchase(client, auth_headers(token_service, reader), uuid.uuid4())
        assert res.status_code == 404

    def test_insert_conflict_counts_as_owned(self, db, reader, monkeypatch):
        """존재 확인을 통과한 뒤 다른 요청이 먼저 구매한 경우"""
        chapter = create_chapter(db)
        db.add(UserPurchase(user_id=reader.id, type=PurchaseType.CHAPTER.value, ref_id=chapter.id))
        db.commit()
        db.expunge_all()

        service = PaymentService(db)
        original = service.purchase_repo.has_purchased
        calls = []

        def stale_check(*args):
            calls.append(args)
            return False if len(calls) == 1 else original(*args)

        monkeypatch.setattr(service.purchase_repo, "has_purchased", stale_check)
        actor = CurrentUser(id=reader.id, email=reader.email, role=reader.role)

        result = service.purchase_chapter(actor, chapter.id)
        assert result.already_owned is True
        assert len(calls) == 2
        assert db.query(Transaction).count() == 0
        assert db.query(UserPurchase).count() == 1

    def test_insert_failure_for_deleted_user_is_not_owned(self, db, monkeypatch):
        """토큰은 유효하지만 사용자 행이 삭제된 경우 보유로 처리하지 않음"""
        chapter = create_chapter(db)
        gone = create_user(db, email="gone@example.com")
        actor = CurrentUser(id=gone.id, email=gone.email, role=gone.role)
        db.delete(gone)
        db.commit()

        service = PaymentService(db)

        def fk_violation(*args, **kwargs):
            raise IntegrityError(
                "INSERT INTO user_purchases", {}, Exception("FOREIGN KEY constraint failed")
            )

        monkeypatch.setattr(service.purchase_repo, "grant", fk_violation)

        with pytest.raises(NotFoundError):
            service.purchase_chapter(actor, chapter.id)
        assert db.query(Transaction).count() == 0
        assert db.query(UserPurchase).count() == 0

    def test_unexplained_insert_failure_propagates(self, db, reader, monkeypatch):
        chapter = create_chapter(db)
        service = PaymentService(db)

        def broken_insert(*args, **kwargs):
            raise IntegrityError("INSERT INTO user_purchases", {}, Exception("constraint failed"))

        monkeypatch.setattr(service.purchase_repo, "grant", broken_insert)
        actor = CurrentUser(id=reader.id, email=reader.email, role=reader.role)

        with pytest.raises(IntegrityError):
            service.purchase_chapter(actor, chapter.id)
        assert db.query(Transaction).count() == 0
        assert db.query(UserPurchase).count() == 0

    def test_deleted_user_purchase_over_http_is_404(self, client, db, token_service, monkeypatch):
        chapter = create_chapter(db)
        gone = create_user(db, email="gone@example.com")
        headers = auth_headers(token_service, gone)
        db.delete(gone)
        db.commit()

        def fk_violation(self, *args, **kwargs):
            raise IntegrityError(
                "INSERT INTO user_purchases", {}, Exception("FOREIGN KEY constraint failed")
            )

        monkeypatch.setattr(PurchaseRepository, "grant", fk_violation)

        res = _purchase(client, headers, chapter.id)
        assert res.status_code == 404
        assert res.json()["success"] is False
        assert db.query(UserPurchase).count() == 0


class TestTransactions:
    def test_listing_is_scoped_to_owner_unless_admin(self, client, db, reader, admin, token_service):
        other = create_user(db, email="other@example.com")
        _purchase(client, auth_headers(token_service, reader), create_chapter(db).id)
        _purchase(client, auth_headers(token_service, other), create_chapter(db).id)
        _purchase(client, auth_headers(token_service, other), create_chapter(db).id)

        mine = client.get("/payments/transactions", headers=auth_headers(token_service, reader))
        assert mine.status_code == 200
        assert mine.json()["data"]["total"] == 1

        everyone = client.get(
            "/payments/transactions",
            params={"pageNumber": 1, "pageSize": 2},
            headers=auth_headers(token_service, admin),
        )
        data = everyone.json()["data"]
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["pageSize"] == 2

        pending = client.get(
            "/payments/transactions",
            params={"status": "PENDING"},
            headers=auth_headers(token_service, admin),
        )
        assert pending.json()["data"]["total"] == 0

    def test_check_transaction_visibility(self, client, db, reader, admin, token_service):
        _purchase(client, auth_headers(token_service, reader), create_chapter(db).id)
        tx_id = db.query(Transaction).one().id
        stranger = create_user(db, email="stranger@example.com")

        url = f"/payments/transactions/check/{tx_id}"
        assert client.get(url, headers=auth_headers(token_service, reader)).status_code == 200
        assert client.get(url, headers=auth_headers(token_service, admin)).status_code == 200
        assert client.get(url, headers=auth_headers(token_service, stranger)).status_code == 403
        missing = f"/payments/transactions/check/{uuid.uuid4()}"
        assert client.get(missing, headers=auth_headers(token_service, reader)).status_code == 404

    def test_accept_manual_is_admin_only(self, client, db, reader, admin, token_service):
        tx = Transaction(
            user_id=reader.id,
            type=PurchaseType.CHAPTER.value,
            amount=500,
            currency_type=0,
            status=TransactionStatus.PENDING.value,
            provider="MANUAL",
        )
        db.add(tx)
        db.commit()

        url = f"/payments/accept-manual/{tx.id}"
        assert client.put(url, headers=auth_headers(token_service, reader)).status_code == 403

        res = client.put(url, headers=auth_headers(token_service, admin))
        assert res.status_code == 200
        assert res.json()["data"]["status"] == "SUCCESS"

        missing = client.put(
            f"/payments/accept-manual/{uuid.uuid4()}", headers=auth_headers(token_service, admin)
        )
        assert missing.status_code == 404
