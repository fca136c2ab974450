"""Tests for the out-of-band approval script."""

from __future__ import annotations

from storefront.database import Database
from storefront.models import AccountStatus
from scripts.review_registration import main


def _database_with_pending(tmp_path) -> Database:
    database = Database(tmp_path / "review.sqlite3")
    database.initialize()
    database.insert_account(
        {
            "name": "Test User",
            "email": "user@x.com",
            "company_name": "Parts LLC",
            "address": "1 Market Street",
            "phone_number": "+971500000000",
            "password_hash": "$pbkdf2-sha256$1000$c2FsdA$aGFzaA",
        }
    )
    return database


def test_approve_pending_registration(tmp_path, capsys) -> None:
    database = _database_with_pending(tmp_path)

    exit_code = main(["user@x.com", "approve", "--db", str(database.path)])

    assert exit_code == 0
    assert "is now approved" in capsys.readouterr().out
    stored = database.find_account_by_email("user@x.com")
    assert stored is not None
    assert stored.status is AccountStatus.APPROVED


def test_rejected_registration_cannot_be_approved(tmp_path, capsys) -> None:
    database = _database_with_pending(tmp_path)
    assert main(["user@x.com", "reject", "--db", str(database.path)]) == 0

    exit_code = main(["user@x.com", "approve", "--db", str(database.path)])

    assert exit_code == 1
    assert "already rejected" in capsys.readouterr().err
    stored = database.find_account_by_email("user@x.com")
    assert stored is not None
    assert stored.status is AccountStatus.REJECTED


def test_unknown_email_reports_error(tmp_path, capsys) -> None:
    database = _database_with_pending(tmp_path)

    assert main(["nobody@x.com", "approve", "--db", str(database.path)]) == 1
    assert "Account not found" in capsys.readouterr().err
