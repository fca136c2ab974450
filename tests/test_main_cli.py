from __future__ import annotations

from datetime import datetime, timedelta, timezone

from main import _list_accounts, _parse_args, main
from storefront.database import Database
from storefront.models import AccountStatus


def _account_fields(email: str) -> dict:
    return {
        "name": "Test User",
        "email": email,
        "company_name": "Parts LLC",
        "address": "1 Market Street",
        "phone_number": "+971500000000",
        "password_hash": "$pbkdf2-sha256$1000$c2FsdA$aGFzaA",
    }


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_list_accounts_accepts_status_filter() -> None:
    args = _parse_args(["list-accounts", "--status", "pending"])
    assert args.command == "list-accounts"
    assert args.status == "pending"


def test_list_accounts_prints_matching_rows(tmp_path, capsys) -> None:
    database = Database(tmp_path / "cli.sqlite3")
    database.initialize()
    database.insert_account(_account_fields("a@x.com"))
    database.insert_account(_account_fields("b@x.com"))
    database.set_account_status("b@x.com", AccountStatus.APPROVED)

    _list_accounts(database, "approved")

    output = capsys.readouterr().out
    assert "1 account(s) found" in output
    assert "b@x.com" in output
    assert "a@x.com" not in output


def test_purge_reset_codes_command(tmp_path, monkeypatch, capsys) -> None:
    db_path = tmp_path / "cli.sqlite3"
    database = Database(db_path)
    database.initialize()
    now = datetime.now(timezone.utc)
    database.insert_reset_code("a@x.com", "OLD00000", now - timedelta(hours=1), created_at=now - timedelta(hours=2))
    database.insert_reset_code("a@x.com", "LIVE0000", now + timedelta(hours=1), created_at=now)

    monkeypatch.setenv("STOREFRONT_DB_PATH", str(db_path))
    monkeypatch.delenv("STOREFRONT_CONFIG", raising=False)
    main(["purge-reset-codes"])

    assert "Removed 1 reset code(s)." in capsys.readouterr().out
    assert [code.code for code in database.list_reset_codes("a@x.com")] == ["LIVE0000"]
