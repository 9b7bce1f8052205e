"""Tests for AccountRepository."""

from datetime import datetime, timezone

import repositories.db_models as db_models
from repositories.account_repository import AccountRepository


class TestActiveLookups:
    """Archived accounts are invisible to every lookup."""

    def test_get_active_by_id(self, db_session, single_account):
        repo = AccountRepository(db_session)
        assert repo.get_active_by_id(single_account.id).id == single_account.id

    def test_get_active_by_id_skips_archived(self, db_session, make_account):
        make_account(id="old", is_archived=True)
        assert AccountRepository(db_session).get_active_by_id("old") is None

    def test_get_active_by_id_for_update(self, db_session, single_account):
        repo = AccountRepository(db_session)
        locked = repo.get_active_by_id(single_account.id, for_update=True)
        assert locked is single_account

    def test_find_by_email_ignores_case(self, db_session, single_account):
        repo = AccountRepository(db_session)
        assert [a.id for a in repo.find_by_email("Anita@EXAMPLE.com")] == [
            single_account.id
        ]

    def test_find_by_email_skips_archived(self, db_session, make_account):
        make_account(id="old", email="old@example.com", is_archived=True)
        assert AccountRepository(db_session).find_by_email("old@example.com") == []

    def test_find_by_whatsapp_numbers(self, db_session, complete_account):
        repo = AccountRepository(db_session)
        rows = repo.find_by_whatsapp_numbers(["9035283755", "+919035283755"])
        assert [a.id for a in rows] == [complete_account.id]

    def test_find_by_whatsapp_numbers_empty(self, db_session, complete_account):
        assert AccountRepository(db_session).find_by_whatsapp_numbers([]) == []

    def test_find_by_ids(self, db_session, complete_account, bare_account):
        repo = AccountRepository(db_session)
        rows = repo.find_by_ids(["+919035283755", "9035283755", "919035283755"])
        assert {a.id for a in rows} == {complete_account.id, bare_account.id}

    def test_find_by_fuzzy_name_contact_number(self, db_session, make_account):
        """Name contains the identifier and the contact number equals it."""
        make_account(id="g1", full_name="Crew 7000", whatsapp_number="7000")
        rows = AccountRepository(db_session).find_by_fuzzy_name("7000")
        assert [a.id for a in rows] == ["g1"]

    def test_find_by_fuzzy_name_null_name(self, db_session, bare_account):
        assert AccountRepository(db_session).find_by_fuzzy_name("9035") == []


class TestReassignReferences:
    def test_counts_updated_rows(self, db_session, make_account):
        make_account(id="p1")
        make_account(id="d1")
        make_account(id="other")
        db_session.add_all(
            [
                db_models.Post(user_id="d1", content="a"),
                db_models.Post(user_id="d1", content="b"),
                db_models.Post(user_id="other", content="c"),
                db_models.ChatConnection(sender_id="other", receiver_id="d1"),
            ]
        )
        db_session.commit()

        moved = AccountRepository(db_session).reassign_references("d1", "p1")
        db_session.commit()

        assert moved == 3
        owners = sorted(p.user_id for p in db_session.query(db_models.Post).all())
        assert owners == ["other", "p1", "p1"]
        assert db_session.query(db_models.ChatConnection).one().receiver_id == "p1"

    def test_no_references(self, db_session, make_account):
        make_account(id="p1")
        make_account(id="d1")
        assert AccountRepository(db_session).reassign_references("d1", "p1") == 0


class TestArchive:
    def test_archive_suffixes_email(self, db_session, single_account):
        when = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        AccountRepository(db_session).archive(single_account, when)
        db_session.commit()

        assert single_account.email == "anita@example.com_archived_1772366400000"
        assert single_account.is_archived is True

    def test_archive_without_email(self, db_session, make_account):
        account = make_account(id="noemail", email=None)
        AccountRepository(db_session).archive(account)
        db_session.commit()

        assert account.email is None
        assert account.is_archived is True
        assert account.archived_at is not None

    def test_archived_email_is_free_again(self, db_session, single_account, make_account):
        AccountRepository(db_session).archive(single_account)
        db_session.commit()

        reused = make_account(id="new", email="anita@example.com")
        assert reused.email == "anita@example.com"


class TestRecordLogin:
    def test_increments_count(self, db_session, complete_account):
        AccountRepository(db_session).record_login(complete_account)
        assert complete_account.login_count == 26
        assert complete_account.last_login is not None

    def test_first_login(self, db_session, single_account):
        AccountRepository(db_session).record_login(single_account)
        assert single_account.login_count == 1
