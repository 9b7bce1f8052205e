"""End-to-end: duplicate accounts for one phone number are merged on login."""

import re

import repositories.db_models as db_models


class TestAccountMergeFlow:
    def test_login_merge_and_relogin(
        self, client, db_session, complete_account, bare_account
    ):
        # A post written under the duplicate account
        db_session.add(db_models.Post(user_id=bare_account.id, content="Bunker query"))
        db_session.commit()

        # 1. Login surfaces both accounts, richest first
        login = client.post(
            "/api/auth/login",
            json={"identifier": "+919035283755", "password": "seafarer"},
        ).json()
        assert login["requires_merge"] is True
        session = login["merge_session"]
        first, second = session["candidates"]
        assert first["id"] == complete_account.id
        assert first["completeness"] > second["completeness"]
        assert first["recommendation"] == "RECOMMENDED - Most complete profile"

        # 2. Merge the bare account into the complete one
        merged = client.post(
            "/api/auth/merge-accounts",
            json={
                "session_id": session["session_id"],
                "primary_account_id": first["id"],
                "duplicate_account_ids": [second["id"]],
                "strategy": "merge_data",
            },
        )
        assert merged.status_code == 200
        assert merged.json()["user"]["question_count"] == (
            first["question_count"] + second["question_count"]
        )

        db_session.expire_all()
        duplicate = db_session.get(db_models.Account, bare_account.id)
        assert duplicate.is_archived is True
        assert re.fullmatch(
            r"9035283755@whatsapp\.local_archived_\d{13}", duplicate.email
        )
        assert db_session.query(db_models.Post).one().user_id == complete_account.id

        # 3. Either number form now resolves to the surviving account
        for identifier in ("+919035283755", "9035283755"):
            relogin = client.post(
                "/api/auth/login",
                json={"identifier": identifier, "password": "seafarer"},
            )
            assert relogin.status_code == 200
            assert relogin.json()["requires_merge"] is False
            assert relogin.json()["user"]["id"] == complete_account.id

        # 4. The first password presented after the merge stuck
        wrong = client.post(
            "/api/auth/login",
            json={"identifier": "+919035283755", "password": "other"},
        )
        assert wrong.status_code == 401

    def test_skip_keeps_both_accounts(
        self, client, db_session, complete_account, bare_account
    ):
        login = client.post(
            "/api/auth/login",
            json={"identifier": "9035283755", "password": "x"},
        ).json()

        skipped = client.post(
            "/api/auth/skip-merge",
            json={
                "session_id": login["merge_session"]["session_id"],
                "selected_account_id": complete_account.id,
            },
        )
        assert skipped.status_code == 200

        # Still ambiguous next time
        again = client.post(
            "/api/auth/login",
            json={"identifier": "9035283755", "password": "x"},
        ).json()
        assert again["requires_merge"] is True
