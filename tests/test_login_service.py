"""
tests.test_login_service

Login/logout state machine tests against in-memory collaborators.

Responsibilities:
- SSO bypass policy, authenticator branches and database login.
- Exactly-once audit per attempt, and audit failures not changing results.
- Session mutation only on the success path; rollback on store failures.
"""

from __future__ import annotations

import pytest

from tests.fakes import (
    NOW,
    FakeAuthenticator,
    FakeSso,
    FakeUnitOfWork,
    FakeUserDirectory,
    Harness,
    RecordingAudit,
    make_user,
)
from vault_login.auth.models import AuthenticationStatus


@pytest.mark.asyncio
async def test_login_success_establishes_session(harness: Harness) -> None:
    harness.roles.roles = frozenset({"user", "admin"})
    svc = harness.service()

    outcome = await svc.login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.success
    assert outcome.message == ""
    assert harness.authenticator.calls == [("alice", ["pw"])]
    assert harness.ctx.username == "alice"
    assert harness.ctx.roles == frozenset({"user", "admin"})
    assert harness.users.users["alice"].last_login == NOW
    assert harness.users.saved == [harness.users.users["alice"]]
    assert harness.uow.commits == 1

    user = await svc.get_login()
    assert user is not None
    assert user.username == "alice"
    assert user.roles == frozenset({"user", "admin"})


@pytest.mark.asyncio
async def test_login_unknown_user_fails_without_session(harness: Harness) -> None:
    svc = harness.service()

    outcome = await svc.login("bob", ["pw"])

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "user not found"
    assert harness.ctx.username is None
    assert harness.ctx.roles is None
    assert harness.uow.commits == 0
    assert await svc.get_login() is None


@pytest.mark.asyncio
async def test_login_inactive_user_is_not_found() -> None:
    h = Harness(users=FakeUserDirectory(make_user("alice", active=False)))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.message == "user not found"
    assert h.ctx.username is None


@pytest.mark.asyncio
async def test_sso_bypass_denied_never_calls_authenticator() -> None:
    h = Harness(sso=FakeSso(enabled=True, bypass=["admin"]))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "bypass SSO not allowed"
    assert h.authenticator.calls == []
    assert h.ctx.username is None
    assert len(h.audit.entries) == 1
    assert h.audit.entries[0]["success"] is False
    assert h.audit.entries[0]["message"] == "bypass SSO not allowed"


@pytest.mark.asyncio
async def test_sso_bypass_allowed_uses_local_credentials() -> None:
    h = Harness(sso=FakeSso(enabled=True, bypass=["alice"]))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.success
    assert len(h.authenticator.calls) == 1


@pytest.mark.asyncio
async def test_sso_disabled_ignores_bypass_rules() -> None:
    h = Harness(sso=FakeSso(enabled=False, bypass=[]))

    await h.service().login("alice", ["pw"])

    assert len(h.authenticator.calls) == 1


@pytest.mark.asyncio
async def test_two_step_required_leaves_session_untouched() -> None:
    h = Harness(authenticator=FakeAuthenticator(AuthenticationStatus.two_step_required))
    h.ctx.set_username("carol")
    h.ctx.set_roles(frozenset({"user"}))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.two_step_required
    assert outcome.message == "two-step authentication required"
    assert h.ctx.username == "carol"
    assert h.ctx.roles == frozenset({"user"})
    assert h.users.saved == []
    assert h.audit.entries[0]["success"] is False


@pytest.mark.asyncio
async def test_authenticator_failure_message() -> None:
    h = Harness(authenticator=FakeAuthenticator(AuthenticationStatus.failure))

    outcome = await h.service().login("alice", ["wrong"])

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "authentication failed"
    assert h.users.lookups == []


@pytest.mark.asyncio
async def test_login_writes_one_audit_entry() -> None:
    h = Harness()

    await h.service().login("alice", ["pw"])

    assert h.audit.entries == [
        {
            "timestamp": NOW,
            "principal": "alice",
            "ip": "10.0.0.7",
            "action": "login",
            "target": "",
            "success": True,
            "message": "",
        }
    ]


@pytest.mark.parametrize(
    ("principal", "expected"),
    [
        ("a" * 100, "a" * 64),
        ("a" * 64, "a" * 64),
        ("alice", "alice"),
        (None, None),
    ],
)
@pytest.mark.asyncio
async def test_principal_is_truncated_before_authentication(
    principal: str | None, expected: str | None
) -> None:
    h = Harness()

    await h.service(max_username_length=64).login(principal, ["pw"])

    assert h.authenticator.calls[0][0] == expected
    assert h.audit.entries[0]["principal"] == expected


@pytest.mark.asyncio
async def test_audit_failure_does_not_change_result() -> None:
    h = Harness(audit=RecordingAudit(fail=True))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.success
    assert h.ctx.username == "alice"
    assert len(h.audit.entries) == 1


@pytest.mark.asyncio
async def test_store_failure_on_save_fails_login_and_rolls_back() -> None:
    h = Harness(users=FakeUserDirectory(make_user("alice"), fail_save=True))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "user store unavailable"
    assert h.ctx.username is None
    assert h.ctx.roles is None
    assert h.uow.rollbacks == 1
    assert h.audit.entries[0]["success"] is False


@pytest.mark.asyncio
async def test_commit_failure_restores_previous_session() -> None:
    h = Harness(uow=FakeUnitOfWork(fail_commit=True))

    outcome = await h.service().login("alice", ["pw"])

    assert outcome.status is AuthenticationStatus.failure
    assert h.ctx.username is None
    assert h.ctx.roles is None
    assert h.uow.rollbacks == 1


@pytest.mark.asyncio
async def test_check_sso_login_disabled_is_silent_success(harness: Harness) -> None:
    outcome = await harness.service().check_sso_login()

    assert outcome.status is AuthenticationStatus.success
    assert harness.audit.entries == []
    assert harness.users.lookups == []
    assert harness.ctx.username is None


@pytest.mark.asyncio
async def test_check_sso_login_attaches_asserted_user() -> None:
    h = Harness(sso=FakeSso(enabled=True, principal="alice"))

    outcome = await h.service().check_sso_login()

    assert outcome.status is AuthenticationStatus.success
    assert h.authenticator.calls == []
    assert h.ctx.username == "alice"
    assert len(h.audit.entries) == 1
    assert h.audit.entries[0]["success"] is True


@pytest.mark.asyncio
async def test_check_sso_login_unknown_user() -> None:
    h = Harness(sso=FakeSso(enabled=True, principal="mallory"))

    outcome = await h.service().check_sso_login()

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "user not found"
    assert h.ctx.username is None
    assert [e["success"] for e in h.audit.entries] == [False]


@pytest.mark.asyncio
async def test_check_sso_login_does_not_truncate_asserted_principal() -> None:
    victim = "a" * 64
    asserted = victim + "-contractor"
    h = Harness(
        users=FakeUserDirectory(make_user(victim)),
        sso=FakeSso(enabled=True, principal=asserted),
    )

    outcome = await h.service(max_username_length=64).check_sso_login()

    assert outcome.status is AuthenticationStatus.failure
    assert outcome.message == "user not found"
    assert h.users.lookups == [asserted]
    assert h.ctx.username is None
    assert h.users.users[victim].last_login is None
    assert h.audit.entries[0]["principal"] == asserted


@pytest.mark.asyncio
async def test_check_sso_login_without_assertion() -> None:
    h = Harness(sso=FakeSso(enabled=True, principal=None))

    outcome = await h.service().check_sso_login()

    assert outcome.status is AuthenticationStatus.failure
    assert h.audit.entries[0]["principal"] is None


@pytest.mark.asyncio
async def test_logout_audits_then_clears_session(harness: Harness) -> None:
    svc = harness.service()
    await svc.login("alice", ["pw"])
    old_session_id = harness.ctx.session_id
    harness.ctx.init_csrf_token()

    assert await svc.logout() is True

    assert harness.audit.entries[-1] == {
        "timestamp": NOW,
        "principal": "alice",
        "ip": "10.0.0.7",
        "action": "logout",
        "target": "",
        "success": True,
        "message": "",
    }
    assert harness.ctx.username is None
    assert harness.ctx.roles is None
    assert harness.ctx.csrf_token is None
    assert harness.ctx.session_id != old_session_id
    assert await svc.get_login() is None


@pytest.mark.asyncio
async def test_logout_anonymous_still_succeeds() -> None:
    h = Harness(audit=RecordingAudit(fail=True), uow=FakeUnitOfWork(fail_commit=True))

    assert await h.service().logout() is True
    assert h.audit.entries[0]["principal"] is None
    assert h.uow.rollbacks == 1


@pytest.mark.asyncio
async def test_get_login_tolerates_deactivated_user(harness: Harness) -> None:
    svc = harness.service()
    await svc.login("alice", ["pw"])
    harness.users.users["alice"].active = False

    assert await svc.get_login() is None
    # The stale identity stays on the session; reads just treat it as logged out.
    assert harness.ctx.username == "alice"


@pytest.mark.asyncio
async def test_get_login_store_failure_reads_as_anonymous() -> None:
    h = Harness(users=FakeUserDirectory(fail_lookup=True))
    h.ctx.set_username("alice")
    h.ctx.set_roles(frozenset({"user"}))

    assert await h.service().get_login() is None


# --- Module Notes -----------------------------------------------------------
# Authorization, report and settings lookups are covered in test_login_lookups.py.
