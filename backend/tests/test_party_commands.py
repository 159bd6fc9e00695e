# tests/test_party_commands.py
"""
Tests for the party state machine and invitation commands.

Tests cover:
- Add: PENDING + invitation + email, duplicates, account type, ownership
- Edit: email change resets status and re-issues, duplicate emails
- Remove: soft for trusts, hard for companies and partnerships
- Respond: invitee only, only from PENDING
- Verify / accept: identity check, single use, expiry, cross-table approval
- Registration linking
- End-to-end invite/register/accept and resend flows
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.utils import timezone

from accounts.authz import ActorContext
from parties import commands
from parties.commands import PartyUpdate
from parties.models import (
    CompanyInvitation,
    CompanyPartner,
    PartnershipPartner,
    PartyStatus,
    SpouseInvitation,
    SpousePartner,
    TrustInvitation,
    TrustPartner,
)

User = get_user_model()


def add(actor, account, party_type, email, **kwargs):
    result = commands.add_party(actor, account.public_id, party_type, email, **kwargs)
    assert result.success, result.error
    return result


# =============================================================================
# Add Party Tests
# =============================================================================

@pytest.mark.django_db
class TestAddParty:
    def test_creates_pending_party_and_invitation(self, owner_actor, company_account):
        result = add(
            owner_actor, company_account, "company", "Dana@Example.com",
            name="Dana", is_director=True, ownership_percent=40,
        )

        party = CompanyPartner.objects.get(public_id=result.data["party"]["id"])
        assert party.status == PartyStatus.PENDING
        assert party.email == "dana@example.com"
        assert party.user is None
        assert party.ownership_percent == Decimal("40")
        assert result.data["party"]["role"] == "Director"
        assert result.data["is_existing_user"] is False

        invitation = CompanyInvitation.objects.get(account=company_account, email="dana@example.com")
        assert invitation.percentage == Decimal("40")
        assert invitation.role == "Director"
        assert result.data["token"] not in invitation.token_hash

    def test_sends_invitation_email_with_token_link(self, owner_actor, company_account):
        result = add(owner_actor, company_account, "company", "dana@example.com", name="Dana")

        assert result.data["invitation_sent"] is True
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ["dana@example.com"]
        assert "Olivia Owner" in message.subject
        assert result.data["token"] in message.body
        assert "https://portal.test/accept-invitation?" in message.body

    def test_email_failure_does_not_undo_the_add(self, owner_actor, company_account, monkeypatch):
        def broken_send(*args, **kwargs):
            raise ConnectionError("smtp down")

        monkeypatch.setattr("parties.email_service.send_mail", broken_send)

        result = add(owner_actor, company_account, "company", "dana@example.com")

        assert result.data["invitation_sent"] is False
        assert CompanyPartner.objects.filter(email="dana@example.com").exists()
        assert CompanyInvitation.objects.filter(email="dana@example.com").exists()

    def test_existing_user_is_linked_and_named(self, owner_actor, company_account, invitee):
        result = add(owner_actor, company_account, "company", "invitee@test.com")

        party = CompanyPartner.objects.get(public_id=result.data["party"]["id"])
        assert result.data["is_existing_user"] is True
        assert party.user == invitee
        assert party.name == "Ivy Invitee"
        assert party.status == PartyStatus.PENDING

    def test_duplicate_email_rejected_without_changes(self, owner_actor, company_account):
        add(owner_actor, company_account, "company", "dana@example.com")

        result = commands.add_party(owner_actor, company_account.public_id, "company", "DANA@example.com")

        assert result.code == "duplicate_party"
        assert CompanyPartner.objects.filter(account=company_account).count() == 1
        assert CompanyInvitation.objects.filter(account=company_account).count() == 1

    def test_same_email_on_another_account_is_fine(self, owner_actor, owner, company_account, account_factory):
        second = account_factory(owner, company_account.AccountType.COMPANY, "Second Co")
        add(owner_actor, company_account, "company", "dana@example.com")
        add(owner_actor, second, "company", "dana@example.com")

        assert CompanyPartner.objects.filter(email="dana@example.com").count() == 2

    @pytest.mark.parametrize("party_type,account_fixture", [
        ("company", "trust_account"),
        ("trust", "company_account"),
        ("partnership", "individual_account"),
        ("spouse", "company_account"),
    ])
    def test_wrong_account_type(self, request, owner_actor, party_type, account_fixture):
        account = request.getfixturevalue(account_fixture)

        result = commands.add_party(owner_actor, account.public_id, party_type, "dana@example.com")

        assert result.code == "wrong_account_type"

    def test_only_owner_can_add(self, other_actor, company_account):
        result = commands.add_party(other_actor, company_account.public_id, "company", "dana@example.com")
        assert result.code == "access_denied"
        assert not CompanyPartner.objects.exists()

    def test_unknown_account(self, owner_actor):
        result = commands.add_party(owner_actor, uuid4(), "company", "dana@example.com")
        assert result.code == "not_found"

    def test_unknown_party_type(self, owner_actor, company_account):
        result = commands.add_party(owner_actor, company_account.public_id, "syndicate", "dana@example.com")
        assert result.code == "unknown_party_type"

    def test_rejects_fields_of_other_party_types(self, owner_actor, trust_account):
        result = commands.add_party(
            owner_actor, trust_account.public_id, "trust", "ben@example.com", is_director=True
        )
        assert not result.success
        assert "is_director" in result.error

    @pytest.mark.parametrize("percent", [-1, 100.01, "lots"])
    def test_percentage_range(self, owner_actor, partnership_account, percent):
        result = commands.add_party(
            owner_actor, partnership_account.public_id, "partnership", "pat@example.com",
            ownership_percent=percent,
        )
        assert result.code == "invalid"

    def test_invalid_email(self, owner_actor, company_account):
        result = commands.add_party(owner_actor, company_account.public_id, "company", "not-an-email")
        assert result.code == "invalid"


# =============================================================================
# Display Role Tests
# =============================================================================

@pytest.mark.django_db
class TestCompanyDisplayRole:
    @pytest.mark.parametrize("flags,role,expected", [
        ({"is_director": True, "is_shareholder": True}, "", "Director & Shareholder"),
        ({"is_director": True}, "", "Director"),
        ({"is_shareholder": True}, "", "Shareholder"),
        ({}, "Secretary", "Secretary"),
    ])
    def test_role_from_flags(self, owner_actor, company_account, flags, role, expected):
        result = add(owner_actor, company_account, "company", "dana@example.com", role=role, **flags)
        assert result.data["party"]["role"] == expected


# =============================================================================
# List / Get Tests
# =============================================================================

@pytest.mark.django_db
class TestListParties:
    def test_lists_parties_and_live_invitations(self, owner_actor, company_account):
        add(owner_actor, company_account, "company", "a@example.com")
        add(owner_actor, company_account, "company", "b@example.com")

        result = commands.list_parties(owner_actor, company_account.public_id)

        assert [p["email"] for p in result.data["parties"]] == ["a@example.com", "b@example.com"]
        assert {i["email"] for i in result.data["invitations"]} == {"a@example.com", "b@example.com"}
        assert all("token_hash" not in i for i in result.data["invitations"])

    def test_removed_trust_parties_hidden_by_default(self, owner_actor, trust_account):
        party_id = add(owner_actor, trust_account, "trust", "ben@example.com").data["party"]["id"]
        commands.remove_party(owner_actor, "trust", party_id)

        visible = commands.list_parties(owner_actor, trust_account.public_id)
        everything = commands.list_parties(owner_actor, trust_account.public_id, include_removed=True)

        assert visible.data["parties"] == []
        assert [p["status"] for p in everything.data["parties"]] == [PartyStatus.REMOVED]

    def test_individual_account_lists_spouse(self, owner_actor, individual_account):
        add(owner_actor, individual_account, "spouse", "sam@example.com")

        result = commands.list_parties(owner_actor, individual_account.public_id)

        assert [p["party_type"] for p in result.data["parties"]] == ["spouse"]

    def test_party_type_must_match_account(self, owner_actor, individual_account):
        result = commands.list_parties(owner_actor, individual_account.public_id, party_type="company")
        assert result.code == "wrong_account_type"

    def test_get_party_is_owner_only(self, owner_actor, other_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "dana@example.com").data["party"]["id"]

        assert commands.get_party(owner_actor, "company", party_id).data["party"]["email"] == "dana@example.com"
        assert commands.get_party(other_actor, "company", party_id).code == "access_denied"
        assert commands.get_party(owner_actor, "company", uuid4()).code == "not_found"


# =============================================================================
# Update Party Tests
# =============================================================================

@pytest.mark.django_db
class TestUpdateParty:
    def test_plain_edit_keeps_status(self, owner_actor, company_account, invitee_actor):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]
        commands.respond_to_invitation(invitee_actor, "company", party_id, approve=True)
        mail.outbox.clear()

        result = commands.update_party(
            owner_actor, "company", party_id, PartyUpdate(name="Ivy I.", is_shareholder=True, share_count=100)
        )

        party = CompanyPartner.objects.get(public_id=party_id)
        assert result.data["email_changed"] is False
        assert party.status == PartyStatus.APPROVED
        assert party.name == "Ivy I."
        assert party.share_count == 100
        assert mail.outbox == []

    def test_email_change_resets_and_reissues(self, owner_actor, company_account, invitee_actor):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]
        commands.respond_to_invitation(invitee_actor, "company", party_id, approve=True)
        mail.outbox.clear()

        result = commands.update_party(owner_actor, "company", party_id, PartyUpdate(email="new@example.com"))

        party = CompanyPartner.objects.get(public_id=party_id)
        assert result.data["email_changed"] is True
        assert result.data["invitation_sent"] is True
        assert party.status == PartyStatus.PENDING
        assert party.user is None
        assert party.responded_at is None
        assert CompanyInvitation.objects.filter(email="new@example.com").count() == 1
        assert mail.outbox[0].to == ["new@example.com"]

    def test_email_change_revokes_old_invitations(self, owner_actor, company_account):
        added = add(owner_actor, company_account, "company", "old@example.com")

        commands.update_party(owner_actor, "company", added.data["party"]["id"], PartyUpdate(email="new@example.com"))

        assert not CompanyInvitation.objects.filter(email="old@example.com").exists()
        assert commands.verify_invitation_token("old@example.com", added.data["token"]).code == "invitation_invalid"

    def test_email_change_to_registered_user_relinks(self, owner_actor, company_account, invitee):
        party_id = add(owner_actor, company_account, "company", "dana@example.com", name="Dana").data["party"]["id"]

        commands.update_party(owner_actor, "company", party_id, PartyUpdate(email="invitee@test.com"))

        party = CompanyPartner.objects.get(public_id=party_id)
        assert party.user == invitee
        assert party.name == "Ivy Invitee"

    def test_email_change_keeps_supplied_name(self, owner_actor, company_account, invitee):
        party_id = add(owner_actor, company_account, "company", "dana@example.com").data["party"]["id"]

        commands.update_party(
            owner_actor, "company", party_id, PartyUpdate(email="invitee@test.com", name="Ivy (Director)")
        )

        assert CompanyPartner.objects.get(public_id=party_id).name == "Ivy (Director)"

    def test_email_change_to_existing_party_rejected(self, owner_actor, company_account):
        add(owner_actor, company_account, "company", "a@example.com")
        party_id = add(owner_actor, company_account, "company", "b@example.com").data["party"]["id"]

        result = commands.update_party(owner_actor, "company", party_id, PartyUpdate(email="a@example.com"))

        assert result.code == "duplicate_party"
        assert CompanyPartner.objects.get(public_id=party_id).email == "b@example.com"

    def test_same_email_is_not_a_change(self, owner_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "a@example.com").data["party"]["id"]

        result = commands.update_party(owner_actor, "company", party_id, PartyUpdate(email="A@example.com"))

        assert result.data["email_changed"] is False
        assert CompanyInvitation.objects.count() == 1

    def test_fields_must_belong_to_party_type(self, owner_actor, partnership_account):
        party_id = add(owner_actor, partnership_account, "partnership", "pat@example.com").data["party"]["id"]

        result = commands.update_party(owner_actor, "partnership", party_id, PartyUpdate(is_director=True))

        assert not result.success
        assert "is_director" in result.error

    def test_non_owner_cannot_edit(self, owner_actor, other_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "a@example.com").data["party"]["id"]
        result = commands.update_party(other_actor, "company", party_id, PartyUpdate(name="X"))
        assert result.code == "access_denied"

    def test_removed_party_cannot_be_edited(self, owner_actor, trust_account):
        party_id = add(owner_actor, trust_account, "trust", "ben@example.com").data["party"]["id"]
        commands.remove_party(owner_actor, "trust", party_id)

        result = commands.update_party(owner_actor, "trust", party_id, PartyUpdate(name="Ben"))

        assert result.code == "invalid_state"


# =============================================================================
# Remove Party Tests
# =============================================================================

@pytest.mark.django_db
class TestRemoveParty:
    def test_trust_removal_is_soft(self, owner_actor, trust_account):
        party_id = add(owner_actor, trust_account, "trust", "ben@example.com").data["party"]["id"]

        result = commands.remove_party(owner_actor, "trust", party_id)

        assert result.data["soft_removed"] is True
        assert result.data["invitations_revoked"] == 1
        assert TrustPartner.objects.get(public_id=party_id).status == PartyStatus.REMOVED
        assert not TrustInvitation.objects.exists()

    def test_removed_trust_party_can_be_added_again(self, owner_actor, trust_account):
        party_id = add(owner_actor, trust_account, "trust", "ben@example.com").data["party"]["id"]
        commands.remove_party(owner_actor, "trust", party_id)

        add(owner_actor, trust_account, "trust", "ben@example.com")

        assert TrustPartner.objects.filter(account=trust_account, status=PartyStatus.PENDING).count() == 1

    @pytest.mark.parametrize("party_type,account_fixture,model", [
        ("company", "company_account", CompanyPartner),
        ("partnership", "partnership_account", PartnershipPartner),
    ])
    def test_company_and_partnership_removal_deletes(
        self, request, owner_actor, party_type, account_fixture, model
    ):
        account = request.getfixturevalue(account_fixture)
        party_id = add(owner_actor, account, party_type, "x@example.com").data["party"]["id"]

        result = commands.remove_party(owner_actor, party_type, party_id)

        assert result.data["soft_removed"] is False
        assert not model.objects.filter(public_id=party_id).exists()

    def test_non_owner_cannot_remove(self, owner_actor, other_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "a@example.com").data["party"]["id"]
        assert commands.remove_party(other_actor, "company", party_id).code == "access_denied"
        assert CompanyPartner.objects.filter(public_id=party_id).exists()


# =============================================================================
# Respond Tests
# =============================================================================

@pytest.mark.django_db
class TestRespondToInvitation:
    @pytest.mark.parametrize("approve,expected", [
        (True, PartyStatus.APPROVED),
        (False, PartyStatus.REJECTED),
    ])
    def test_invitee_responds(self, owner_actor, invitee_actor, invitee, company_account, approve, expected):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]

        result = commands.respond_to_invitation(invitee_actor, "company", party_id, approve=approve)

        party = CompanyPartner.objects.get(public_id=party_id)
        assert result.data["status"] == expected
        assert party.status == expected
        assert party.responded_at is not None
        assert party.user == invitee

    def test_cannot_respond_twice(self, owner_actor, invitee_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]
        commands.respond_to_invitation(invitee_actor, "company", party_id, approve=False)

        result = commands.respond_to_invitation(invitee_actor, "company", party_id, approve=True)

        assert result.code == "invalid_state"
        assert "already" in result.error
        assert CompanyPartner.objects.get(public_id=party_id).status == PartyStatus.REJECTED

    def test_someone_else_cannot_respond(self, owner_actor, other_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]

        result = commands.respond_to_invitation(other_actor, "company", party_id, approve=True)

        assert result.code == "access_denied"
        assert CompanyPartner.objects.get(public_id=party_id).status == PartyStatus.PENDING

    def test_linked_user_may_respond_after_email_mismatch(self, owner_actor, company_account, invitee):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]
        invitee.email = "ivy@elsewhere.com"
        invitee.save()

        result = commands.respond_to_invitation(ActorContext(user=invitee), "company", party_id, approve=True)

        assert result.success

    def test_removed_party_cannot_respond(self, owner_actor, invitee_actor, trust_account):
        party_id = add(owner_actor, trust_account, "trust", "invitee@test.com").data["party"]["id"]
        commands.remove_party(owner_actor, "trust", party_id)

        result = commands.respond_to_invitation(invitee_actor, "trust", party_id, approve=True)

        assert result.code == "invalid_state"

    def test_unknown_party(self, invitee_actor):
        result = commands.respond_to_invitation(invitee_actor, "company", uuid4(), approve=True)
        assert result.code == "not_found"


# =============================================================================
# Resend Tests
# =============================================================================

@pytest.mark.django_db
class TestResendInvitation:
    def test_scenario_resend_keeps_both_tokens_valid(self, owner_actor, company_account):
        added = add(owner_actor, company_account, "company", "dana@example.com")
        party_id = added.data["party"]["id"]

        resent = commands.resend_invitation(owner_actor, "company", party_id)

        assert resent.success
        assert CompanyInvitation.objects.filter(account=company_account, email="dana@example.com").count() == 2
        assert CompanyPartner.objects.get(public_id=party_id).status == PartyStatus.PENDING
        for token in (added.data["token"], resent.data["token"]):
            assert commands.verify_invitation_token("dana@example.com", token).success
        assert len(mail.outbox) == 2

    def test_only_pending_parties(self, owner_actor, invitee_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "invitee@test.com").data["party"]["id"]
        commands.respond_to_invitation(invitee_actor, "company", party_id, approve=True)

        result = commands.resend_invitation(owner_actor, "company", party_id)

        assert result.code == "invalid_state"
        assert CompanyInvitation.objects.count() == 1

    def test_non_owner_cannot_resend(self, owner_actor, other_actor, company_account):
        party_id = add(owner_actor, company_account, "company", "a@example.com").data["party"]["id"]
        assert commands.resend_invitation(other_actor, "company", party_id).code == "access_denied"


# =============================================================================
# Verify Token Tests
# =============================================================================

@pytest.mark.django_db
class TestVerifyInvitationToken:
    def test_preview(self, owner_actor, trust_account):
        token = add(owner_actor, trust_account, "trust", "ben@example.com", beneficiary_percent=50).data["token"]

        result = commands.verify_invitation_token("ben@example.com", token)

        assert result.data["valid"] is True
        assert result.data["party_type"] == "trust"
        assert result.data["account_name"] == "Owner Family Trust"
        assert result.data["invited_by"] == "Olivia Owner"
        assert result.data["percentage"] == "50.00"

    def test_invalid_token(self, owner_actor, trust_account):
        add(owner_actor, trust_account, "trust", "ben@example.com")
        result = commands.verify_invitation_token("ben@example.com", "f" * 64)
        assert result.code == "invitation_invalid"

    def test_verify_does_not_consume(self, owner_actor, trust_account):
        token = add(owner_actor, trust_account, "trust", "ben@example.com").data["token"]

        commands.verify_invitation_token("ben@example.com", token)

        assert TrustInvitation.objects.get().accepted_at is None
        assert commands.verify_invitation_token("ben@example.com", token).success


# =============================================================================
# Accept Tests
# =============================================================================

@pytest.mark.django_db
class TestAcceptInvitation:
    def test_accept_approves_and_links(self, owner_actor, invitee_actor, invitee, company_account):
        added = add(owner_actor, company_account, "company", "invitee@test.com")

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        party = CompanyPartner.objects.get(public_id=added.data["party"]["id"])
        invitation = CompanyInvitation.objects.get()
        assert result.success
        assert result.data["approved"] == 1
        assert party.status == PartyStatus.APPROVED
        assert party.user == invitee
        assert party.responded_at is not None
        assert invitation.accepted_at is not None

    def test_token_is_single_use(self, owner_actor, invitee_actor, company_account):
        token = add(owner_actor, company_account, "company", "invitee@test.com").data["token"]

        first = commands.accept_invitation(invitee_actor, "invitee@test.com", token)
        second = commands.accept_invitation(invitee_actor, "invitee@test.com", token)

        assert first.success
        assert second.code == "invitation_invalid"

    def test_email_must_match_caller(self, owner_actor, other_actor, company_account):
        token = add(owner_actor, company_account, "company", "invitee@test.com").data["token"]

        result = commands.accept_invitation(other_actor, "invitee@test.com", token)

        assert result.code == "identity_mismatch"
        assert result.error == "Email does not match authenticated user."
        assert CompanyInvitation.objects.get().accepted_at is None

    def test_expired_token(self, owner_actor, invitee_actor, company_account):
        token = add(owner_actor, company_account, "company", "invitee@test.com").data["token"]
        CompanyInvitation.objects.update(expires_at=timezone.now() - timedelta(minutes=1))

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", token)

        assert result.code == "invitation_invalid"
        assert CompanyPartner.objects.get().status == PartyStatus.PENDING

    def test_accept_after_reject_keeps_rejection(self, owner_actor, invitee_actor, invitee, company_account):
        added = add(owner_actor, company_account, "company", "invitee@test.com")
        commands.respond_to_invitation(invitee_actor, "company", added.data["party"]["id"], approve=False)

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        assert result.data["approved"] == 0
        assert CompanyPartner.objects.get().status == PartyStatus.REJECTED

    def test_accept_reaches_every_party_table_on_the_account(
        self, owner_actor, invitee_actor, invitee, company_account
    ):
        added = add(owner_actor, company_account, "company", "invitee@test.com")
        # A row of another type on the same account, created outside the type check
        stray = TrustPartner.objects.create(account=company_account, email="invitee@test.com")

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        stray.refresh_from_db()
        assert result.data["approved"] == 2
        assert stray.status == PartyStatus.APPROVED
        assert stray.user == invitee

    def test_accept_leaves_other_accounts_alone(
        self, owner_actor, invitee_actor, owner, company_account, account_factory
    ):
        other = account_factory(owner, company_account.AccountType.COMPANY, "Second Co")
        token = add(owner_actor, company_account, "company", "invitee@test.com").data["token"]
        add(owner_actor, other, "company", "invitee@test.com")

        commands.accept_invitation(invitee_actor, "invitee@test.com", token)

        assert CompanyPartner.objects.get(account=other).status == PartyStatus.PENDING

    def test_restricting_party_type(self, owner_actor, invitee_actor, company_account):
        token = add(owner_actor, company_account, "company", "invitee@test.com").data["token"]

        wrong = commands.accept_invitation(invitee_actor, "invitee@test.com", token, party_type="trust")
        right = commands.accept_invitation(invitee_actor, "invitee@test.com", token, party_type="company")

        assert wrong.code == "invitation_invalid"
        assert right.success

    def test_soft_removed_trust_party_cannot_accept(self, owner_actor, invitee_actor, trust_account):
        added = add(owner_actor, trust_account, "trust", "invitee@test.com")
        commands.remove_party(owner_actor, "trust", added.data["party"]["id"])

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        party = TrustPartner.objects.get(public_id=added.data["party"]["id"])
        assert result.code == "invitation_invalid"
        assert party.status == PartyStatus.REMOVED
        assert party.user is None

    @pytest.mark.parametrize("party_type,account_fixture", [
        ("company", "company_account"),
        ("partnership", "partnership_account"),
    ])
    def test_deleted_party_cannot_accept(self, request, owner_actor, invitee_actor, party_type, account_fixture):
        account = request.getfixturevalue(account_fixture)
        added = add(owner_actor, account, party_type, "invitee@test.com")
        commands.remove_party(owner_actor, party_type, added.data["party"]["id"])

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        assert result.code == "invitation_invalid"

    def test_live_invitation_without_active_party_is_rejected(
        self, owner_actor, invitee_actor, trust_account
    ):
        added = add(owner_actor, trust_account, "trust", "invitee@test.com")
        # Row removed without going through remove_party, so the invitation survives
        TrustPartner.objects.update(status=PartyStatus.REMOVED)

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        assert result.code == "invitation_invalid"
        assert TrustInvitation.objects.get().accepted_at is None
        assert TrustPartner.objects.get().user is None


# =============================================================================
# Spouse Tests
# =============================================================================

@pytest.mark.django_db
class TestSpouseParties:
    def test_add_spouse_to_individual_account(self, owner_actor, individual_account):
        result = add(owner_actor, individual_account, "spouse", "sam@example.com", name="Sam")

        party = SpousePartner.objects.get(public_id=result.data["party"]["id"])
        assert party.status == PartyStatus.PENDING
        assert result.data["party"]["role"] == "Spouse"
        assert SpouseInvitation.objects.filter(account=individual_account, email="sam@example.com").exists()

    def test_only_one_spouse_per_account(self, owner_actor, individual_account):
        add(owner_actor, individual_account, "spouse", "sam@example.com")

        result = commands.add_party(owner_actor, individual_account.public_id, "spouse", "alex@example.com")

        assert result.code == "party_limit"
        assert SpousePartner.objects.filter(account=individual_account).count() == 1
        assert not SpouseInvitation.objects.filter(email="alex@example.com").exists()

    def test_new_spouse_after_removal(self, owner_actor, individual_account):
        party_id = add(owner_actor, individual_account, "spouse", "sam@example.com").data["party"]["id"]

        removed = commands.remove_party(owner_actor, "spouse", party_id)
        add(owner_actor, individual_account, "spouse", "alex@example.com")

        assert removed.data["soft_removed"] is False
        assert list(SpousePartner.objects.values_list("email", flat=True)) == ["alex@example.com"]
        assert list(SpouseInvitation.objects.values_list("email", flat=True)) == ["alex@example.com"]

    def test_spouse_takes_no_percentages(self, owner_actor, individual_account):
        result = commands.add_party(
            owner_actor, individual_account.public_id, "spouse", "sam@example.com", ownership_percent=50
        )

        assert result.code == "invalid"
        assert not SpousePartner.objects.exists()

    def test_spouse_accepts_invitation(self, owner_actor, invitee_actor, invitee, individual_account):
        added = add(owner_actor, individual_account, "spouse", "invitee@test.com")

        result = commands.accept_invitation(invitee_actor, "invitee@test.com", added.data["token"])

        party = SpousePartner.objects.get()
        assert result.success
        assert result.data["approved"] == 1
        assert party.status == PartyStatus.APPROVED
        assert party.user == invitee


# =============================================================================
# Registration Linking Tests
# =============================================================================

@pytest.mark.django_db
class TestLinkPendingParties:
    def test_registration_links_rows_without_approving(self, owner_actor, company_account, trust_account):
        add(owner_actor, company_account, "company", "newbie@example.com")
        add(owner_actor, trust_account, "trust", "newbie@example.com")

        user = User.objects.create_user(email="newbie@example.com", password="pw12345678", name="Newbie")

        assert CompanyPartner.objects.get().user == user
        assert TrustPartner.objects.get().user == user
        assert CompanyPartner.objects.get().status == PartyStatus.PENDING

    def test_existing_links_are_not_overwritten(self, owner_actor, company_account, invitee):
        add(owner_actor, company_account, "company", "invitee@test.com")
        impostor = User.objects.create_user(email="INVITEE@test.com", password="pw12345678", name="Impostor")

        result = commands.link_pending_parties(impostor)

        assert result.data["total"] == 0
        assert CompanyPartner.objects.get().user == invitee


# =============================================================================
# End-to-end
# =============================================================================

@pytest.mark.django_db
def test_invite_register_accept(owner_actor, company_account):
    """Owner invites a new person, who registers and accepts with the emailed token."""
    added = add(owner_actor, company_account, "company", "partner@example.com", is_director=True)
    token = added.data["token"]

    partner_user = User.objects.create_user(email="partner@example.com", password="pw12345678", name="Pat")
    result = commands.accept_invitation(ActorContext(user=partner_user), "partner@example.com", token)

    party = CompanyPartner.objects.get(public_id=added.data["party"]["id"])
    invitation = CompanyInvitation.objects.get(account=company_account, email="partner@example.com")
    assert result.success
    assert party.status == PartyStatus.APPROVED
    assert party.user == partner_user
    assert invitation.accepted_at is not None
