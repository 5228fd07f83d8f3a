import re
from datetime import datetime, timedelta

import pytest

from app.core.config import settings
from app.crud.user import get_user_by_auth_id, get_user_by_id
from app.models.invitation import InvitationStatus
from app.models.user import PartnerType
from app.utils.invitations import (
    InvitationEmailMismatchError,
    InvitationNotFoundError,
    PartnerAlreadyLinkedError,
    SelfInvitationError,
    accept_invitation,
    create_invitation,
    generate_invitation_code,
    get_invitation_by_code,
    list_received_invitations,
    list_sent_invitations,
    reject_invitation,
    to_read,
    unlink_partner,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)


def test_generated_codes_are_uppercase_alphanumeric():
    code = generate_invitation_code()

    assert len(code) == settings.INVITATION_CODE_LENGTH
    assert re.fullmatch(r"[A-Z0-9]+", code)


async def test_create_invitation_assigns_inviter_slot(db, make_account):
    alice = await make_account("alice@example.com")

    invitation = await create_invitation(db, alice, "bob@example.com", inviter_name="Alice", now=NOW)

    assert invitation.status == InvitationStatus.PENDING
    assert invitation.expires_at == NOW + timedelta(days=settings.INVITATION_EXPIRE_DAYS)
    inviter = await get_user_by_auth_id(alice.id, db)
    assert inviter.name == "Alice"
    assert inviter.type == PartnerType.PARTNER_1


async def test_inviter_name_defaults_to_email_prefix(db, make_account):
    alice = await make_account("alice@example.com")

    await create_invitation(db, alice, "bob@example.com", now=NOW)

    assert (await get_user_by_auth_id(alice.id, db)).name == "alice"


async def test_cannot_invite_yourself(db, make_account):
    alice = await make_account("alice@example.com")

    with pytest.raises(SelfInvitationError):
        await create_invitation(db, alice, "Alice@Example.com", now=NOW)


async def test_accept_links_both_members(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)

    invitee = await accept_invitation(db, bob, invitation.code.lower(), name="Bob", now=NOW + timedelta(days=1))

    inviter = await get_user_by_auth_id(alice.id, db)
    assert invitee.type == PartnerType.PARTNER_2
    assert invitee.partner_id == inviter.id
    assert inviter.partner_id == invitee.id
    assert sorted(inviter.household_ids) == sorted(invitee.household_ids)

    await db.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED


async def test_accepted_invitation_cannot_be_reused(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)
    await accept_invitation(db, bob, invitation.code, name="Bob", now=NOW)

    assert await get_invitation_by_code(db, invitation.code, now=NOW) is None
    with pytest.raises(InvitationNotFoundError):
        await accept_invitation(db, bob, invitation.code, name="Bob", now=NOW)


async def test_wrong_account_cannot_accept(db, make_account):
    alice = await make_account("alice@example.com")
    await make_account("bob@example.com")
    mallory = await make_account("mallory@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)

    with pytest.raises(InvitationEmailMismatchError):
        await accept_invitation(db, mallory, invitation.code, name="Mallory", now=NOW)

    still_pending = await get_invitation_by_code(db, invitation.code, now=NOW)
    assert still_pending is not None
    assert still_pending.status == InvitationStatus.PENDING
    assert await get_user_by_auth_id(mallory.id, db) is None


async def test_expired_invitation_is_not_found(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)
    later = invitation.expires_at + timedelta(seconds=1)

    assert await get_invitation_by_code(db, invitation.code, now=later) is None
    assert to_read(invitation, now=later).status == InvitationStatus.EXPIRED
    with pytest.raises(InvitationNotFoundError):
        await accept_invitation(db, bob, invitation.code, name="Bob", now=later)


async def test_linked_member_cannot_invite_again(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)
    await accept_invitation(db, bob, invitation.code, name="Bob", now=NOW)

    with pytest.raises(PartnerAlreadyLinkedError):
        await create_invitation(db, alice, "carol@example.com", now=NOW)


async def test_accept_refuses_when_inviter_linked_elsewhere(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    carol = await make_account("carol@example.com")
    first = await create_invitation(db, alice, "bob@example.com", now=NOW)
    second = await create_invitation(db, alice, "carol@example.com", now=NOW)
    await accept_invitation(db, bob, first.code, name="Bob", now=NOW)

    with pytest.raises(PartnerAlreadyLinkedError):
        await accept_invitation(db, carol, second.code, name="Carol", now=NOW)


async def test_reject_invitation(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)

    rejected = await reject_invitation(db, bob, invitation.code, now=NOW)

    assert rejected.status == InvitationStatus.REJECTED
    assert await list_received_invitations(db, bob, now=NOW) == []
    sent = await list_sent_invitations(db, alice, now=NOW)
    assert [i.status for i in sent] == [InvitationStatus.REJECTED]


async def test_wrong_account_cannot_reject(db, make_account):
    alice = await make_account("alice@example.com")
    await make_account("bob@example.com")
    mallory = await make_account("mallory@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)
    code = invitation.code

    with pytest.raises(InvitationEmailMismatchError):
        await reject_invitation(db, mallory, code, now=NOW)

    still_pending = await get_invitation_by_code(db, code, now=NOW)
    assert still_pending is not None
    assert still_pending.status == InvitationStatus.PENDING


async def test_unlink_clears_both_sides(db, make_account):
    alice = await make_account("alice@example.com")
    bob = await make_account("bob@example.com")
    invitation = await create_invitation(db, alice, "bob@example.com", now=NOW)
    invitee = await accept_invitation(db, bob, invitation.code, name="Bob", now=NOW)
    partner_id = invitee.partner_id

    await unlink_partner(db, invitee)

    assert invitee.partner_id is None
    inviter = await get_user_by_id(partner_id, db)
    await db.refresh(inviter)
    assert inviter.partner_id is None
    assert invitee.household_ids == [invitee.id]
