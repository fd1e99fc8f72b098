# mypy: ignore-errors
"""Tests for likes, shares and comments."""

import pytest
from sqlalchemy import func, select

from denominator_stage.core.errors import ForbiddenError, NotFoundError, ValidationError
from denominator_stage.models import PostComment, PostLike, PostShareEvent
from denominator_stage.services.engagement import EngagementLedger, normalize_channel
from denominator_stage.services.identity import AnonymousActor, AuthenticatedActor, RequestIdentity

GUEST = AnonymousActor("client_guest")
OTHER_GUEST = AnonymousActor("client_other")
MEMBER = AuthenticatedActor("user-42")


@pytest.fixture()
def ledger(db_session):
    return EngagementLedger(db_session, admin_user_ids={"site-admin"})


def _like_rows(db_session, post_id):
    return db_session.scalar(
        select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
    )


def test_like_toggle_is_an_involution(ledger, db_session, published_post) -> None:
    """N alternating toggles leave N mod 2 likes."""
    states = [ledger.toggle_like(published_post.id, GUEST) for _ in range(5)]

    assert [s.liked for s in states] == [True, False, True, False, True]
    assert states[-1].likes_count == 1
    assert _like_rows(db_session, published_post.id) == 1

    ledger.toggle_like(published_post.id, GUEST)
    db_session.refresh(published_post)
    assert published_post.likes_count == 0
    assert _like_rows(db_session, published_post.id) == 0


def test_likes_are_per_actor(ledger, published_post) -> None:
    """Different actors each hold their own like."""
    ledger.toggle_like(published_post.id, GUEST)
    ledger.toggle_like(published_post.id, MEMBER)

    assert ledger.like_state(published_post.id, GUEST).liked
    assert not ledger.like_state(published_post.id, OTHER_GUEST).liked
    assert ledger.like_state(published_post.id, MEMBER).likes_count == 2


def test_concurrent_like_insert_counts_once(ledger, db_session, published_post, monkeypatch) -> None:
    """A toggle that loses the insert race is a no-op that reports liked."""
    ledger.toggle_like(published_post.id, GUEST)

    # The second request read "no like" before the first committed.
    monkeypatch.setattr(ledger, "_remove_like", lambda post_id, actor: False)
    state = ledger.toggle_like(published_post.id, GUEST)

    assert state.liked is True
    assert state.likes_count == 1
    assert _like_rows(db_session, published_post.id) == 1


def test_like_count_never_negative(ledger, db_session, published_post) -> None:
    """The decrement is guarded even if the counter has drifted to zero."""
    ledger.toggle_like(published_post.id, GUEST)
    published_post.likes_count = 0
    db_session.commit()

    state = ledger.toggle_like(published_post.id, GUEST)

    assert state.liked is False
    assert state.likes_count == 0


def test_engagement_requires_visible_post(ledger, make_post) -> None:
    """Drafts cannot be liked, shared or commented on."""
    draft = make_post("Secret", visible=False)

    with pytest.raises(NotFoundError):
        ledger.toggle_like(draft.id, GUEST)
    with pytest.raises(NotFoundError):
        ledger.log_share(draft.id, GUEST, "copy")
    with pytest.raises(NotFoundError):
        ledger.add_comment(draft.id, GUEST, "Hello")


def test_shares_are_never_deduplicated(ledger, db_session, published_post) -> None:
    """Repeated shares are distinct events."""
    ledger.log_share(published_post.id, GUEST, "copy")
    receipt = ledger.log_share(published_post.id, GUEST, "copy")

    assert receipt.shares_count == 2
    count = db_session.scalar(select(func.count()).select_from(PostShareEvent))
    assert count == 2


def test_share_channel_normalization() -> None:
    """Channels are case-insensitive and twitter maps to x."""
    assert normalize_channel("Twitter") == "x"
    assert normalize_channel(" LinkedIn ") == "linkedin"
    with pytest.raises(ValidationError):
        normalize_channel("myspace")
    with pytest.raises(ValidationError):
        normalize_channel(None)


def test_comment_records_single_author(ledger, published_post) -> None:
    """Signed-in comments store the user id; guest comments the client id."""
    member_comment = ledger.add_comment(published_post.id, MEMBER, "From a member")
    guest_comment = ledger.add_comment(published_post.id, GUEST, "From a guest", nickname="Sam")

    assert (member_comment.user_id, member_comment.client_id) == ("user-42", None)
    assert (guest_comment.user_id, guest_comment.client_id) == (None, "client_guest")
    assert guest_comment.display_name == "Sam"
    assert member_comment.display_name == "Anonymous"


def test_comment_validation(ledger, published_post) -> None:
    """Empty, oversized or moderated comments are rejected."""
    with pytest.raises(ValidationError):
        ledger.add_comment(published_post.id, GUEST, "   ")
    with pytest.raises(ValidationError):
        ledger.add_comment(published_post.id, GUEST, "a b " * 300)
    with pytest.raises(ValidationError):
        ledger.add_comment(published_post.id, GUEST, "hi", nickname="n" * 65)
    with pytest.raises(ValidationError, match="Inappropriate content detected"):
        ledger.add_comment(published_post.id, GUEST, "buy spam here")


def test_replies_are_flattened_to_one_level(ledger, published_post) -> None:
    """A reply to a reply attaches to the top-level comment."""
    top = ledger.add_comment(published_post.id, GUEST, "Top")
    reply = ledger.add_comment(published_post.id, MEMBER, "Reply", parent_id=top.id)
    nested = ledger.add_comment(published_post.id, GUEST, "Nested", parent_id=reply.id)

    assert reply.parent_id == top.id
    assert nested.parent_id == top.id


def test_reply_parent_must_be_on_same_post(ledger, make_post, published_post) -> None:
    """Parents on another post are rejected."""
    other = make_post("Another One")
    foreign = ledger.add_comment(other.id, GUEST, "Elsewhere")

    with pytest.raises(ValidationError):
        ledger.add_comment(published_post.id, GUEST, "Reply", parent_id=foreign.id)
    with pytest.raises(ValidationError):
        ledger.add_comment(published_post.id, GUEST, "Reply", parent_id=9999)


def test_guest_comment_deletion_is_owner_only(ledger, db_session, published_post) -> None:
    """Only the authoring client id, or an admin, may delete a guest comment."""
    comment = ledger.add_comment(published_post.id, GUEST, "Mine")

    with pytest.raises(ForbiddenError):
        ledger.delete_comment(
            published_post.id, comment.id, RequestIdentity(client_id="client_other")
        )

    ledger.delete_comment(published_post.id, comment.id, RequestIdentity(client_id="client_guest"))

    db_session.refresh(comment)
    db_session.refresh(published_post)
    assert comment.is_deleted is True
    assert published_post.comments_count == 0
    assert ledger.list_comments(published_post.id) == []


def test_comment_delete_priority(ledger, published_post) -> None:
    """Site admins and the owning user may delete; repeat deletes are NotFound."""
    member_comment = ledger.add_comment(published_post.id, MEMBER, "Member words")
    guest_comment = ledger.add_comment(published_post.id, GUEST, "Guest words")

    with pytest.raises(ForbiddenError):
        ledger.delete_comment(
            published_post.id, member_comment.id, RequestIdentity(user_id="user-7")
        )
    ledger.delete_comment(published_post.id, member_comment.id, RequestIdentity(user_id="user-42"))
    ledger.delete_comment(published_post.id, guest_comment.id, RequestIdentity(user_id="site-admin"))

    with pytest.raises(NotFoundError):
        ledger.delete_comment(
            published_post.id, guest_comment.id, RequestIdentity(is_admin=True)
        )


def test_list_comments_oldest_first(ledger, published_post) -> None:
    """Comments are listed in creation order."""
    first = ledger.add_comment(published_post.id, GUEST, "First")
    second = ledger.add_comment(published_post.id, GUEST, "Second")

    assert [c.id for c in ledger.list_comments(published_post.id)] == [first.id, second.id]
    assert isinstance(first, PostComment)
