# mypy: ignore-errors
"""Tests for like, share and comment endpoints."""

from fastapi import status


def test_like_toggle_round_trip(client, client_headers, published_post) -> None:
    """Liking twice returns to the original state."""
    url = f"/api/v1/posts/{published_post.id}/like"

    first = client.post(url, headers=client_headers)
    assert first.json() == {"liked": True, "likes_count": 1}
    assert client.get(url, headers=client_headers).json()["liked"] is True

    second = client.post(url, headers=client_headers)
    assert second.json() == {"liked": False, "likes_count": 0}


def test_like_accepts_body_client_id(client, published_post) -> None:
    """Clients without the header may send client_id in the body."""
    response = client.post(
        f"/api/v1/posts/{published_post.id}/like", json={"client_id": "client_body"}
    )
    assert response.json()["liked"] is True


def test_like_requires_identity(client, published_post) -> None:
    """Anonymous writes need a client id."""
    response = client.post(f"/api/v1/posts/{published_post.id}/like")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "client_id is required"


def test_like_draft_is_not_found(client, client_headers, make_post) -> None:
    """Unpublished posts cannot be engaged with."""
    draft = make_post("Quiet", visible=False)
    response = client.post(f"/api/v1/posts/{draft.id}/like", headers=client_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_signed_in_like_is_attributed_to_user(client, user_headers, client_headers, published_post) -> None:
    """A session user and their browser id share one like."""
    url = f"/api/v1/posts/{published_post.id}/like"
    headers = {**user_headers("user-42"), **client_headers}

    client.post(url, headers=headers)

    assert client.get(url, headers=user_headers("user-42")).json()["liked"] is True
    assert client.get(url, headers=client_headers).json()["liked"] is False


def test_invalid_token_is_unauthorized(client, published_post) -> None:
    """A malformed bearer token is rejected rather than ignored."""
    response = client.post(
        f"/api/v1/posts/{published_post.id}/like",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_share_logging(client, client_headers, published_post) -> None:
    """Shares accumulate and twitter is stored as x."""
    url = f"/api/v1/posts/{published_post.id}/share"

    first = client.post(url, json={"channel": "Twitter"}, headers=client_headers)
    second = client.post(url, json={"channel": "copy"}, headers=client_headers)
    bad = client.post(url, json={"channel": "fax"}, headers=client_headers)

    assert first.status_code == status.HTTP_201_CREATED
    assert first.json() == {"channel": "x", "shares_count": 1}
    assert second.json()["shares_count"] == 2
    assert bad.status_code == status.HTTP_400_BAD_REQUEST


def test_comment_lifecycle(client, client_headers, other_client_headers, published_post) -> None:
    """Guests can comment, only they can delete, and deletes are soft."""
    url = f"/api/v1/posts/{published_post.id}/comments"

    created = client.post(
        url, json={"content": "Nice read", "nickname": "Sam"}, headers=client_headers
    )
    assert created.status_code == status.HTTP_201_CREATED
    comment = created.json()
    assert comment["display_name"] == "Sam"
    assert "client_id" not in comment

    reply = client.post(
        url, json={"content": "Agreed", "parent_id": comment["id"]}, headers=other_client_headers
    )
    nested = client.post(
        url, json={"content": "Same", "parent_id": reply.json()["id"]}, headers=client_headers
    )
    assert nested.json()["parent_id"] == comment["id"]

    listing = client.get(url).json()
    assert listing["count"] == 3

    forbidden = client.delete(f"{url}/{comment['id']}", headers=other_client_headers)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    deleted = client.delete(f"{url}/{comment['id']}", headers=client_headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(url).json()["count"] == 2

    again = client.delete(f"{url}/{comment['id']}", headers=client_headers)
    assert again.status_code == status.HTTP_404_NOT_FOUND


def test_admin_can_delete_any_comment(client, client_headers, admin_headers, published_post) -> None:
    """The admin secret overrides ownership."""
    url = f"/api/v1/posts/{published_post.id}/comments"
    comment = client.post(url, json={"content": "Hello"}, headers=client_headers).json()

    response = client.delete(f"{url}/{comment['id']}", headers=admin_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_comment_moderation_and_limits(client, client_headers, published_post) -> None:
    """Comments share the chat moderation filter and have their own limits."""
    url = f"/api/v1/posts/{published_post.id}/comments"

    shouting = client.post(url, json={"content": "THIS IS TERRIBLE NEWS"}, headers=client_headers)
    too_long = client.post(url, json={"content": "ab " * 400}, headers=client_headers)

    assert shouting.status_code == status.HTTP_400_BAD_REQUEST
    assert shouting.json()["detail"] == "Excessive caps detected"
    assert too_long.status_code == status.HTTP_400_BAD_REQUEST
