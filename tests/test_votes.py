"""
tests/test_votes.py — Build & News Vote Toggle
===============================================
The stored ``vote_count`` must always equal the sum of live vote values,
whatever sequence of create / toggle-off / flip calls produced it.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lightbearer.database.models import Build, NewsPost, NewsVote, Vote
from lightbearer.services import vote_service
from lightbearer.services.errors import NotFoundError, ValidationError


@pytest.fixture
def build_id(db_engine, user_id, character_id) -> str:
    with Session(db_engine) as session:
        build = Build(title="Solar DPS", character_id=character_id, user_id=user_id)
        session.add(build)
        session.commit()
        return build.id


@pytest.fixture
def news_id(db_engine, user_id) -> str:
    with Session(db_engine) as session:
        post = NewsPost(title="Patch notes", content="…", type="ARTICLE", user_id=user_id)
        session.add(post)
        session.commit()
        return post.id


def _build_state(engine, build_id: str) -> tuple[int, int]:
    """(stored vote_count, sum of live vote values)"""
    with Session(engine) as session:
        stored = session.scalar(select(Build.vote_count).where(Build.id == build_id))
        live = session.scalar(
            select(func.coalesce(func.sum(Vote.value), 0)).where(Vote.build_id == build_id)
        )
        return stored, live


def _news_state(engine, news_id: str) -> tuple[int, int]:
    with Session(engine) as session:
        stored = session.scalar(select(NewsPost.vote_count).where(NewsPost.id == news_id))
        live = session.scalar(
            select(func.coalesce(func.sum(NewsVote.value), 0)).where(NewsVote.news_id == news_id)
        )
        return stored, live


# ===========================================================================
# Build votes
# ===========================================================================
class TestBuildVotes:
    def test_first_vote_inserts(self, db_engine, build_id, user_id):
        result = vote_service.vote_build(db_engine, user_id, build_id)
        assert result == {"voted": True, "value": 1, "voteCount": 1}
        assert _build_state(db_engine, build_id) == (1, 1)

    def test_same_value_twice_is_net_noop(self, db_engine, build_id, user_id):
        vote_service.vote_build(db_engine, user_id, build_id, 1)
        result = vote_service.vote_build(db_engine, user_id, build_id, 1)

        assert result == {"voted": False, "value": None, "voteCount": 0}
        assert _build_state(db_engine, build_id) == (0, 0)
        with Session(db_engine) as session:
            assert session.scalar(select(func.count(Vote.id))) == 0

    def test_flip_moves_count_by_two(self, db_engine, build_id, user_id):
        vote_service.vote_build(db_engine, user_id, build_id, 1)
        result = vote_service.vote_build(db_engine, user_id, build_id, -1)

        assert result == {"voted": True, "value": -1, "voteCount": -1}
        assert _build_state(db_engine, build_id) == (-1, -1)

    def test_count_matches_live_votes_after_any_sequence(
        self, db_engine, build_id, user_id, other_user_id
    ):
        sequence = [
            (user_id, 1), (other_user_id, -1), (user_id, -1), (other_user_id, -1),
            (user_id, 1), (other_user_id, 1), (user_id, 1), (other_user_id, -1),
        ]
        for voter, value in sequence:
            vote_service.vote_build(db_engine, voter, build_id, value)
            stored, live = _build_state(db_engine, build_id)
            assert stored == live

    def test_rejects_out_of_range_value(self, db_engine, build_id, user_id):
        with pytest.raises(ValidationError):
            vote_service.vote_build(db_engine, user_id, build_id, 2)
        assert _build_state(db_engine, build_id) == (0, 0)

    def test_unknown_build_is_404(self, db_engine, user_id):
        with pytest.raises(NotFoundError):
            vote_service.vote_build(db_engine, user_id, "missing", 1)

    def test_private_build_is_404_for_non_owner(
        self, db_engine, build_id, user_id, other_user_id
    ):
        with Session(db_engine) as session:
            session.get(Build, build_id).is_public = False
            session.commit()

        with pytest.raises(NotFoundError):
            vote_service.vote_build(db_engine, other_user_id, build_id, 1)
        assert _build_state(db_engine, build_id) == (0, 0)

        assert vote_service.vote_build(db_engine, user_id, build_id, 1)["voteCount"] == 1


# ===========================================================================
# News votes
# ===========================================================================
class TestNewsVotes:
    def test_same_branches_apply_to_news(self, db_engine, news_id, user_id, other_user_id):
        assert vote_service.vote_news(db_engine, user_id, news_id)["voteCount"] == 1
        assert vote_service.vote_news(db_engine, other_user_id, news_id, -1)["voteCount"] == 0
        assert vote_service.vote_news(db_engine, other_user_id, news_id, 1)["voteCount"] == 2
        assert vote_service.vote_news(db_engine, user_id, news_id)["voteCount"] == 1
        assert _news_state(db_engine, news_id) == (1, 1)

    def test_unknown_news_is_404(self, db_engine, user_id):
        with pytest.raises(NotFoundError):
            vote_service.vote_news(db_engine, user_id, "missing")


# ===========================================================================
# Through the API
# ===========================================================================
class TestVoteRoutes:
    def test_upvote_requires_session(self, client, build_id):
        resp = client.post("/api/builds/upvote", json={"buildId": build_id})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}

    def test_upvote_round_trip(self, client, build_id, member_headers):
        resp = client.post(
            "/api/builds/upvote", json={"buildId": build_id}, headers=member_headers
        )
        assert resp.status_code == 200
        assert resp.json()["voteCount"] == 1

        resp = client.post(
            "/api/builds/upvote", json={"buildId": build_id, "value": 1}, headers=member_headers
        )
        assert resp.json() == {"voted": False, "value": None, "voteCount": 0}

    def test_bad_value_is_400(self, client, build_id, member_headers):
        resp = client.post(
            "/api/builds/upvote", json={"buildId": build_id, "value": 5}, headers=member_headers
        )
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_news_upvote(self, client, news_id, member_headers):
        resp = client.post("/api/news/upvote", json={"newsId": news_id}, headers=member_headers)
        assert resp.status_code == 200
        assert resp.json() == {"voted": True, "value": 1, "voteCount": 1}
