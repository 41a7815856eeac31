"""
View projection tests
视图裁剪测试 - 秘密词保密、投票隐私
"""

import random
import pytest
from hypothesis import given, strategies as st, settings

from impostor.core.exceptions import RoomForbiddenError
from impostor.schemas.room import RoomState, SKIP_VOTE
from impostor.services import room as transitions
from impostor.services.tally import finalize_voting
from impostor.services.view import project_view

from conftest import make_room, crewmate_ids, START_MILLIS


class TestImpostorSecrecy:
    """测试卧底看不到秘密词"""

    @given(
        player_count=st.integers(min_value=3, max_value=8),
        seed=st.integers(min_value=0, max_value=1000000),
        phase=st.sampled_from(["in_progress", "voting", "after_vote"])
    )
    @settings(max_examples=100)
    def test_impostor_view_never_contains_word(self, player_count, seed, phase):
        rng = random.Random(seed)
        room = make_room(player_count)
        transitions.start_game(room, "p0", num_impostors=rng.randint(1, player_count - 1),
                               max_votings=3, rng=rng)
        if phase in ("voting", "after_vote"):
            transitions.start_voting(room, "p0", now=START_MILLIS)
        if phase == "after_vote":
            for voter in room.active_player_ids:
                if room.state == RoomState.VOTING:
                    transitions.cast_vote(room, voter, SKIP_VOTE, now=START_MILLIS)

        if room.state == RoomState.REVEAL:
            return

        for impostor in room.impostor_ids:
            response = project_view(room, impostor, START_MILLIS).to_response()
            assert response["you"]["isImpostor"] is True
            assert response["you"]["secretWord"] is None
            assert "reveal" not in response

    def test_crewmates_share_word_and_reveal_shows_everything(self):
        room = make_room(4)
        transitions.start_game(room, "p0", num_impostors=1, rng=random.Random(3))
        crew_words = {project_view(room, pid, START_MILLIS).you.secret_word for pid in crewmate_ids(room)}
        assert crew_words == {room.secret_word}

        transitions.reveal(room, "p0")
        impostor = room.impostor_ids[0]
        response = project_view(room, impostor, START_MILLIS).to_response()
        assert response["reveal"]["word"] == room.secret_word
        assert [p["id"] for p in response["reveal"]["impostors"]] == [impostor]
        assert response["you"]["secretWord"] is None


class TestVotingView:
    """测试投票面板"""

    def _voting_room(self):
        room = make_room(4)
        transitions.start_game(room, "p0", num_impostors=1, max_votings=2, rng=random.Random(5))
        transitions.start_voting(room, "p0", now=START_MILLIS)
        return room

    def test_votes_are_hidden_while_voting(self):
        room = self._voting_room()
        transitions.cast_vote(room, "p1", "p2", now=START_MILLIS)

        response = project_view(room, "p3", START_MILLIS).to_response()
        voting = response["voting"]
        assert voting["state"] == "in_progress"
        assert voting["votesSubmitted"] == 1
        assert voting["totalVoters"] == 4
        assert voting["canVote"] is True
        assert voting["endsAt"] == room.voting_ends_at
        assert "result" not in voting
        assert [o["id"] for o in voting["options"]] == ["p0", "p1", "p2"]

    def test_can_vote_flags(self):
        room = self._voting_room()
        transitions.cast_vote(room, "p1", SKIP_VOTE, now=START_MILLIS)

        assert project_view(room, "p1", START_MILLIS).voting.can_vote is False
        assert project_view(room, "p1", START_MILLIS).voting.has_voted is True
        assert project_view(room, "p2", room.voting_ends_at).voting.can_vote is False

    def test_options_exclude_eliminated_players(self):
        room = make_room(5)
        transitions.start_game(room, "p0", num_impostors=1, max_votings=3, rng=random.Random(5))
        victim = next(c for c in crewmate_ids(room) if c != "p0")
        room.eliminated_player_ids.append(victim)
        transitions.start_voting(room, "p0", now=START_MILLIS)

        option_ids = [o.id for o in project_view(room, "p0", START_MILLIS).voting.options]
        assert victim not in option_ids
        assert "p0" not in option_ids
        assert len(option_ids) == 3

    def test_results_are_sorted_and_skip_departed_targets(self):
        room = self._voting_room()
        crew = crewmate_ids(room)
        impostor = room.impostor_ids[0]
        target = next(c for c in crew if c != room.host_id)
        others = [c for c in crew if c != target]
        room.votes = {others[0]: target, others[1]: impostor, target: impostor, impostor: SKIP_VOTE}
        finalize_voting(room)

        view = project_view(room, others[0], START_MILLIS)
        result = view.voting.result
        assert view.voting.state == "results"
        assert [entry.votes for entry in result.votes] == [2, 1]
        assert result.votes[0].player.id == impostor
        assert result.eliminated_player.id == impostor
        assert result.eliminated_was_impostor is True
        assert result.skip_votes == 1
        assert view.voting.options is None

        transitions.leave_room(room, target)
        departed = project_view(room, others[0], START_MILLIS).voting.result
        assert [entry.player.id for entry in departed.votes] == [impostor]
        assert room.last_voting_result.votes_per_player[target] == 1

        transitions.next_round(room, room.host_id)
        assert project_view(room, others[0], START_MILLIS).voting.state == "idle"

    def test_top_target_leaving_during_voting_shows_a_tie(self):
        room = self._voting_room()
        crew = crewmate_ids(room)
        target = next(c for c in crew if c != room.host_id)
        voters = [pid for pid in room.player_ids if pid != target]
        transitions.cast_vote(room, voters[0], target, now=START_MILLIS)
        transitions.cast_vote(room, voters[1], target, now=START_MILLIS)

        transitions.leave_room(room, target)
        transitions.cast_vote(room, voters[2], SKIP_VOTE, now=START_MILLIS)

        result = project_view(room, voters[0], START_MILLIS).voting.result
        assert room.eliminated_player_ids == []
        assert result.is_tie is True
        assert result.eliminated_player is None
        assert result.votes == []
        assert result.skip_votes == 1

    def test_idle_view_omits_optional_sections(self):
        room = make_room(3)
        response = project_view(room, "p1", START_MILLIS).to_response()
        assert response["voting"]["state"] == "idle"
        assert "options" not in response["voting"]
        assert "result" not in response["voting"]
        assert "reveal" not in response
        assert response["voting"]["endsAt"] is None
        assert response["you"]["secretWord"] is None
        assert response["settings"] == {
            "numImpostors": 1,
            "category": "General",
            "maxVotings": 2,
            "votingDurationSeconds": 60
        }


def test_non_member_is_forbidden():
    room = make_room(3)
    with pytest.raises(RoomForbiddenError):
        project_view(room, "stranger", START_MILLIS)

    transitions.leave_room(room, "p2")
    with pytest.raises(RoomForbiddenError):
        project_view(room, "p2", START_MILLIS)
