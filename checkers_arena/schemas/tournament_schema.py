from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import List, Optional

from checkers_arena.models.enums import MatchStatus, TimeControl, TournamentStatus


class SwissParticipant(BaseModel):
    player_id: str
    score: int = 0
    opponents: List[str] = Field(default_factory=list)
    has_bye: bool = False


class TournamentMatch(BaseModel):
    id: str
    round: int
    match_number: int
    player1: Optional[str] = None
    player2: Optional[str] = None   # always None for a bye
    game_id: Optional[str] = None
    winner: Optional[str] = None
    status: MatchStatus = MatchStatus.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.status in (MatchStatus.FINISHED, MatchStatus.BYE)

    def opponent_of(self, player_id: str) -> Optional[str]:
        if self.player1 == player_id:
            return self.player2
        if self.player2 == player_id:
            return self.player1
        return None


class TournamentRound(BaseModel):
    round_number: int
    matches: List[TournamentMatch] = Field(default_factory=list)
    completed: bool = False

    @property
    def is_complete(self) -> bool:
        return all(m.is_resolved for m in self.matches)


class Tournament(BaseModel):
    # `matches` is serialized for readers but rebuilt from `rounds` on load
    model_config = ConfigDict(extra='ignore')

    id: str
    name: str = ""
    creator: str
    status: TournamentStatus = TournamentStatus.REGISTRATION
    time_control: TimeControl = TimeControl.BLITZ_5_3
    max_players: int
    registered_players: List[str] = Field(default_factory=list)

    rounds: List[TournamentRound] = Field(default_factory=list)
    current_round: int = 0
    total_rounds: int = 0
    num_rounds: int = 0
    winner: Optional[str] = None

    created_at: int = 0
    started_at: Optional[int] = None
    finished_at: Optional[int] = None

    is_public: bool = True
    invite_code: Optional[str] = None
    scheduled_start: Optional[int] = None

    participants: List[SwissParticipant] = Field(default_factory=list)

    @computed_field
    @property
    def matches(self) -> List[TournamentMatch]:
        """Every match ever created, in creation order. Same objects as in `rounds`."""
        return [m for r in self.rounds for m in r.matches]

    def find_match(self, match_id: str) -> Optional[TournamentMatch]:
        for m in self.matches:
            if m.id == match_id:
                return m
        return None

    def get_round(self, round_number: int) -> Optional[TournamentRound]:
        for r in self.rounds:
            if r.round_number == round_number:
                return r
        return None

    def participant(self, player_id: str) -> Optional[SwissParticipant]:
        for p in self.participants:
            if p.player_id == player_id:
                return p
        return None
