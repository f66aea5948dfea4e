"""Pydantic models for games, scores and analytics results."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ScoringType(str, Enum):
    """How a game is scored. Lower is better for both."""

    GUESSES = "guesses"
    TIME = "time"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class Trend(str, Enum):
    IMPROVING = "Improving"
    DECLINING = "Declining"
    STABLE = "Stable"


class Temperature(str, Enum):
    HOT = "Hot"
    WARM = "Warm"
    COOL = "Cool"
    COLD = "Cold"


# Stored records


class Game(BaseModel):
    """A game record from the database."""

    id: int
    name: str
    description: str = ""
    created_date: Optional[datetime] = None
    is_active: bool = True
    scoring_type: ScoringType = ScoringType.GUESSES
    version: int = 1


class GameScore(BaseModel):
    """A submitted score, joined with its game's name and scoring type."""

    model_config = ConfigDict(ser_json_timedelta="float")

    id: int
    game_id: int
    player_name: str
    guess_count: Optional[int] = None
    completion_time: Optional[timedelta] = None
    date_achieved: datetime
    profile_url: Optional[str] = None
    image_content_type: Optional[str] = None
    has_image: bool = False
    version: int = 1
    game_name: Optional[str] = None
    scoring_type: Optional[ScoringType] = None

    def value_for(self, scoring_type: ScoringType) -> Optional[float]:
        """Derived score value under the given scoring type, or None if missing."""
        if scoring_type == ScoringType.TIME:
            if self.completion_time is None:
                return None
            return self.completion_time.total_seconds()
        if self.guess_count is None:
            return None
        return float(self.guess_count)

    @computed_field
    @property
    def score(self) -> Optional[float]:
        if self.scoring_type is None:
            return None
        return self.value_for(self.scoring_type)


# Request payloads


class GameCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    is_active: bool = True
    scoring_type: ScoringType = ScoringType.GUESSES


class GameUpdate(GameCreate):
    id: int
    version: Optional[int] = None


class ScoreCreate(BaseModel):
    game_id: int
    player_name: str = Field(min_length=1, max_length=100)
    guess_count: Optional[int] = Field(default=None, ge=1)
    completion_time: Optional[timedelta] = None
    profile_url: Optional[str] = Field(default=None, max_length=500)


class ScoreUpdate(ScoreCreate):
    id: int
    date_achieved: Optional[datetime] = None
    version: Optional[int] = None


class AdminAuthRequest(BaseModel):
    password: str = ""


class AdminTokenRequest(BaseModel):
    token: str = ""


class AdminAuthResponse(BaseModel):
    success: bool
    token: str = ""
    message: str = ""


# Analytics results


class CloseCallExample(BaseModel):
    date: date
    winner: str
    runner_up: str
    margin: str
    winner_score: str
    runner_up_score: str


class GameCloseCalls(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    close_call_count: int = 0
    examples: list[CloseCallExample] = []


class CloseCallsReport(BaseModel):
    days_analyzed: int
    games: list[GameCloseCalls] = []
    total_close_calls: int = 0


class ComebackPlayer(BaseModel):
    player_name: str
    total_improvements: int
    average_improvement: float
    max_improvement: float
    recent_scores_count: int


class GameComebacks(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    top_players: list[ComebackPlayer] = []


class ComebackReport(BaseModel):
    days_analyzed: int
    games: list[GameComebacks] = []


class ConsistencyPlayer(BaseModel):
    player_name: str
    score_count: int
    mean: float
    standard_deviation: float
    coefficient_of_variation: float
    best_score: float
    worst_score: float


class GameConsistency(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    top_players: list[ConsistencyPlayer] = []


class ConsistencyReport(BaseModel):
    days_analyzed: int
    minimum_scores: int
    games: list[GameConsistency] = []


class GameDistribution(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    total_scores: int
    distribution: dict[str, int]


class DistributionReport(BaseModel):
    scoring_type: ScoringType
    days_analyzed: int
    games: list[GameDistribution] = []


class PhotoFinish(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    date: date
    leader: str
    runner_up: str
    margin: str
    leader_score: str
    runner_up_score: str
    total_participants: int


class PhotoFinishReport(BaseModel):
    date: date
    photo_finishes: list[PhotoFinish] = []
    total_photo_finishes: int = 0


class GameTemperature(BaseModel):
    game_id: int
    game_name: str
    scoring_type: ScoringType
    score_count: int
    trend: Trend
    temperature: Temperature
    latest_score: str
    best_score: str


class PlayerTemperatureReport(BaseModel):
    player_name: str
    days_analyzed: int
    games: list[GameTemperature] = []
    overall_temperature: Temperature = Temperature.COLD


# Stats results


class DailyChampions(BaseModel):
    model_config = ConfigDict(ser_json_timedelta="float")

    game_id: int
    game_name: str
    scoring_type: ScoringType
    champions: list[GameScore] = []
    score: Optional[float] = None
    guess_count: Optional[int] = None
    completion_time: Optional[timedelta] = None
    date_achieved: Optional[datetime] = None


class TopWinnersSeries(BaseModel):
    player_id: str
    player_name: str
    profile_url: Optional[str] = None
    data: list[int]
    total: int = 0


class TopWinnersTrend(BaseModel):
    days: int
    labels: list[str]
    series: list[TopWinnersSeries] = []
