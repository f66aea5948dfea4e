"""Score aggregations behind the analytics and stats endpoints.

Every function here is pure: it takes a game (or its scoring type) and the
already-fetched scores, and returns result records. Both scoring types are
lower-is-better, so all comparisons are ascending.
"""

import math
from collections import Counter, defaultdict
from datetime import date
from typing import Callable, Iterable
from zoneinfo import ZoneInfo

from models import (
    CloseCallExample,
    ComebackPlayer,
    ConsistencyPlayer,
    Game,
    GameCloseCalls,
    GameComebacks,
    GameConsistency,
    GameDistribution,
    GameScore,
    GameTemperature,
    PhotoFinish,
    ScoringType,
    Temperature,
    TopWinnersSeries,
    Trend,
)
from utils.formatting import format_margin, format_score, format_value
from utils.identity import dedupe_by_identity, identity_key, normalize_name
from utils.time_windows import local_date

# Adjacent scores within this margin on the same day are a close call
CLOSE_CALL_MARGIN = {ScoringType.TIME: 5.0, ScoringType.GUESSES: 1.0}

# Gap between first and second place that counts as a photo finish
PHOTO_FINISH_MARGIN = {ScoringType.TIME: 3.0, ScoringType.GUESSES: 0.0}

TREND_THRESHOLD = {ScoringType.TIME: 5.0, ScoringType.GUESSES: 0.5}
HOT_THRESHOLD = {ScoringType.TIME: 5.0, ScoringType.GUESSES: 0.5}
WARM_THRESHOLD = {ScoringType.TIME: 10.0, ScoringType.GUESSES: 1.0}

TIME_BUCKETS = [(30, "0-30s"), (60, "31-60s"), (120, "61-120s"), (300, "121-300s")]
TIME_OVERFLOW_BUCKET = "300s+"
GUESS_BUCKETS = ["1", "2", "3", "4", "5"]
GUESS_OVERFLOW_BUCKET = "6+"

MAX_CLOSE_CALL_EXAMPLES = 3
MAX_COMEBACK_PLAYERS = 5
MAX_CONSISTENT_PLAYERS = 10
MIN_COMEBACK_SCORES = 3
MIN_TREND_SCORES = 3
RECENT_SCORES = 3


def qualifying(scores: Iterable[GameScore], scoring_type: ScoringType) -> list[tuple[GameScore, float]]:
    """Pair each score with its value, dropping scores that lack one."""
    pairs = []
    for score in scores:
        value = score.value_for(scoring_type)
        if value is not None:
            pairs.append((score, value))
    return pairs


def sort_by_value(pairs: list[tuple[GameScore, float]]) -> list[tuple[GameScore, float]]:
    return sorted(pairs, key=lambda pair: pair[1])


def group_by(pairs: list[tuple[GameScore, float]], key: Callable[[GameScore], object]) -> dict:
    """Group (score, value) pairs by ``key``, keeping first-seen order."""
    groups: dict = defaultdict(list)
    for score, value in pairs:
        groups[key(score)].append((score, value))
    return groups


def mean(values: list[float]) -> float:
    return sum(values) / len(values)


def margin_between(lower: float, upper: float) -> float:
    """Gap between two score values at microsecond resolution.

    Completion times are stored to the microsecond, so float noise below that
    is dropped before the gap is compared with a threshold.
    """
    return round(upper - lower, 6)


# Close calls


def find_close_calls(game: Game, scores: list[GameScore], tz: ZoneInfo) -> GameCloseCalls:
    """Count adjacent same-day finishes separated by no more than the margin."""
    threshold = CLOSE_CALL_MARGIN[game.scoring_type]
    days = group_by(qualifying(scores, game.scoring_type), lambda s: local_date(s.date_achieved, tz))

    count = 0
    examples: list[CloseCallExample] = []
    for day in sorted(days):
        ranked = sort_by_value(days[day])
        for (current, current_value), (following, following_value) in zip(ranked, ranked[1:]):
            margin = margin_between(current_value, following_value)
            if margin > threshold:
                continue
            count += 1
            if len(examples) < MAX_CLOSE_CALL_EXAMPLES:
                examples.append(
                    CloseCallExample(
                        date=day,
                        winner=current.player_name,
                        runner_up=following.player_name,
                        margin=format_margin(margin, game.scoring_type),
                        winner_score=format_value(current_value, game.scoring_type),
                        runner_up_score=format_value(following_value, game.scoring_type),
                    )
                )

    return GameCloseCalls(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        close_call_count=count,
        examples=examples,
    )


# Comebacks


def window_improvements(values: list[float]) -> list[float]:
    """Positive improvements over each run of three consecutive scores.

    For the window ending at index i, improvement is the mean of the two
    earlier scores minus the latest one.
    """
    improvements = []
    for i in range(2, len(values)):
        improvement = mean(values[i - 2:i]) - values[i]
        if improvement > 0:
            improvements.append(improvement)
    return improvements


def find_comebacks(game: Game, scores: list[GameScore]) -> GameComebacks:
    players = group_by(qualifying(scores, game.scoring_type), identity_key)

    comebacks = []
    for pairs in players.values():
        if len(pairs) < MIN_COMEBACK_SCORES:
            continue
        pairs = sorted(pairs, key=lambda pair: pair[0].date_achieved)
        improvements = window_improvements([value for _, value in pairs])
        if not improvements:
            continue
        comebacks.append(
            ComebackPlayer(
                player_name=pairs[0][0].player_name,
                total_improvements=len(improvements),
                average_improvement=mean(improvements),
                max_improvement=max(improvements),
                recent_scores_count=len(pairs),
            )
        )

    comebacks.sort(key=lambda p: (-p.total_improvements, -p.average_improvement))
    return GameComebacks(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        top_players=comebacks[:MAX_COMEBACK_PLAYERS],
    )


# Consistency


def rank_consistency(game: Game, scores: list[GameScore], min_scores: int) -> GameConsistency:
    """Rank players by coefficient of variation, most consistent first."""
    players = group_by(qualifying(scores, game.scoring_type), identity_key)

    ranked = []
    for pairs in players.values():
        if len(pairs) < min_scores:
            continue
        values = [value for _, value in pairs]
        avg = mean(values)
        std_dev = math.sqrt(mean([(v - avg) ** 2 for v in values]))
        ranked.append(
            ConsistencyPlayer(
                player_name=pairs[0][0].player_name,
                score_count=len(values),
                mean=avg,
                standard_deviation=std_dev,
                coefficient_of_variation=(std_dev / avg) * 100 if avg > 0 else 0.0,
                best_score=min(values),
                worst_score=max(values),
            )
        )

    ranked.sort(key=lambda p: p.coefficient_of_variation)
    return GameConsistency(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        top_players=ranked[:MAX_CONSISTENT_PLAYERS],
    )


# Distribution


def bucket_label(value: float, scoring_type: ScoringType) -> str:
    if scoring_type == ScoringType.TIME:
        for upper, label in TIME_BUCKETS:
            if value <= upper:
                return label
        return TIME_OVERFLOW_BUCKET
    if value == int(value) and str(int(value)) in GUESS_BUCKETS:
        return str(int(value))
    return GUESS_OVERFLOW_BUCKET


def empty_distribution(scoring_type: ScoringType) -> dict[str, int]:
    if scoring_type == ScoringType.TIME:
        labels = [label for _, label in TIME_BUCKETS] + [TIME_OVERFLOW_BUCKET]
    else:
        labels = GUESS_BUCKETS + [GUESS_OVERFLOW_BUCKET]
    return {label: 0 for label in labels}


def score_distribution(game: Game, scores: list[GameScore]) -> GameDistribution:
    pairs = qualifying(scores, game.scoring_type)
    distribution = empty_distribution(game.scoring_type)
    for _, value in pairs:
        distribution[bucket_label(value, game.scoring_type)] += 1
    return GameDistribution(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        total_scores=len(pairs),
        distribution=distribution,
    )


# Photo finish


def detect_photo_finish(game: Game, scores: list[GameScore], day: date) -> PhotoFinish | None:
    """Compare first and second place for a single day's scores."""
    ranked = sort_by_value(qualifying(scores, game.scoring_type))
    if len(ranked) < 2:
        return None

    (leader, leader_value), (runner_up, runner_up_value) = ranked[0], ranked[1]
    margin = margin_between(leader_value, runner_up_value)
    if margin > PHOTO_FINISH_MARGIN[game.scoring_type]:
        return None

    return PhotoFinish(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        date=day,
        leader=leader.player_name,
        runner_up=runner_up.player_name,
        margin=format_margin(margin, game.scoring_type, tie_label="TIE"),
        leader_score=format_value(leader_value, game.scoring_type),
        runner_up_score=format_value(runner_up_value, game.scoring_type),
        total_participants=len(ranked),
    )


# Player temperature


def classify_trend(values: list[float], scoring_type: ScoringType) -> Trend:
    """Compare the chronological first half against the second half.

    With an odd count the middle score belongs to the second half.
    """
    if len(values) < MIN_TREND_SCORES:
        return Trend.STABLE

    half = len(values) // 2
    improvement = mean(values[:half]) - mean(values[half:])
    threshold = TREND_THRESHOLD[scoring_type]
    if improvement > threshold:
        return Trend.IMPROVING
    if improvement < -threshold:
        return Trend.DECLINING
    return Trend.STABLE


def classify_temperature(values: list[float], scoring_type: ScoringType) -> Temperature:
    """How the last few scores compare with the player's best and average."""
    if not values:
        return Temperature.COLD

    recent_avg = mean(values[-RECENT_SCORES:])
    from_best = min(values) - recent_avg
    from_avg = mean(values) - recent_avg

    avg_threshold = WARM_THRESHOLD[scoring_type]
    if abs(from_best) <= HOT_THRESHOLD[scoring_type]:
        return Temperature.HOT
    if from_avg > avg_threshold:
        return Temperature.WARM
    if abs(from_avg) <= avg_threshold:
        return Temperature.COOL
    return Temperature.COLD


def player_temperature(game: Game, scores: list[GameScore], player_name: str) -> GameTemperature | None:
    """Trend and temperature for one player, matched by name only."""
    wanted = normalize_name(player_name)
    pairs = [
        pair for pair in qualifying(scores, game.scoring_type)
        if normalize_name(pair[0].player_name) == wanted
    ]
    if not pairs:
        return None

    pairs.sort(key=lambda pair: pair[0].date_achieved)
    values = [value for _, value in pairs]
    best = min(pairs, key=lambda pair: pair[1])[0]

    return GameTemperature(
        game_id=game.id,
        game_name=game.name,
        scoring_type=game.scoring_type,
        score_count=len(pairs),
        trend=classify_trend(values, game.scoring_type),
        temperature=classify_temperature(values, game.scoring_type),
        latest_score=format_score(pairs[-1][0], game.scoring_type),
        best_score=format_score(best, game.scoring_type),
    )


def overall_temperature(games: list[GameTemperature]) -> Temperature:
    """Most common per-game temperature; ties go to the first one seen."""
    if not games:
        return Temperature.COLD
    counts = Counter(game.temperature for game in games)
    return max(counts, key=counts.get)


# Winners


def select_winners(scores: list[GameScore], scoring_type: ScoringType) -> list[GameScore]:
    """All scores tied at the best raw value, one per player identity."""
    pairs = qualifying(scores, scoring_type)
    if not pairs:
        return []
    best = min(value for _, value in pairs)
    return dedupe_by_identity([score for score, value in pairs if value == best])


def build_top_winners(
    scores: list[GameScore],
    games: dict[int, Game],
    index: dict[date, int],
    tz: ZoneInfo,
    top: int,
) -> list[TopWinnersSeries]:
    """Per-player daily win counts across games, most wins first."""
    day_count = len(index)
    groups: dict[tuple[int, date], list[GameScore]] = defaultdict(list)
    for score in scores:
        day = local_date(score.date_achieved, tz)
        if day in index:
            groups[(score.game_id, day)].append(score)

    series: dict[str, TopWinnersSeries] = {}
    for (game_id, day), group in groups.items():
        game = games.get(game_id)
        scoring_type = game.scoring_type if game else ScoringType.GUESSES
        for winner in select_winners(group, scoring_type):
            key = identity_key(winner)
            if key not in series:
                profile_url = winner.profile_url if winner.profile_url and winner.profile_url.strip() else None
                series[key] = TopWinnersSeries(
                    player_id=key,
                    player_name=winner.player_name,
                    profile_url=profile_url,
                    data=[0] * day_count,
                )
            series[key].data[index[day]] += 1

    for entry in series.values():
        entry.total = sum(entry.data)

    ranked = sorted(series.values(), key=lambda s: (-s.total, s.player_name.lower(), s.player_name))
    return ranked[:top]
