"""
Stats service: player statistics

Pure calculation on top of the repository's counters.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any


def percentage_correct(correct_answers: int, times_failed: int) -> float:
    """
    Share of a player's answers that were accepted

    Returns:
        percentage rounded half up to one decimal, 100.0 when the player has
        no answers yet

    Examples:
        percentage_correct(0, 0) -> 100.0
        percentage_correct(2, 1) -> 66.7
        percentage_correct(1, 15) -> 6.3
    """
    total = correct_answers + times_failed
    if total == 0:
        return 100.0
    # exact decimal division, float rounding would turn 6.25 into 6.2
    percentage = Decimal(100 * correct_answers) / Decimal(total)
    return float(percentage.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def get_user_stats(repository, user_id: str) -> Dict[str, Any]:
    """
    Build the stats summary of one player

    Args:
        repository: any GameRepository
        user_id: chat user id

    Returns:
        dict with correct_answers, times_failed and percentage_correct
    """
    stats = repository.get_user_stats(user_id)
    return {
        "user_id": user_id,
        "correct_answers": stats.correct_answers,
        "times_failed": stats.times_failed,
        "percentage_correct": percentage_correct(stats.correct_answers, stats.times_failed),
    }
