# grading.py
# Grade scale, item scorer and total scorer

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import IntEnum
from numbers import Real

from errors import InvalidGrade, InvalidMaxScore

ONE_DECIMAL = Decimal('0.1')


class Grade(IntEnum):
    """Five ordinal levels, best first."""
    EXCELLENT = 1
    VERY_GOOD = 2
    GOOD = 3
    FAIR = 4
    POOR = 5

    @property
    def percentage(self):
        return GRADE_PERCENTAGES[self]

    @property
    def label(self):
        return GRADE_LABELS[self]


# The only place grade percentages are defined
GRADE_PERCENTAGES = {
    Grade.EXCELLENT: Decimal('1.0'),
    Grade.VERY_GOOD: Decimal('0.9'),
    Grade.GOOD: Decimal('0.8'),
    Grade.FAIR: Decimal('0.7'),
    Grade.POOR: Decimal('0.6'),
}

# Labels printed on the rubric sheet (수/우/미/양/가)
GRADE_LABELS = {
    Grade.EXCELLENT: '수',
    Grade.VERY_GOOD: '우',
    Grade.GOOD: '미',
    Grade.FAIR: '양',
    Grade.POOR: '가',
}


def parse_grade(grade):
    """Return the Grade for a level number or rubric label, else raise InvalidGrade."""
    if isinstance(grade, Grade):
        return grade
    if isinstance(grade, str):
        for level, label in GRADE_LABELS.items():
            if grade == label:
                return level
        try:
            grade = int(grade.strip())
        except ValueError:
            raise InvalidGrade(grade) from None
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidGrade(grade)
    try:
        return Grade(grade)
    except ValueError:
        raise InvalidGrade(grade) from None


def _as_max_score(max_score):
    if isinstance(max_score, bool) or not isinstance(max_score, (Real, Decimal)):
        raise InvalidMaxScore(max_score)
    if isinstance(max_score, float) and not math.isfinite(max_score):
        raise InvalidMaxScore(max_score)
    try:
        value = Decimal(str(max_score))
    except InvalidOperation:
        raise InvalidMaxScore(max_score) from None
    if not value.is_finite() or value <= 0:
        raise InvalidMaxScore(max_score)
    return value


def rubric_max_score(max_score):
    """
    Validate a criterion's max score. Besides being positive it must sit on
    the 0.1 grid item scores are rounded to, otherwise rounding could lift
    an item score above its max (0.05 at the top grade rounds to 0.1).
    """
    value = _as_max_score(max_score)
    if value != value.quantize(ONE_DECIMAL):
        raise InvalidMaxScore(max_score)
    return float(value)


def _score_item_decimal(max_score, grade):
    value = _as_max_score(max_score) * parse_grade(grade).percentage
    return value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def score_item(max_score, grade):
    """
    Score one criterion: max_score * grade percentage, rounded half-up to
    one decimal place.

    Raises InvalidGrade / InvalidMaxScore on malformed input; nothing is
    coerced.
    """
    return float(_score_item_decimal(max_score, grade))


def grade_table(max_score):
    """Score for every grade level of one criterion, best grade first."""
    return {level: score_item(max_score, level) for level in Grade}


def total_score(items):
    """
    Sum the item scores of (max_score, grade) pairs, rounded to one decimal.

    Completeness of the pairs (one per criterion) is the caller's concern.
    """
    total = sum((_score_item_decimal(max_score, grade) for max_score, grade in items), Decimal('0'))
    return float(total.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))
