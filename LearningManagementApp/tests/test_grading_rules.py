"""Pure grading and progress rules (no database)."""

import math

import pytest
from hypothesis import given, strategies as st

from LearningManagementApp.core.choices import Standing
from LearningManagementApp.core.config import PlatformSettings
from LearningManagementApp.core.exceptions import ValidationError
from LearningManagementApp.domain.services.grading_service import score_quiz_answer, validate_grade, validate_option
from LearningManagementApp.domain.services.learning_service import validate_quiz_definition
from LearningManagementApp.domain.services.progress_service import classify_standing, combine_channel_averages
from LearningManagementApp.learning.models import Quiz


@given(st.integers(min_value=0, max_value=100))
def test_grade_in_range_accepted(grade):
    assert validate_grade(grade) == grade


@given(st.one_of(st.integers(max_value=-1), st.integers(min_value=101)))
def test_grade_out_of_range_rejected(grade):
    with pytest.raises(ValidationError):
        validate_grade(grade)


@pytest.mark.parametrize("value", [True, 80.0, "80", None])
def test_grade_must_be_integer(value):
    with pytest.raises(ValidationError):
        validate_grade(value)


@pytest.mark.parametrize("value", [None, 0, 5, False, "2"])
def test_invalid_option_rejected(value):
    with pytest.raises(ValidationError):
        validate_option(value)


@given(
    correct=st.integers(min_value=1, max_value=4),
    selected=st.integers(min_value=1, max_value=4),
    points=st.integers(min_value=1, max_value=100),
)
def test_quiz_score_is_all_or_nothing(correct, selected, points):
    quiz = Quiz(title="Q", question="?", options=["a", "b", "c", "d"], correct_option=correct, total_points=points)
    expected = points if selected == correct else 0
    assert score_quiz_answer(quiz, selected) == expected


@given(
    a=st.floats(min_value=0, max_value=100, allow_nan=False),
    q=st.floats(min_value=0, max_value=100, allow_nan=False),
)
def test_combined_progress_truncates(a, q):
    result = combine_channel_averages(a, q)
    assert isinstance(result, int)
    assert 0 <= result <= 100
    assert result == math.floor((a + q) / 2)
    assert result <= (a + q) / 2 < result + 1


def test_combined_progress_examples():
    assert combine_channel_averages(100, 0) == 50
    assert combine_channel_averages(80, 0) == 40
    assert combine_channel_averages(75, 0) == 37
    assert combine_channel_averages(99.5, 100) == 99


@given(progress=st.integers(min_value=0, max_value=100), threshold=st.floats(min_value=0, max_value=100))
def test_standing_follows_given_threshold(progress, threshold):
    standing = classify_standing(progress, PlatformSettings(pass_threshold=threshold))
    assert (standing == Standing.PASSING) == (progress >= threshold)


def test_changing_threshold_reclassifies_same_progress():
    assert classify_standing(65, PlatformSettings(pass_threshold=70.0)) == Standing.NEEDS_IMPROVEMENT
    assert classify_standing(65, PlatformSettings(pass_threshold=60.0)) == Standing.PASSING


@pytest.mark.parametrize("options,correct,points", [
    (["a", "b", "c"], 1, 100),
    (["a", "b", "c", ""], 1, 100),
    (["a", "b", "c", "d"], 0, 100),
    (["a", "b", "c", "d"], 5, 100),
    (["a", "b", "c", "d"], 2, 0),
    (["a", "b", "c", "d"], 2, 101),
    (["a", "b", "c", "d"], 2, 500),
])
def test_quiz_definition_rejected(options, correct, points):
    with pytest.raises(ValidationError):
        validate_quiz_definition(options, correct, points)


def test_quiz_definition_strips_options():
    assert validate_quiz_definition([" a", "b ", "c", "d"], 2, 10) == ["a", "b", "c", "d"]
