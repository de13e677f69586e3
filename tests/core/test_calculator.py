"""Unit tests for the calorie target calculator - pure functions, no mocks needed."""

import pytest

from nutrilens.core.errors import InvalidGoal, InvalidProfile
from nutrilens.core.models import (
    ActivityLevel,
    Gender,
    HealthGoal,
    Profile,
    UserProfile,
)
from nutrilens.core.calculator import (
    calculate_bmr,
    calculate_daily_calorie_target,
    derive_macro_targets,
    suggest_goals,
    apply_suggested_goals,
    round_half_up,
)


def make_profile(**overrides) -> Profile:
    fields = dict(
        gender=Gender.MALE,
        weight=75,
        height=180,
        age=28,
        activity_level=ActivityLevel.MODERATELY_ACTIVE,
        goal=HealthGoal.MAINTAIN,
    )
    fields.update(overrides)
    return Profile(**fields)


class TestCalculateBmr:
    """Tests for calculate_bmr."""

    def test_male_formula(self):
        """88.362 + 13.397*75 + 4.799*180 - 5.677*28."""
        assert calculate_bmr(make_profile()) == pytest.approx(1798.001)

    def test_female_formula(self):
        """447.593 + 9.247*60 + 3.098*165 - 4.330*30."""
        profile = make_profile(gender=Gender.FEMALE, weight=60, height=165, age=30)
        assert calculate_bmr(profile) == pytest.approx(1383.683)

    def test_other_uses_female_formula(self):
        """Other shares the female coefficients."""
        female = make_profile(gender=Gender.FEMALE)
        other = make_profile(gender=Gender.OTHER)
        assert calculate_bmr(other) == calculate_bmr(female)

    @pytest.mark.parametrize("field", ["weight", "height", "age"])
    def test_non_positive_biometrics_rejected(self, field):
        """Zero weight, height or age raises InvalidProfile."""
        with pytest.raises(InvalidProfile):
            calculate_bmr(make_profile(**{field: 0}))

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidProfile):
            calculate_bmr(make_profile(weight=-70))


class TestCalculateDailyCalorieTarget:
    """Tests for calculate_daily_calorie_target."""

    def test_maintain_example(self):
        """Male, 75kg, 180cm, 28y, moderately active: 1798.001 * 1.55 -> 2787."""
        assert calculate_daily_calorie_target(make_profile()) == 2787

    def test_weight_loss_subtracts_500(self):
        profile = make_profile(goal=HealthGoal.WEIGHT_LOSS)
        assert calculate_daily_calorie_target(profile) == 2287

    def test_muscle_gain_adds_300(self):
        profile = make_profile(goal=HealthGoal.MUSCLE_GAIN)
        assert calculate_daily_calorie_target(profile) == 3087

    @pytest.mark.parametrize(
        "level,expected",
        [
            (ActivityLevel.SEDENTARY, 2158),
            (ActivityLevel.LIGHTLY_ACTIVE, 2472),
            (ActivityLevel.MODERATELY_ACTIVE, 2787),
            (ActivityLevel.VERY_ACTIVE, 3102),
        ],
    )
    def test_activity_multipliers(self, level, expected):
        """1798.001 scaled by 1.2 / 1.375 / 1.55 / 1.725."""
        assert calculate_daily_calorie_target(make_profile(activity_level=level)) == expected

    def test_deterministic(self):
        """Same profile always gives the same target."""
        profile = make_profile(gender=Gender.FEMALE, weight=58.5, age=41)
        results = {calculate_daily_calorie_target(profile) for _ in range(20)}
        assert len(results) == 1

    def test_returns_int(self):
        assert isinstance(calculate_daily_calorie_target(make_profile()), int)

    def test_pathological_profile_can_go_negative(self):
        """No floor is applied to the suggestion."""
        profile = make_profile(
            gender=Gender.FEMALE,
            weight=1,
            height=1,
            age=120,
            activity_level=ActivityLevel.SEDENTARY,
            goal=HealthGoal.WEIGHT_LOSS,
        )
        # (447.593 + 9.247 + 3.098 - 519.6) * 1.2 - 500 = -571.5944
        assert calculate_daily_calorie_target(profile) == -572


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_half_rounds_towards_positive(self):
        assert round_half_up(-2.5) == -2

    def test_below_half_rounds_down(self):
        assert round_half_up(73.33) == 73


class TestDeriveMacroTargets:
    """Tests for derive_macro_targets."""

    def test_split_at_2200(self):
        """30/40/30 split: 660/4, 880/4, 660/9."""
        goals = derive_macro_targets(2200)
        assert goals.daily_calorie_goal == 2200
        assert goals.protein_goal == 165
        assert goals.carbs_goal == 220
        assert goals.fat_goal == 73

    @pytest.mark.parametrize("target", [1200, 1555, 1999, 2200, 2287, 2787, 3101, 4000])
    def test_split_calories_within_rounding(self, target):
        """Each gram goal is off by at most half a gram, so at most 0.5 * (4 + 4 + 9) kcal total."""
        goals = derive_macro_targets(target)
        kcal = goals.protein_goal * 4 + goals.carbs_goal * 4 + goals.fat_goal * 9
        assert abs(kcal - target) <= 8.5

    def test_split_at_2200_drifts_three_kcal(self):
        """660 + 880 + 657 = 2197."""
        goals = derive_macro_targets(2200)
        assert goals.protein_goal * 4 + goals.carbs_goal * 4 + goals.fat_goal * 9 == 2197

    def test_zero_target(self):
        goals = derive_macro_targets(0)
        assert (goals.protein_goal, goals.carbs_goal, goals.fat_goal) == (0, 0, 0)


class TestSuggestGoals:
    """Tests for suggest_goals and apply_suggested_goals."""

    def test_suggest_goals_combines_target_and_split(self):
        goals = suggest_goals(make_profile())
        assert goals == derive_macro_targets(2787)

    def test_apply_overwrites_all_four_goals(self):
        """Applying replaces calories, protein, carbs and fat together."""
        profile = UserProfile(
            daily_calorie_goal=1800,
            protein_goal=90,
            carbs_goal=120,
            fat_goal=40,
        )
        updated = apply_suggested_goals(profile)

        assert updated.daily_calorie_goal == 2787
        assert updated.protein_goal == 209
        assert updated.carbs_goal == 279
        assert updated.fat_goal == 93

    def test_apply_leaves_input_untouched(self):
        profile = UserProfile()
        apply_suggested_goals(profile)
        assert profile.daily_calorie_goal == 2200
        assert profile.protein_goal == 150

    def test_apply_keeps_other_fields(self):
        profile = UserProfile(name="Sam", allergies=["peanuts"])
        updated = apply_suggested_goals(profile)
        assert updated.name == "Sam"
        assert updated.allergies == ["peanuts"]

    def test_apply_rejects_non_positive_suggestion(self):
        """A negative suggestion is not stored as a goal."""
        profile = UserProfile(
            gender=Gender.FEMALE,
            weight=1,
            height=1,
            age=120,
            activity_level=ActivityLevel.SEDENTARY,
            goal=HealthGoal.WEIGHT_LOSS,
        )
        with pytest.raises(InvalidGoal):
            apply_suggested_goals(profile)
        assert profile.daily_calorie_goal == 2200

    def test_apply_rejects_invalid_profile(self):
        profile = UserProfile(weight=0)
        with pytest.raises(InvalidProfile):
            apply_suggested_goals(profile)
