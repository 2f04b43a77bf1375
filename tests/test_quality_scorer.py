"""Tests for the script quality gate and anti-brain-rot rules."""

from unittest.mock import patch

from kidsvid.config import PASSING_THRESHOLD
from kidsvid.models.content import (
    AgeBracket,
    EngagementHook,
    EpisodeStructure,
    QualityScore,
    ScoreableContent,
    Segment,
)
from kidsvid.quality.scorer import (
    check_anti_brain_rot_rules,
    is_duration_appropriate,
    score_content,
)

COUNTING_SCRIPT = '''[Cosmo appears bouncing] "Hey friends! Let's count together! Can you count with me?
One apple, two apples, three apples! That's right!
Now let's try with stars. One star, two stars, three stars, four stars, five stars!
Can you find something red? Yes! The apple is red! Amazing!
Let's count one more time. 1, 2, 3, 4, 5! You did it!
Do you know what comes after five? Let's discover together!"'''


def _make_structure(**overrides) -> EpisodeStructure:
    fields = dict(
        hook=Segment(15, "Character discovers a mystery number"),
        problem=Segment(30, "How many apples? Can you help count?"),
        exploration=Segment(150, "Let's count together with different objects and learn numbers"),
        resolution=Segment(30, "We did it! We learned to count to 5!"),
        next_preview=Segment(15, "Next time: shapes!"),
    )
    fields.update(overrides)
    return EpisodeStructure(**fields)


def _make_content(**overrides) -> ScoreableContent:
    fields = dict(
        title="Count to 5 with Cosmo! Can You Do It?",
        script=COUNTING_SCRIPT,
        educational_objective="Learn to count objects from 1 to 5 using visual aids",
        learning_takeaways=["Count from 1 to 5", "Recognize number quantities"],
        engagement_hooks=[
            EngagementHook.CALL_RESPONSE,
            EngagementHook.REWARD_LOOP,
            EngagementHook.MYSTERY_REVEAL,
            EngagementHook.DIRECT_ADDRESS,
        ],
        episode_structure=_make_structure(),
        age_bracket=AgeBracket.TODDLER,
        estimated_duration=150,
    )
    fields.update(overrides)
    return ScoreableContent(**fields)


class TestScoreContent:
    def test_passes_high_quality_content(self):
        result = score_content(_make_content())
        assert result.passed is True
        assert result.educational_value == 10
        assert result.engagement_potential == 10
        assert result.feedback == []

    def test_threshold(self):
        assert PASSING_THRESHOLD == 7

    @patch("kidsvid.quality.scorer.PASSING_THRESHOLD", 11)
    def test_unreachable_threshold_fails_everything(self):
        result = score_content(_make_content())
        assert result.passed is False
        assert any("below threshold of 11" in f for f in result.feedback)

    def test_fails_without_objective(self):
        result = score_content(_make_content(educational_objective=""))
        assert result.passed is False
        assert any("objective" in f for f in result.feedback)

    def test_fails_without_takeaways(self):
        result = score_content(_make_content(learning_takeaways=[]))
        # educational score alone would still clear the threshold
        assert result.educational_value >= PASSING_THRESHOLD
        assert result.passed is False
        assert "No learning takeaways defined" in result.feedback
        assert any(f.startswith("[ANTI-BRAIN-ROT]") and "takeaway" in f for f in result.feedback)

    def test_fails_without_hooks(self):
        result = score_content(_make_content(engagement_hooks=[]))
        assert result.passed is False
        assert "No engagement hooks defined" in result.feedback
        assert any("Engagement potential" in f and "below threshold" in f for f in result.feedback)

    def test_penalizes_missing_critical_hooks(self):
        result = score_content(_make_content(engagement_hooks=[
            EngagementHook.MYSTERY_REVEAL, EngagementHook.EASTER_EGG, EngagementHook.CLIFFHANGER,
        ]))
        assert result.engagement_potential < score_content(_make_content()).engagement_potential
        assert "Missing critical engagement hooks: call_response and reward_loop" in result.feedback

    def test_rewards_diverse_hooks(self):
        few = score_content(_make_content(engagement_hooks=[
            EngagementHook.CALL_RESPONSE, EngagementHook.REWARD_LOOP,
        ]))
        many = score_content(_make_content())
        assert many.engagement_potential > few.engagement_potential

    def test_duplicate_hooks_do_not_add_variety(self):
        repeated = score_content(_make_content(engagement_hooks=[EngagementHook.CALL_RESPONSE] * 4))
        # count 3 + variety 0 + one critical hook + structure 2 + title 1
        assert repeated.engagement_potential == 7

    def test_accepts_hook_values_as_strings(self):
        as_strings = score_content(_make_content(
            engagement_hooks=["call_response", "reward_loop", "mystery_reveal", "direct_address"],
        ))
        assert as_strings == score_content(_make_content())

    def test_unknown_hook_counts_toward_variety(self):
        result = score_content(_make_content(
            engagement_hooks=["call_response", "reward_loop", "mystery_reveal", "jump_scare"],
        ))
        assert result.engagement_potential == 10
        assert result == score_content(_make_content())

    def test_scores_educational_markers(self):
        bare = score_content(_make_content(script="A character walks around. Things happen. The end."))
        assert score_content(_make_content()).educational_value > bare.educational_value
        assert any("educational content markers" in f for f in bare.feedback)

    def test_duration_for_toddlers(self):
        good = score_content(_make_content(age_bracket=AgeBracket.TODDLER, estimated_duration=120))
        too_long = score_content(_make_content(age_bracket=AgeBracket.TODDLER, estimated_duration=400))
        assert good.educational_value > too_long.educational_value
        assert "Duration 400s may not be appropriate for age 2-4" in too_long.feedback

    def test_duration_for_preschool(self):
        good = score_content(_make_content(age_bracket=AgeBracket.PRESCHOOL, estimated_duration=200))
        too_short = score_content(_make_content(age_bracket=AgeBracket.PRESCHOOL, estimated_duration=30))
        assert good.educational_value > too_short.educational_value

    def test_duration_for_early_school(self):
        assert score_content(
            _make_content(age_bracket=AgeBracket.EARLY_SCHOOL, estimated_duration=300)
        ).passed is True

    def test_rewards_engaging_titles(self):
        engaging = score_content(_make_content(title="Can You Count to 5?"))
        boring = score_content(_make_content(title="Counting Video"))
        assert engaging.engagement_potential > boring.engagement_potential

    def test_structure_completeness(self):
        incomplete = score_content(_make_content(episode_structure=_make_structure(
            hook=Segment(15, ""),
            problem=Segment(30, ""),
        )))
        assert score_content(_make_content()).engagement_potential > incomplete.engagement_potential

    def test_incomplete_structure_feedback(self):
        result = score_content(_make_content(episode_structure=_make_structure(
            hook=Segment(15, ""),
            problem=Segment(30, ""),
            resolution=Segment(30, "Yay"),
        )))
        assert "Episode structure is incomplete; fill all sections" in result.feedback

    def test_resolution_references_learning(self):
        good = score_content(_make_content())
        bad = score_content(_make_content(episode_structure=_make_structure(
            resolution=Segment(30, "Yay! Party time! Woohoo!"),
        )))
        assert good.educational_value > bad.educational_value
        assert "Resolution should reference what was learned" in bad.feedback

    def test_result_shape(self):
        result = score_content(_make_content())
        assert isinstance(result, QualityScore)
        assert isinstance(result.educational_value, int)
        assert isinstance(result.engagement_potential, int)
        assert isinstance(result.passed, bool)
        assert isinstance(result.feedback, list)

    def test_scores_are_capped(self):
        result = score_content(_make_content())
        assert 0 <= result.educational_value <= 10
        assert 0 <= result.engagement_potential <= 10

    def test_empty_content_scores_zero(self):
        empty = _make_content(
            title="",
            script="",
            educational_objective="",
            learning_takeaways=[],
            engagement_hooks=[],
            episode_structure=_make_structure(
                hook=Segment(0), problem=Segment(0), exploration=Segment(0),
                resolution=Segment(0), next_preview=Segment(0),
            ),
            estimated_duration=0,
        )
        result = score_content(empty)
        assert result.educational_value == 0
        assert result.engagement_potential == 0
        assert result.passed is False


class TestAntiBrainRotRules:
    def test_clean_content(self):
        assert check_anti_brain_rot_rules(_make_content()) == []

    def test_missing_takeaways(self):
        violations = check_anti_brain_rot_rules(_make_content(learning_takeaways=[]))
        assert violations == [
            "[ANTI-BRAIN-ROT] No learning takeaway: every video must teach something",
        ]

    def test_vague_objective(self):
        violations = check_anti_brain_rot_rules(_make_content(educational_objective="fun"))
        assert any("ANTI-BRAIN-ROT" in v and "objective" in v for v in violations)

    def test_objective_of_exactly_ten_chars_passes_rule(self):
        # the rule accepts length 10 while the score needs more than 10
        content = _make_content(educational_objective="0123456789")
        assert check_anti_brain_rot_rules(content) == []
        assert "Educational objective is missing or too vague" in score_content(content).feedback

    def test_no_interactive_moments(self):
        violations = check_anti_brain_rot_rules(_make_content(
            script=(
                "A long script with no questions or engagement. Characters just talk to each "
                "other about nothing in particular. The animation shows bright colors and loud "
                "sounds. More things happen on screen."
            ),
        ))
        assert any("interactive" in v for v in violations)

    def test_short_script_skips_interactive_check(self):
        violations = check_anti_brain_rot_rules(_make_content(script="Characters talk."))
        assert not any("interactive" in v for v in violations)

    def test_excessive_exclamation_marks(self):
        script = "! " * 50 + "some normal text"
        violations = check_anti_brain_rot_rules(_make_content(script=script))
        assert any("exclamation" in v for v in violations)

    def test_short_teaching_section(self):
        violations = check_anti_brain_rot_rules(_make_content(
            episode_structure=_make_structure(
                exploration=Segment(30, "Very short teaching section"),
                hook=Segment(15, "Long hook"),
                problem=Segment(30, "Long problem"),
                resolution=Segment(30, "Long celebration"),
                next_preview=Segment(15, "Long preview"),
            ),
            estimated_duration=120,
        ))
        assert any("Teaching section" in v for v in violations)

    def test_teaching_check_skipped_for_short_videos(self):
        violations = check_anti_brain_rot_rules(_make_content(
            episode_structure=_make_structure(exploration=Segment(10, "Quick count together")),
            estimated_duration=60,
        ))
        assert not any("Teaching section" in v for v in violations)

    def test_inappropriate_duration(self):
        violations = check_anti_brain_rot_rules(_make_content(estimated_duration=400))
        assert "[ANTI-BRAIN-ROT] Duration 400s not appropriate for age 2-4" in violations


class TestIsDurationAppropriate:
    def test_windows_are_inclusive(self):
        assert is_duration_appropriate(AgeBracket.TODDLER, 60)
        assert is_duration_appropriate(AgeBracket.TODDLER, 180)
        assert not is_duration_appropriate(AgeBracket.TODDLER, 181)
        assert not is_duration_appropriate(AgeBracket.PRESCHOOL, 119)
        assert is_duration_appropriate(AgeBracket.EARLY_SCHOOL, 420)

    def test_accepts_bracket_values(self):
        assert is_duration_appropriate("4-6", 200)

    def test_unknown_bracket_uses_default_window(self):
        assert is_duration_appropriate("9-12", 60)
        assert is_duration_appropriate("9-12", 420)
        assert not is_duration_appropriate("9-12", 421)
