"""Unit tests for ruleset parsing, selection and the base XP catalog."""

import json

import pytest

from questline.experience.exceptions import InvalidXPInputError, RulesetConfigurationError
from questline.experience.rules import (
    DEFAULT_EVENT_BASE_XP,
    Ruleset,
    base_xp_for_activity,
    base_xp_for_tags,
    default_ruleset,
    load_ruleset,
    parse_ruleset,
    select_active_ruleset,
)


class TestDefaultRuleset:
    def test_coefficients(self):
        ruleset = default_ruleset()
        multipliers = ruleset.multipliers
        assert multipliers.difficulty.easy == 1.0
        assert multipliers.difficulty.medium == 1.2
        assert multipliers.difficulty.hard == 1.5
        assert multipliers.class_alignment == 1.2
        assert multipliers.novelty.bonus == 1.1
        assert multipliers.novelty.window_days == 30
        assert multipliers.social_proof == 1.1

    def test_level_curve(self):
        curve = default_ruleset().level_curve
        assert curve.base_xp == 100
        assert curve.increment == 50

    def test_active(self):
        assert default_ruleset().active is True

    def test_round_trips_to_admin_document(self, rules_doc):
        assert default_ruleset().to_rules_json() == rules_doc


class TestRulesetImmutability:
    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            default_ruleset().base_xp_catalog["fix_bug"] = 999
        assert default_ruleset().base_xp_catalog["fix_bug"] == 30

    def test_catalog_copied_from_document(self, rules_doc):
        ruleset = Ruleset.from_rules_json(rules_doc)
        rules_doc["baseXPCatalog"]["fix_bug"] = 999
        assert base_xp_for_activity(ruleset, "fix_bug") == 30

    def test_dumps_plain_dict(self):
        catalog = default_ruleset().to_rules_json()["baseXPCatalog"]
        assert type(catalog) is dict
        assert catalog["close_pilot"] == 120

    def test_hashable(self, rules_doc):
        assert hash(default_ruleset()) == hash(Ruleset.from_rules_json(rules_doc, active=True))
        assert Ruleset.from_rules_json(rules_doc, active=True) == default_ruleset()


class TestRulesetValidation:
    def test_missing_multiplier_key(self, rules_doc):
        del rules_doc["multipliers"]["socialProof"]
        with pytest.raises(RulesetConfigurationError) as exc_info:
            Ruleset.from_rules_json(rules_doc, name="broken")
        assert exc_info.value.error_type == "invalid_ruleset"
        assert "multipliers.socialProof" in [e["loc"] for e in exc_info.value.errors]

    def test_missing_difficulty_level(self, rules_doc):
        del rules_doc["multipliers"]["difficulty"]["hard"]
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    @pytest.mark.parametrize("value", [0, -1.2])
    def test_non_positive_multiplier(self, rules_doc, value):
        rules_doc["multipliers"]["classAlignment"] = value
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    @pytest.mark.parametrize("value", [True, "1.2"])
    def test_coefficient_must_be_a_number(self, rules_doc, value):
        rules_doc["multipliers"]["socialProof"] = value
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    def test_integer_coefficient_accepted(self, rules_doc):
        rules_doc["multipliers"]["difficulty"]["hard"] = 2
        assert Ruleset.from_rules_json(rules_doc).multipliers.difficulty.hard == 2.0

    def test_non_finite_multiplier(self, rules_doc):
        rules_doc["multipliers"]["novelty"]["bonus"] = float("inf")
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    def test_zero_increment(self, rules_doc):
        rules_doc["levelCurve"]["increment"] = 0
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    def test_negative_catalog_entry(self, rules_doc):
        rules_doc["baseXPCatalog"]["fix_bug"] = -30
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(rules_doc)

    def test_not_a_mapping(self):
        with pytest.raises(RulesetConfigurationError):
            Ruleset.from_rules_json(["multipliers"])

    def test_unrelated_sections_ignored(self, rules_doc):
        rules_doc["streaks"] = {"freezeLimit": 3, "graceDays": 1}
        ruleset = Ruleset.from_rules_json(rules_doc)
        assert ruleset.multipliers.social_proof == 1.1

    def test_level_curve_defaults(self, rules_doc):
        del rules_doc["levelCurve"]
        ruleset = Ruleset.from_rules_json(rules_doc)
        assert ruleset.level_curve.base_xp == 100
        assert ruleset.level_curve.increment == 50


class TestParseRuleset:
    def test_stored_record(self, rules_doc):
        ruleset = parse_ruleset({"name": "season-2", "active": True, "rules_json": rules_doc})
        assert ruleset.name == "season-2"
        assert ruleset.active is True

    def test_bare_document(self, rules_doc):
        ruleset = parse_ruleset(rules_doc, name="bare")
        assert ruleset.name == "bare"
        assert ruleset.active is False


class TestLoadRuleset:
    def test_loads_file(self, tmp_path, rules_doc):
        rules_doc["multipliers"]["socialProof"] = 1.25
        path = tmp_path / "spring.json"
        path.write_text(json.dumps(rules_doc), encoding="utf-8")

        ruleset = load_ruleset(path)

        assert ruleset.name == "spring"
        assert ruleset.active is True
        assert ruleset.multipliers.social_proof == 1.25

    def test_missing_file(self, tmp_path):
        with pytest.raises(RulesetConfigurationError):
            load_ruleset(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RulesetConfigurationError) as exc_info:
            load_ruleset(path)
        assert "not valid JSON" in exc_info.value.message


class TestSelectActiveRuleset:
    def test_single_active(self, make_ruleset):
        active = make_ruleset(name="live", active=True)
        draft = make_ruleset(name="draft", active=False)
        assert select_active_ruleset([draft, active]) is active

    def test_none_active(self, make_ruleset):
        with pytest.raises(RulesetConfigurationError):
            select_active_ruleset([make_ruleset(active=False)])

    def test_several_active(self, make_ruleset):
        with pytest.raises(RulesetConfigurationError) as exc_info:
            select_active_ruleset([make_ruleset(name="a"), make_ruleset(name="b")])
        assert "'a'" in exc_info.value.message


class TestCatalog:
    def test_activity_lookup(self, ruleset):
        assert base_xp_for_activity(ruleset, "fix_bug") == 30
        assert base_xp_for_activity(ruleset, "close_pilot") == 120
        assert base_xp_for_activity(ruleset, "read_doc") == 5

    def test_unknown_activity(self, ruleset):
        with pytest.raises(InvalidXPInputError) as exc_info:
            base_xp_for_activity(ruleset, "nap")
        assert exc_info.value.field == "activity"

    @pytest.mark.parametrize(
        "tags,expected",
        [
            (["tutorial"], 20),
            (["deploy", "infra"], 50),
            (["post"], 15),
            (["bug"], 30),
            (["bug", "tutorial"], 20),
            (["reading"], DEFAULT_EVENT_BASE_XP),
            ([], DEFAULT_EVENT_BASE_XP),
        ],
    )
    def test_event_tags(self, ruleset, tags, expected):
        assert base_xp_for_tags(ruleset, tags) == expected

    def test_event_tag_missing_from_catalog(self, rules_doc):
        del rules_doc["baseXPCatalog"]["fix_bug"]
        ruleset = Ruleset.from_rules_json(rules_doc)
        with pytest.raises(RulesetConfigurationError):
            base_xp_for_tags(ruleset, ["bug"])
