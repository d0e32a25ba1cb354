"""Tests for the rule knowledge base."""

import pytest


class TestLookup:
    """Tests for two-tier rule lookup."""

    def test_direct_entry(self):
        """Test lookup of a direct entry."""
        from wcag_audit.core.knowledge import WCAG_DATABASE, lookup

        assert lookup("image-alt") is WCAG_DATABASE["image-alt"]

    def test_color_contrast_resolves_through_criterion(self):
        """Test lookup of color-contrast through its criterion."""
        from wcag_audit.core.knowledge import lookup

        assert lookup("color-contrast") == lookup("WCAG1.4.3")
        assert "4.5:1" in lookup("color-contrast").success_criteria

    def test_fallback_uses_first_mapped_criterion_with_entry(self):
        """Test the rule to criterion fallback order."""
        from wcag_audit.core.knowledge import WCAG_DATABASE, lookup

        # landmark-unique maps to WCAG1.3.1 then WCAG4.1.1
        assert lookup("landmark-unique") is WCAG_DATABASE["WCAG1.3.1"]
        assert lookup("label") is WCAG_DATABASE["WCAG1.3.1"]
        assert lookup("object-alt") is WCAG_DATABASE["WCAG1.1.1"]

    def test_unknown_rule_gets_generic_guidance(self):
        """Test lookup of an unknown rule."""
        from wcag_audit.core.knowledge import lookup

        info = lookup("aria-made-up-rule")

        assert "aria-made-up-rule" in info.description
        assert "aria-made-up-rule" in info.success_criteria
        assert "aria-made-up-rule" in info.suggested_fix
        assert info.code_example is None

    @pytest.mark.parametrize("rule_id", ["", None])
    def test_missing_identifier_gets_generic_guidance(self, rule_id):
        """Test that a missing identifier still yields displayable guidance."""
        from wcag_audit.core.knowledge import generic_info, lookup

        info = lookup(rule_id)

        assert info == generic_info("")
        assert info.description and info.suggested_fix

    def test_lookup_is_repeatable(self):
        """Test that repeated lookups return equal results."""
        from wcag_audit.core.knowledge import lookup

        assert lookup("button-name") == lookup("button-name")
        assert lookup("unknown-rule") == lookup("unknown-rule")

    def test_every_mapped_rule_resolves_to_specific_guidance(self):
        """Test that every mapped rule has specific guidance."""
        from wcag_audit.core.knowledge import RULE_TO_WCAG, generic_info, lookup

        for rule_id in RULE_TO_WCAG:
            assert lookup(rule_id) != generic_info(rule_id)


class TestTables:
    """Tests for the static tables."""

    def test_tables_are_read_only(self):
        """Test that the lookup tables cannot be modified."""
        from wcag_audit.core.knowledge import RULE_TO_WCAG, WCAG_DATABASE

        with pytest.raises(TypeError):
            RULE_TO_WCAG["new-rule"] = ("WCAG1.1.1",)
        with pytest.raises(TypeError):
            WCAG_DATABASE["new-rule"] = None

    def test_criteria_for_rule(self):
        """Test criteria_for_rule."""
        from wcag_audit.core.knowledge import criteria_for_rule

        assert criteria_for_rule("heading-order") == ("WCAG1.3.1", "WCAG2.4.6")
        assert criteria_for_rule("nope") == ()

    def test_criterion_number(self):
        """Test stripping the WCAG prefix."""
        from wcag_audit.core.knowledge import criterion_number

        assert criterion_number("WCAG1.4.3") == "1.4.3"
        assert criterion_number("1.4.3") == "1.4.3"
        assert criterion_number("color-contrast") == "color-contrast"
