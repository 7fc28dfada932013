"""
Tests for the batch quality validator.

Covers:
- Collapse detection (many inputs -> one output)
- Script detection order and language table
- Mismatch threshold max(1, 25% of batch)
"""

import pytest

from transgate.core.validator import (
    QualityValidator,
    base_language,
    detect_script,
    script_for,
)


@pytest.fixture
def validator():
    return QualityValidator()


class TestCollapse:

    def test_distinct_inputs_single_output(self, validator):
        report = validator.check(["apple", "banana", "cherry"], ["X", "X", "X"], "fr")
        assert report.collapsed
        assert report.suspicious

    def test_identical_inputs_are_not_collapse(self, validator):
        report = validator.check(["Hello", " Hello "], ["Bonjour", "Bonjour"], "fr")
        assert not report.collapsed
        assert not report.suspicious

    def test_whitespace_is_ignored_when_comparing_outputs(self, validator):
        report = validator.check(["a", "b"], ["X ", " X"], "fr")
        assert report.collapsed

    def test_varied_outputs_pass(self, validator):
        report = validator.check(["apple", "banana"], ["pomme", "banane"], "fr")
        assert not report.suspicious


class TestScriptMismatch:

    def test_half_latin_hindi_batch_is_flagged(self, validator):
        inputs = ["Hello", "Doctor", "Water", "Thanks"]
        outputs = ["नमस्ते", "Doctor", "पानी", "Thanks"]

        report = validator.check(inputs, outputs, "hi")

        assert report.expected_script == "devanagari"
        assert report.mismatch_count == 2
        assert report.mismatched_indices == [1, 3]
        assert report.many_script_problems
        assert report.suspicious

    def test_single_mismatch_is_within_tolerance(self, validator):
        report = validator.check(["a", "b", "c", "d"], ["नमस्ते", "OK", "पानी", "धन्यवाद"], "hi")
        assert report.mismatched_indices == [1]
        assert not report.many_script_problems
        assert not report.suspicious

    def test_threshold_scales_with_batch_size(self, validator):
        inputs = [str(i) for i in range(8)]
        outputs = ["Latin", "Latin", "நன்றி", "நன்றி", "நன்றி", "நன்றி", "நன்றி", "நன்றி"]
        # 2 mismatches, threshold max(1, 2.0) = 2
        assert not validator.check(inputs, outputs, "ta").many_script_problems
        outputs[2] = "Latin"
        assert validator.check(inputs, outputs, "ta").many_script_problems

    def test_unknown_script_outputs_are_not_mismatches(self, validator):
        report = validator.check(["1", "2", "3"], ["123", "", "!!"], "hi")
        assert report.mismatch_count == 0

    def test_languages_outside_table_are_exempt(self, validator):
        report = validator.check(["a", "b", "c"], ["नमस्ते", "পানি", "hello"], "fr")
        assert report.expected_script is None
        assert report.mismatch_count == 0
        assert not report.suspicious

    def test_region_subtag_is_ignored(self, validator):
        report = validator.check(["a", "b"], ["Hello", "World"], "hi-IN")
        assert report.expected_script == "devanagari"
        assert report.mismatched_indices == [0, 1]


class TestScriptDetection:

    @pytest.mark.parametrize("text,script", [
        ("नमस्ते", "devanagari"),
        ("নমস্কার", "bengali"),
        ("ନମସ୍କାର", "oriya"),
        ("வணக்கம்", "tamil"),
        ("നമസ്കാരം", "malayalam"),
        ("నమస్కారం", "telugu"),
        ("ನಮಸ್ಕಾರ", "kannada"),
        ("Bonjour", "latin"),
        ("Ça va", "latin"),
        ("", None),
        ("12345", None),
        ("こんにちは", None),
    ])
    def test_detect_script(self, text, script):
        assert detect_script(text) == script

    def test_first_match_wins(self):
        assert detect_script("OK नमस्ते") == "devanagari"

    @pytest.mark.parametrize("lang,script", [
        ("hi", "devanagari"),
        ("bn", "bengali"),
        ("as", "bengali"),
        ("or", "oriya"),
        ("od", "oriya"),
        ("ta", "tamil"),
        ("ml", "malayalam"),
        ("te", "telugu"),
        ("kn", "kannada"),
        ("en", None),
        ("fr", None),
    ])
    def test_script_for(self, lang, script):
        assert script_for(lang) == script

    def test_base_language(self):
        assert base_language("hi-IN") == "hi"
        assert base_language("TA_in") == "ta"
        assert base_language(" ml ") == "ml"
