import pytest

from services.ai.output_postprocess import _clean_output, _strip_quotes
from services.ai.prompts import SYSTEM_PROMPT, build_prompt, preservation_guidance


class TestPreservationGuidance:
    def test_balanced(self):
        assert preservation_guidance("formal", 50) == "with a balanced mix of original and target styles"

    def test_lean_to_target(self):
        text = preservation_guidance("formal", 20)
        assert "stronger emphasis on the formal style" in text
        assert "(80% formal, 20% original)" in text

    def test_lean_to_original(self):
        assert "(70% original, 30% formal)" in preservation_guidance("formal", 70)


class TestBuildPrompt:
    def test_with_from_style(self):
        system, user = build_prompt("hi", "casual", "formal")
        assert system == SYSTEM_PROMPT
        assert user.startswith("Transform the following text from casual style to formal style")
        assert user.endswith('The text is: "hi"')

    def test_without_from_style(self):
        _, user = build_prompt("hi", None, "poetic", 0)
        assert user.startswith("Transform the following text to poetic style")
        assert "(100% poetic, 0% original)" in user


class TestCleanOutput:
    @pytest.mark.parametrize("raw,expected", [
        ("  plain  ", "plain"),
        ('"quoted"', "quoted"),
        ("Here is the transformed text: Good day.", "Good day."),
        ("Here's the text transformed into formal style:\n\"Good day.\"", "Good day."),
        ("", ""),
        ("Note: The transformed text is below: Good day.", "Note: The transformed text is below: Good day."),
        ("Good day. The transformed text is: done.", "Good day. The transformed text is: done."),
    ])
    def test_cleanup(self, raw, expected):
        assert _clean_output(raw) == expected

    def test_strips_echoed_prompt(self):
        assert _clean_output("PROMPT then the answer", prompt="PROMPT") == "then the answer"

    def test_strip_quotes_leaves_prefixes_alone(self):
        assert _strip_quotes('  "Here is the transformed text: hi"  ') == "Here is the transformed text: hi"
        assert _strip_quotes('He said "hi"') == 'He said "hi"'
