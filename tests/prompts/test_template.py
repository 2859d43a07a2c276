"""Tests for the {{variable}} template engine."""

import pytest

from promptopia.prompts.models import MessageContent, PromptMessage
from promptopia.prompts.template import (
    VARIABLE_PATTERN,
    extract_variables,
    extract_variables_from_messages,
    is_valid_prompt_structure,
    substitute,
    substitute_messages,
    validate_messages,
)

pytestmark = pytest.mark.unit


def _text(role: str, text: str) -> PromptMessage:
    return PromptMessage(role=role, content=MessageContent(type="text", text=text))


def _image(role: str, image: str) -> PromptMessage:
    return PromptMessage(role=role, content=MessageContent(type="image", image=image))


class TestExtractVariables:
    """Tests for extract_variables."""

    def test_single_variable(self):
        assert extract_variables("Hello {{name}}!") == ["name"]

    def test_first_appearance_order_and_dedup(self):
        text = "{{b}} then {{a}} then {{b}} and {{c}}"
        assert extract_variables(text) == ["b", "a", "c"]

    def test_empty_and_none(self):
        assert extract_variables("") == []
        assert extract_variables(None) == []

    def test_no_placeholders(self):
        assert extract_variables("plain text with { braces }") == []

    def test_inner_whitespace_is_kept_verbatim(self):
        """Names are captured as written; dedup is by exact string."""
        assert extract_variables("{{ name }} and {{name}}") == [" name ", "name"]

    def test_unclosed_placeholder_is_ignored(self):
        assert extract_variables("Hello {{name") == []

    def test_pattern_rejects_nested_braces(self):
        assert VARIABLE_PATTERN.findall("{{a{b}}}") == []


class TestExtractVariablesFromMessages:
    """Tests for extract_variables_from_messages."""

    def test_union_in_message_order(self):
        messages = [
            _text("assistant", "Hi {{x}}"),
            _text("user", "Do {{y}} with {{x}}"),
        ]
        assert extract_variables_from_messages(messages) == ["x", "y"]

    def test_image_messages_contribute_nothing(self):
        messages = [
            _image("user", "{{not_a_variable}}"),
            _text("user", "Describe {{subject}}"),
        ]
        assert extract_variables_from_messages(messages) == ["subject"]

    def test_empty_list(self):
        assert extract_variables_from_messages([]) == []


class TestSubstitute:
    """Tests for substitute."""

    def test_replaces_every_occurrence(self):
        assert substitute("{{a}}-{{a}}-{{b}}", {"a": "1", "b": "2"}) == "1-1-2"

    def test_missing_value_leaves_placeholder(self):
        assert substitute("Hello {{name}}, {{other}}", {"name": "Ana"}) == "Hello Ana, {{other}}"

    def test_lookup_uses_trimmed_name(self):
        assert substitute("Hello {{ name }}!", {"name": "Ana"}) == "Hello Ana!"

    def test_lookup_falls_back_to_raw_name(self):
        assert substitute("Hello {{ name }}!", {" name ": "Ana"}) == "Hello Ana!"

    def test_single_pass(self):
        """Placeholders introduced by a value are not expanded."""
        result = substitute("{{a}}", {"a": "{{b}}", "b": "nope"})
        assert result == "{{b}}"

    def test_non_string_values_are_stringified(self):
        assert substitute("n={{n}} ok={{ok}}", {"n": 3, "ok": True}) == "n=3 ok=True"

    def test_empty_string_value_is_substituted(self):
        assert substitute("[{{x}}]", {"x": ""}) == "[]"

    def test_complete_values_leave_no_delimiters(self):
        text = "{{greeting}}, {{name}}! Today is {{day}}."
        values = {name: "v" for name in extract_variables(text)}
        result = substitute(text, values)
        assert "{{" not in result
        assert "}}" not in result

    def test_partial_values_keep_unfilled_placeholders(self):
        text = "{{a}} {{b}} {{c}}"
        result = substitute(text, {"b": "x"})
        assert set(extract_variables(result)) <= set(extract_variables(text))
        assert extract_variables(result) == ["a", "c"]


class TestSubstituteMessages:
    """Tests for substitute_messages."""

    def test_substitutes_text_and_copies_images(self):
        messages = [_text("user", "Hi {{x}}"), _image("assistant", "data:image/png;base64,AAA")]
        applied = substitute_messages(messages, {"x": "there"})

        assert applied[0].content.text == "Hi there"
        assert applied[1].content.image == "data:image/png;base64,AAA"
        assert applied[1].role == "assistant"

    def test_does_not_mutate_input(self):
        messages = [_text("user", "Hi {{x}}")]
        substitute_messages(messages, {"x": "there"})
        assert messages[0].content.text == "Hi {{x}}"


class TestValidateMessages:
    """Tests for message shape validation."""

    def test_valid_text_and_image(self):
        assert validate_messages(
            [
                {"role": "user", "content": {"type": "text", "text": "hi"}},
                {"role": "assistant", "content": {"type": "image", "image": "abc"}},
            ]
        )

    def test_empty_list_is_invalid(self):
        assert not validate_messages([])

    def test_not_a_list_is_invalid(self):
        assert not validate_messages({"role": "user"})
        assert not validate_messages(None)

    @pytest.mark.parametrize(
        "message",
        [
            {"role": "system", "content": {"type": "text", "text": "hi"}},
            {"role": "user", "content": {"type": "text"}},
            {"role": "user", "content": {"type": "image", "text": "not an image"}},
            {"role": "user", "content": {"type": "audio", "text": "hi"}},
            {"role": "user", "content": "hi"},
            {"role": "user"},
            "hi",
        ],
    )
    def test_invalid_messages(self, message):
        assert not validate_messages([message])

    def test_empty_text_passes_shape_check(self):
        assert validate_messages([{"role": "user", "content": {"type": "text", "text": ""}}])


class TestIsValidPromptStructure:
    """Tests for stored record validation."""

    def test_single_content_record(self):
        assert is_valid_prompt_structure(
            {
                "id": "prompt-0000abcd",
                "name": "Greeting",
                "content": "Hello {{name}}",
                "description": "",
                "variables": ["name"],
                "createdAt": "2024-01-01T00:00:00+00:00",
            }
        )

    def test_multi_message_record(self):
        assert is_valid_prompt_structure(
            {
                "id": "prompt-0000abcd",
                "name": "Chat",
                "description": "",
                "variables": [],
                "createdAt": "2024-01-01T00:00:00+00:00",
                "version": "2.0",
                "messages": [{"role": "user", "content": {"type": "text", "text": "hi"}}],
            }
        )

    def test_discriminator_decides_variant(self):
        """A record with messages but no version is judged as single content."""
        assert not is_valid_prompt_structure(
            {
                "id": "prompt-0000abcd",
                "name": "Chat",
                "description": "",
                "variables": [],
                "createdAt": "2024-01-01T00:00:00+00:00",
                "messages": [{"role": "user", "content": {"type": "text", "text": "hi"}}],
            }
        )

    def test_missing_common_fields(self):
        assert not is_valid_prompt_structure({"id": "x", "content": "y"})
        assert not is_valid_prompt_structure(["not", "a", "dict"])
