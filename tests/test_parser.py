"""Test structured-output parsing of model replies."""

import pytest

from tell.core.parser import extract_json_span, parse_command_response
from tell.exceptions import ErrorKind, ParseError
from tell.providers.base import CommandResponse


def test_parse_plain_object():
    """Test parsing a bare JSON object."""
    response = parse_command_response(
        '{"command": "du -h | sort -hr", "details": "sorts by size", "show_details": true}'
    )

    assert isinstance(response, CommandResponse)
    assert response.command == "du -h | sort -hr"
    assert response.details == "sorts by size"
    assert response.show_details is True


def test_parse_object_embedded_in_prose():
    """Test that surrounding text and fences are ignored."""
    text = (
        "Sure! Here is the command:\n"
        "```json\n"
        '{"command": "fd -e pdf", "details": "finds pdfs", "show_details": false}\n'
        "```\n"
        "Let me know if you need anything else."
    )

    response = parse_command_response(text)
    assert response.command == "fd -e pdf"
    assert response.show_details is False


def test_parse_defaults_for_missing_optional_keys():
    """Test defaults when details and show_details are absent."""
    response = parse_command_response('{"command": "ls -la"}')

    assert response.command == "ls -la"
    assert response.details == ""
    assert response.show_details is False


def test_parse_null_details():
    """Test that null details are treated as empty."""
    response = parse_command_response('{"command": "ls", "details": null}')
    assert response.details == ""


def test_parse_returns_command_unmodified():
    """Test that the command is returned exactly as decoded."""
    response = parse_command_response('{"command": "find . -name \\"*.log\\"\\n"}')
    assert response.command == 'find . -name "*.log"\n'


def test_parse_multiline_command():
    """Test a command broken over lines with backslashes."""
    response = parse_command_response(
        '{"command": "find . -type f \\\\\\n  -name \\"*.py\\"", "show_details": false}'
    )
    assert response.command == 'find . -type f \\\n  -name "*.py"'


def test_parse_nested_braces_in_command():
    """Test that braces inside strings do not confuse the span."""
    response = parse_command_response(
        'Answer: {"command": "awk \'{print $1}\' access.log", "details": "first column"}'
    )
    assert response.command == "awk '{print $1}' access.log"


def test_parse_empty_text():
    """Test that an empty reply is rejected."""
    with pytest.raises(ParseError):
        parse_command_response("")


def test_parse_no_braces():
    """Test that a reply without an object is rejected."""
    with pytest.raises(ParseError, match="No JSON object"):
        parse_command_response("You can use ls -la to list files.")


def test_parse_reversed_braces():
    """Test that a closing brace before the opening one is rejected."""
    with pytest.raises(ParseError):
        parse_command_response("} nothing here {")


def test_parse_invalid_json():
    """Test that an unparseable span is rejected with its cause."""
    with pytest.raises(ParseError) as exc_info:
        parse_command_response('{"command": "ls", }')

    assert exc_info.value.kind == ErrorKind.PARSE
    assert exc_info.value.cause is not None


def test_parse_deeply_nested_json():
    """Test that nesting too deep to decode is a parse failure."""
    text = '{"command": "ls", "x": ' + "[" * 100000 + "]" * 100000 + "}"

    with pytest.raises(ParseError) as exc_info:
        parse_command_response(text)

    assert isinstance(exc_info.value.cause, RecursionError)


def test_parse_missing_command():
    """Test that an object without a command is rejected."""
    with pytest.raises(ParseError, match="missing a command"):
        parse_command_response('{"details": "no command here", "show_details": true}')


def test_parse_empty_command():
    """Test that an empty command is rejected."""
    with pytest.raises(ParseError):
        parse_command_response('{"command": ""}')


def test_parse_blank_command():
    """Test that a whitespace-only command is rejected."""
    with pytest.raises(ParseError):
        parse_command_response('{"command": "   "}')


def test_parse_non_string_command():
    """Test that a non-string command is rejected."""
    with pytest.raises(ParseError):
        parse_command_response('{"command": ["ls", "-la"]}')


def test_parse_non_boolean_show_details():
    """Test that show_details must be a real boolean."""
    with pytest.raises(ParseError, match="show_details"):
        parse_command_response('{"command": "ls", "show_details": "yes"}')


def test_parse_non_string_details():
    """Test that details must be a string."""
    with pytest.raises(ParseError, match="details"):
        parse_command_response('{"command": "ls", "details": 42}')


def test_extract_json_span():
    """Test the first-brace to last-brace span."""
    assert extract_json_span('abc {"a": {"b": 1}} xyz') == '{"a": {"b": 1}}'


def test_extract_json_span_missing():
    """Test that text without braces has no span."""
    with pytest.raises(ParseError):
        extract_json_span("plain text")
