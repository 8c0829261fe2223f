"""Message processor, including nested messages.

Message lines are joined into one whitespace-normalised string, cut into
top-level `message Name { ... }` strings, and each string is parsed by
splitting its body on `;`. A nested `message` swallows statements until its
braces close, then is parsed recursively and stored in the parent's fields
under its own name.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from proto3_parser.errors import ErrorKind, ParseError
from proto3_parser.models import QUALIFIERS, FieldDescriptor, FieldValue, Message

_LOGGER = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_MESSAGE_KEYWORD = re.compile(r"\bmessage\b")
# A nested message header always sits inside one `;`-separated statement.
_NESTED_MESSAGE = re.compile(r"\bmessage\s+\S+?\s*\{")


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _is_closed(text: str) -> bool:
    return text.count("{") > 0 and text.count("{") == text.count("}")


def _matching_brace(text: str, start: int) -> int:
    """Index of the `}` closing the first `{` at or after start, or -1."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_message_strings(text: str) -> List[str]:
    """Cut normalised message text into one string per top-level message."""
    segments: List[str] = []
    buffer: List[str] = []
    for token in text.split(" "):
        if token == "message" and buffer:
            segments.append(" ".join(buffer))
            buffer = []
        buffer.append(token)
    if buffer:
        segments.append(" ".join(buffer))

    # Nested messages cut their parent apart above; stitch the pieces back.
    messages: List[str] = []
    pending = ""
    for segment in segments:
        pending = f"{pending} {segment}" if pending else segment
        if pending.endswith("}") and _is_closed(pending):
            messages.append(pending)
            pending = ""
    if pending:
        messages.append(pending)
    return messages


def process_message_lines(lines: List[str]) -> List[Message]:
    """Parse every top-level message, in source order."""
    messages: List[Message] = []
    if not lines:
        return messages

    text = _collapse_whitespace(" ".join(lines))
    for content in split_message_strings(text):
        messages.append(process_message_line(content))

    _LOGGER.debug("messages: %s", [m.name for m in messages])
    return messages


def process_message_line(content: str) -> Message:
    """Parse a single `message Name { ... }` string."""
    begin = content.find("{")
    end = content.rfind("}")
    if begin == -1 or end == -1:
        raise ParseError("Curly brackets do not match", ErrorKind.BRACE_MISMATCH, content)
    if content.count("{") != content.count("}"):
        raise ParseError("Curly brackets do not match", ErrorKind.BRACE_MISMATCH, content)

    if content.endswith(";"):
        raise ParseError("Message ended with semicolon", ErrorKind.PUNCTUATION_EXTRANEOUS, content)

    if not _MESSAGE_KEYWORD.sub("", content).strip():
        raise ParseError("Empty message", ErrorKind.EMPTY_BODY, content)

    header = content[:begin].split()
    if len(header) != 2:
        raise ParseError("Cannot find message name", ErrorKind.TOKEN_COUNT_MISMATCH, content)

    message = Message(name=header[1])

    body = content[begin + 1:end]
    if not body.strip():
        raise ParseError("Empty message body", ErrorKind.EMPTY_BODY, content)

    # field_line only carries over while a nested message is still open; the
    # `;` separators split inside it are put back.
    field_line = ""
    for statement in body.split(";"):
        statement = statement.strip()
        if not statement:
            continue
        field_line = f"{field_line};{statement}" if field_line else statement
        field_line = _consume_field_line(message, field_line)

    if field_line:
        raise ParseError("Unterminated nested message", ErrorKind.BRACE_MISMATCH, field_line)

    return message


def _consume_field_line(message: Message, field_line: str) -> str:
    """Move closed nested messages and plain fields into message.

    Returns the part of field_line that opens a nested message not yet closed.
    """
    while field_line:
        match = _NESTED_MESSAGE.search(field_line)
        if match is None:
            message.fields.update(process_field_lines(field_line))
            return ""

        nested_end = _matching_brace(field_line, match.start())
        if nested_end == -1:
            message.fields.update(process_field_lines(field_line[:match.start()]))
            return field_line[match.start():]

        message.fields.update(process_field_lines(field_line[:match.start()]))
        nested = process_message_line(field_line[match.start():nested_end + 1])
        message.fields[nested.name] = nested
        field_line = field_line[nested_end + 1:].strip()
    return ""


def process_field_lines(content: str) -> Dict[str, FieldValue]:
    """Parse `[qualifier] type name = number` statements separated by `;`."""
    fields: Dict[str, FieldValue] = {}
    for statement in content.split(";"):
        statement = statement.strip()
        if not statement:
            continue

        equal_pos = statement.find("=")
        if equal_pos == -1:
            raise ParseError("Cannot find equal sign", ErrorKind.PUNCTUATION_MISSING, statement)

        tokens = _collapse_whitespace(statement[:equal_pos]).split(" ")
        if len(tokens) < 2:
            raise ParseError("Field error", ErrorKind.TOKEN_COUNT_MISMATCH, statement)

        # map<K, V> spans several tokens before the name.
        qualifier = QUALIFIERS.get(tokens[0])
        if qualifier is not None:
            type_tokens = tokens[1:-1]
        else:
            type_tokens = tokens[:-1]
        if not type_tokens:
            raise ParseError("Field error", ErrorKind.TOKEN_COUNT_MISMATCH, statement)
        fields[tokens[-1]] = FieldDescriptor(type_name=" ".join(type_tokens), qualifier=qualifier)
    return fields
