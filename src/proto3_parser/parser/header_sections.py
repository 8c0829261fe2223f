"""Processors for the single-statement sections: syntax, package, import, option."""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from proto3_parser.errors import ErrorKind, ParseError

_LOGGER = logging.getLogger(__name__)

SUPPORTED_SYNTAX = "proto3"

# Keywords start a statement: text start, whitespace or `;` before them.
_IMPORT_KEYWORD = re.compile(r"(?<![^\s;])import\b")
_OPTION_KEYWORD = re.compile(r"(?<![^\s;])option\b")


def _strip_quotes(text: str) -> str:
    return text.replace('"', "").replace("'", "")


def _check_quotes(statement: str, section: str) -> None:
    """Quotes must be present, paired, and close the statement."""
    double_count = statement.count('"')
    single_count = statement.count("'")

    if double_count == 0 and single_count == 0:
        raise ParseError(
            f"Missing quote in {section} statement", ErrorKind.QUOTE_VIOLATION, statement
        )
    if double_count % 2 == 1 or single_count % 2 == 1:
        raise ParseError(
            f"Mismatched quotes in {section} statement", ErrorKind.QUOTE_VIOLATION, statement
        )
    if double_count > 0 and statement.rfind('"') != len(statement) - 1:
        raise ParseError(
            f"Invalid {section} statement (double quote)", ErrorKind.QUOTE_VIOLATION, statement
        )
    if single_count > 0 and statement.rfind("'") != len(statement) - 1:
        raise ParseError(
            f"Invalid {section} statement (single quote)", ErrorKind.QUOTE_VIOLATION, statement
        )


def _check_statement_count(keyword_count: int, semicolon_count: int, section: str, text: str) -> None:
    if keyword_count > semicolon_count:
        raise ParseError(
            f"Missing semicolon in {section} statements", ErrorKind.PUNCTUATION_MISSING, text
        )
    if keyword_count < semicolon_count:
        raise ParseError(
            f"Dummy semicolon in {section} statements", ErrorKind.PUNCTUATION_EXTRANEOUS, text
        )


def process_syntax_lines(lines: List[str]) -> str:
    """Validate the syntax declaration and return its value."""
    if not lines:
        raise ParseError("Missing syntax declaration", ErrorKind.STRUCTURAL_COUNT)
    if len(lines) > 1:
        raise ParseError("Multiple syntax lines", ErrorKind.STRUCTURAL_COUNT, " ".join(lines))

    line = lines[0]
    parts = line.split("=")
    if len(parts) < 2:
        raise ParseError(
            "Syntax line does not have an equal sign", ErrorKind.PUNCTUATION_MISSING, line
        )
    if ";" not in parts[1]:
        raise ParseError(
            "Syntax line is not ending with semicolon", ErrorKind.PUNCTUATION_MISSING, line
        )

    value = _strip_quotes(parts[1].split(";")[0]).strip()
    if value != SUPPORTED_SYNTAX:
        raise ParseError(
            f'Syntax is not "{SUPPORTED_SYNTAX}"', ErrorKind.STRUCTURAL_COUNT, line
        )
    return value


def process_package_lines(lines: List[str]) -> str:
    """Validate the package declaration and return the package name."""
    if not lines:
        raise ParseError("Missing package declaration", ErrorKind.STRUCTURAL_COUNT)
    if len(lines) > 1:
        raise ParseError("Multiple package lines", ErrorKind.STRUCTURAL_COUNT, " ".join(lines))

    line = " ".join(lines)
    if ";" not in line:
        raise ParseError(
            "Package line is not ending with semicolon", ErrorKind.PUNCTUATION_MISSING, line
        )
    if '"' in line:
        raise ParseError(
            "Package line should not have double quote", ErrorKind.QUOTE_VIOLATION, line
        )
    if "'" in line:
        raise ParseError(
            "Package line should not have single quote", ErrorKind.QUOTE_VIOLATION, line
        )

    name = line.strip()
    if name.startswith("package"):
        name = name[len("package"):]
    name = name.replace(";", "").strip()
    if not name:
        raise ParseError("Missing package name", ErrorKind.IDENTIFIER_INVALID, line)
    if len(name.split()) != 1:
        raise ParseError("Invalid package name", ErrorKind.IDENTIFIER_INVALID, line)
    return name


def process_import_lines(lines: List[str]) -> List[str]:
    """Return imported paths in declaration order (duplicates kept)."""
    imports: List[str] = []
    if not lines:
        return imports

    text = " ".join(lines)
    _check_statement_count(len(_IMPORT_KEYWORD.findall(text)), text.count(";"), "import", text)

    for statement in text.split(";"):
        statement = statement.strip()
        if not statement:
            continue

        _check_quotes(statement, "import")

        tokens = statement.split()
        path = _strip_quotes(tokens[1]) if len(tokens) > 1 else ""
        if not path:
            raise ParseError("Invalid import statement", ErrorKind.IDENTIFIER_INVALID, statement)
        imports.append(path)

    _LOGGER.debug("imports: %s", imports)
    return imports


def process_option_lines(lines: List[str]) -> Dict[str, str]:
    """Return file-level options; a repeated key keeps its last value."""
    options: Dict[str, str] = {}
    if not lines:
        return options

    text = "\n".join(lines) + "\n"
    _check_statement_count(len(_OPTION_KEYWORD.findall(text)), text.count(";\n"), "option", text.strip())

    for statement in text.split(";\n"):
        statement = statement.strip()
        if not statement:
            continue

        _check_quotes(statement, "option")

        tokens = statement.split()
        if len(tokens) != 4:
            raise ParseError(
                "Invalid option statement (number of tokens)",
                ErrorKind.TOKEN_COUNT_MISMATCH,
                statement,
            )
        if tokens[2] != "=":
            raise ParseError(
                "Option statement does not have an equal sign",
                ErrorKind.PUNCTUATION_MISSING,
                statement,
            )

        key = tokens[1]
        if '"' in key or "'" in key:
            raise ParseError("Invalid option key", ErrorKind.IDENTIFIER_INVALID, statement)

        value = _strip_quotes(tokens[3])
        if not value:
            raise ParseError("Invalid option value", ErrorKind.IDENTIFIER_INVALID, statement)

        options[key] = value

    _LOGGER.debug("options: %s", options)
    return options
