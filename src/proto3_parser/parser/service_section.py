"""Service processor: `service Name { rpc M(Req) returns (Res) [{ ... }]; ... }`."""

from __future__ import annotations

import logging
import re
from typing import List

from proto3_parser.errors import ErrorKind, ParseError
from proto3_parser.models import Rpc, Service

_LOGGER = logging.getLogger(__name__)

# Keywords start a statement: text start, whitespace, `;`, `{` or `}` before them.
_SERVICE_SPLIT = re.compile(r"(?<![^\s;{}])(?=service\b)")
_RPC_SPLIT = re.compile(r"(?<![^\s;{}])rpc\b")


def split_service_blocks(text: str) -> List[str]:
    """Cut joined service lines into one string per `service` keyword."""
    return [block.strip() for block in _SERVICE_SPLIT.split(text) if block.strip()]


def process_service_lines(lines: List[str]) -> List[Service]:
    """Parse every service block, in source order."""
    services: List[Service] = []
    if not lines:
        return services

    for block in split_service_blocks(" ".join(lines)):
        services.append(process_service_block(block))

    _LOGGER.debug("services: %s", [s.name for s in services])
    return services


def process_service_block(block: str) -> Service:
    if block == ";":
        raise ParseError("Invalid service declaration", ErrorKind.PUNCTUATION_EXTRANEOUS, block)
    if block.endswith(";"):
        raise ParseError(
            "Dummy semicolon at the end of service", ErrorKind.PUNCTUATION_EXTRANEOUS, block
        )

    if block.count("{") != block.count("}"):
        raise ParseError("Curly brackets do not match", ErrorKind.BRACE_MISMATCH, block)

    begin = block.find("{")
    end = block.rfind("}")
    if begin == -1 or end == -1:
        raise ParseError("Cannot find service block", ErrorKind.BRACE_MISMATCH, block)

    name = block[:begin].strip()
    if name.startswith("service"):
        name = name[len("service"):].strip()
    if not name or len(name.split()) != 1:
        raise ParseError("Invalid service name", ErrorKind.IDENTIFIER_INVALID, block)

    body = block[begin + 1:end].strip()
    if not body:
        raise ParseError("No rpc has been found", ErrorKind.EMPTY_BODY, block)
    body = body.replace("\n", " ")

    service = Service(name=name)
    for fragment in _RPC_SPLIT.split(body):
        fragment = fragment.strip()
        if not fragment:
            continue
        service.rpcs.append(process_rpc_fragment(fragment))

    if not service.rpcs:
        raise ParseError("No rpc has been found", ErrorKind.EMPTY_BODY, block)
    return service


def process_rpc_fragment(fragment: str) -> Rpc:
    """Parse the text following an `rpc` keyword, up to and including its `;`."""
    if not fragment.endswith(";"):
        raise ParseError(
            "Missing semicolon at the end of rpc", ErrorKind.PUNCTUATION_MISSING, fragment
        )

    # The option block, if any, is only checked for a closing bracket.
    option_begin = fragment.find("{")
    if option_begin > -1:
        if "}" not in fragment:
            raise ParseError("Curly brackets do not match", ErrorKind.BRACE_MISMATCH, fragment)
        fragment = fragment[:option_begin] + ";"

    declaration = fragment.replace(";", "").strip()
    if not declaration:
        raise ParseError("Invalid rpc block", ErrorKind.IDENTIFIER_INVALID, fragment)

    left = declaration.find("(")
    right = declaration.find(")")
    if left == -1 or right == -1:
        raise ParseError("Missing parenthesis", ErrorKind.PUNCTUATION_MISSING, declaration)

    name = declaration[:left].strip()
    if not name:
        raise ParseError("Cannot obtain rpc name", ErrorKind.IDENTIFIER_INVALID, declaration)

    request = declaration[left + 1:right].strip()
    if not request:
        raise ParseError("Cannot find rpc request", ErrorKind.IDENTIFIER_INVALID, declaration)

    returns_pos = declaration.find("returns")
    if returns_pos == -1:
        raise ParseError("Missing returns", ErrorKind.PUNCTUATION_MISSING, declaration)

    returns_part = declaration[returns_pos:]
    if "(" in returns_part:
        response_left = returns_part.find("(")
        response_right = returns_part.find(")", response_left)
        if response_right == -1:
            raise ParseError(
                "Missing parenthesis", ErrorKind.PUNCTUATION_MISSING, declaration
            )
        response = returns_part[response_left + 1:response_right].strip()
    else:
        tokens = returns_part.split()
        response = tokens[1] if len(tokens) > 1 else ""

    if not response:
        raise ParseError("Cannot find rpc response", ErrorKind.IDENTIFIER_INVALID, declaration)

    for part, label in ((name, "name"), (request, "request"), (response, "response")):
        if len(part.split()) != 1:
            raise ParseError(f"Invalid rpc {label}", ErrorKind.IDENTIFIER_INVALID, declaration)

    return Rpc(name=name, request=request, response=response)
