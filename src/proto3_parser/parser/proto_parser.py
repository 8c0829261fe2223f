from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from proto3_parser.models import Message, ProtoFile, Service

from .header_sections import (
    process_import_lines,
    process_option_lines,
    process_package_lines,
    process_syntax_lines,
)
from .line_classifier import classify_lines
from .message_section import process_message_lines
from .service_section import process_service_lines

_LOGGER = logging.getLogger(__name__)


def parse_proto_file(file_path: str) -> ProtoFile:
    """Parse a .proto file and return its model."""
    parser = Parser()
    parser.read_file(file_path)
    return parser.proto_file


class Parser:
    """Parser for proto3 files: syntax, package, imports, options, services, messages.

    Raises ParseError on the first malformed section. Sections are processed
    in the order syntax, package, import, option, service, message.
    """

    def __init__(self):
        self._proto = ProtoFile()

    # -- public API --

    def parse(self, content: str) -> None:
        """Parse proto text, replacing any previously parsed model."""
        self._proto = ProtoFile()
        buckets = classify_lines(content)

        self._proto.syntax = process_syntax_lines(buckets.syntax)
        self._proto.package = process_package_lines(buckets.package)
        self._proto.imports = process_import_lines(buckets.import_)
        self._proto.options = process_option_lines(buckets.option)
        self._proto.services = process_service_lines(buckets.service)
        self._proto.messages = process_message_lines(buckets.message)

        _LOGGER.debug(
            "parsed package %s: %d service(s), %d message(s)",
            self._proto.package,
            len(self._proto.services),
            len(self._proto.messages),
        )

    def read_file(self, file_path: str) -> None:
        """Read a whole file and parse it. OSError from reading propagates."""
        content = Path(file_path).read_text(encoding="utf-8")
        self.parse(content)

    # -- accessors --

    @property
    def proto_file(self) -> ProtoFile:
        return self._proto

    def get_syntax(self) -> str:
        return self._proto.syntax

    def get_package_name(self) -> str:
        return self._proto.package

    def get_options(self) -> Dict[str, str]:
        return self._proto.options

    def get_imports(self) -> List[str]:
        return self._proto.imports

    def get_services(self) -> List[Service]:
        return self._proto.services

    def get_messages(self) -> List[Message]:
        return self._proto.messages
