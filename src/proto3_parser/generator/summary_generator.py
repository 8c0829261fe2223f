from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from proto3_parser.models import FieldDescriptor, Message, ProtoFile

INDENT = "  "


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _message_rows(message: Message, depth: int = 0) -> List[str]:
    """Flatten a message into indented lines, nested messages recursed in place."""
    rows = [f"{INDENT * depth}message {message.name}"]
    for name, value in message.fields.items():
        if isinstance(value, Message):
            rows.extend(_message_rows(value, depth + 1))
        else:
            rows.append(f"{INDENT * (depth + 1)}{_describe_field(name, value)}")
    return rows


def _describe_field(name: str, descriptor: FieldDescriptor) -> str:
    if descriptor.qualifier is not None:
        return f"{descriptor.qualifier.value} {descriptor.type_name} {name}"
    return f"{descriptor.type_name} {name}"


def generate_summary(proto: ProtoFile) -> str:
    """Render a human-readable summary of a parsed proto file."""
    env = _get_template_env()
    template = env.get_template("summary.txt.j2")

    message_rows: List[str] = []
    for message in proto.messages:
        message_rows.extend(_message_rows(message))

    return template.render(
        syntax=proto.syntax,
        package=proto.package,
        imports=proto.imports,
        options=proto.options,
        services=proto.services,
        message_rows=message_rows,
    )


def summary_dict(proto: ProtoFile) -> Dict[str, object]:
    """JSON-ready mapping of a parsed proto file."""
    return {
        "syntax": proto.syntax,
        "package": proto.package,
        "imports": list(proto.imports),
        "options": dict(proto.options),
        "services": [
            {
                "name": service.name,
                "rpcs": [
                    {"name": rpc.name, "request": rpc.request, "response": rpc.response}
                    for rpc in service.rpcs
                ],
            }
            for service in proto.services
        ],
        "messages": [message.to_dict() for message in proto.messages],
    }
