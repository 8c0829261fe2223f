from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class Qualifier(Enum):
    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


QUALIFIERS = {q.value: q for q in Qualifier}


@dataclass
class FieldDescriptor:
    """A non-nested field: its type and optional qualifier."""

    type_name: str
    qualifier: Optional[Qualifier] = None

    def to_dict(self) -> Dict[str, str]:
        result = {"type": self.type_name}
        if self.qualifier is not None:
            result["qualifier"] = self.qualifier.value
        return result


@dataclass
class Message:
    name: str
    fields: Dict[str, FieldValue] = field(default_factory=dict)

    def get_message_name(self) -> str:
        return self.name

    def get_fields(self) -> Dict[str, FieldValue]:
        return self.fields

    def nested_messages(self) -> List[Message]:
        return [v for v in self.fields.values() if isinstance(v, Message)]

    def to_dict(self) -> Dict[str, object]:
        """Mapping form: descriptors become dicts, nested messages recurse."""
        return {
            "name": self.name,
            "fields": {k: v.to_dict() for k, v in self.fields.items()},
        }


FieldValue = Union[FieldDescriptor, Message]


@dataclass
class Rpc:
    name: str
    request: str
    response: str

    def get_rpc_name(self) -> str:
        return self.name

    def get_rpc_request_name(self) -> str:
        return self.request

    def get_rpc_response_name(self) -> str:
        return self.response


@dataclass
class Service:
    name: str
    rpcs: List[Rpc] = field(default_factory=list)

    def get_service_name(self) -> str:
        return self.name

    def get_rpcs(self) -> List[Rpc]:
        return self.rpcs


@dataclass
class ProtoFile:
    """Top-level parsed representation of a .proto file."""

    syntax: str = ""
    package: str = ""
    options: Dict[str, str] = field(default_factory=dict)
    imports: List[str] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
