import os
import tempfile

import pytest

from proto3_parser.errors import ErrorKind, ParseError
from proto3_parser.models import FieldDescriptor, Message, Qualifier
from proto3_parser.parser.proto_parser import Parser, parse_proto_file


def _write_temp_proto(content: str) -> str:
    fd, path = tempfile.mkstemp(suffix=".proto")
    os.write(fd, content.encode("utf-8"))
    os.close(fd)
    return path


SELF_REGISTRATION_PROTO = """\
    syntax = "proto3";
    package selfregistration_process;

    import "google/api/annotations.proto";
    import "google/protobuf/struct.proto";

    option go_package = ".;main";

    service SelfRegistrationProcessService {
        rpc CreateUserAccount(CreateUserAccountRequest) returns (CreateUserAccountResponse);
        rpc GenerateActivationKey(GenerateActivationKeyRequest) returns (GenerateActivationKeyResponse);
        rpc SendActivationEmail(SendActivationEmailRequest) returns (SendActivationEmailResponse);
        rpc ActivateUserAccount(ActivateUserAccountRequest) returns (ActivateUserAccountResponse) {
            option (google.api.http) = {
                post: "/v1/EchoProcessService/Echo";
            };
        };
        rpc SendWelcomeEmail(SendActivationEmailRequest) returns (SendWelcomeEmailResponse);
    }

    message CreateUserAccountRequest {
        string emailAddress = 1;
        string firstName = 2;
        string lastName = 3;
        string password = 4;
    }

    message CreateUserAccountResponse {
        ResponseInfo responseInfo = 1;
        repeated UserAccountInfo results = 2;
    }

    message ReceiveUserAccountActivationMessageRequest {
        map<string, google.protobuf.Struct> inputData = 1;
    }

    message ResponseInfo {
        string responseType = 1;
        int32 httpStatusCode = 2;
        string httpStatusText = 3;
    }
"""


class TestFullDocument:
    def setup_method(self):
        self.parser = Parser()
        self.parser.parse(SELF_REGISTRATION_PROTO)

    def test_header_sections(self):
        assert self.parser.get_syntax() == "proto3"
        assert self.parser.get_package_name() == "selfregistration_process"
        assert self.parser.get_imports() == [
            "google/api/annotations.proto",
            "google/protobuf/struct.proto",
        ]
        assert self.parser.get_options() == {"go_package": ".;main"}

    def test_services(self):
        services = self.parser.get_services()
        assert len(services) == 1
        assert services[0].get_service_name() == "SelfRegistrationProcessService"
        assert [r.get_rpc_name() for r in services[0].get_rpcs()] == [
            "CreateUserAccount",
            "GenerateActivationKey",
            "SendActivationEmail",
            "ActivateUserAccount",
            "SendWelcomeEmail",
        ]
        activate = services[0].rpcs[3]
        assert activate.get_rpc_request_name() == "ActivateUserAccountRequest"
        assert activate.get_rpc_response_name() == "ActivateUserAccountResponse"

    def test_messages(self):
        messages = self.parser.get_messages()
        assert [m.get_message_name() for m in messages] == [
            "CreateUserAccountRequest",
            "CreateUserAccountResponse",
            "ReceiveUserAccountActivationMessageRequest",
            "ResponseInfo",
        ]
        assert list(messages[0].get_fields()) == ["emailAddress", "firstName", "lastName", "password"]
        assert messages[1].fields["results"] == FieldDescriptor(
            type_name="UserAccountInfo", qualifier=Qualifier.REPEATED
        )
        assert messages[3].fields["httpStatusCode"] == FieldDescriptor(type_name="int32")

    def test_proto_file_model(self):
        proto = self.parser.proto_file
        assert proto.package == "selfregistration_process"
        assert len(proto.messages) == 4


class TestScenarios:
    def test_syntax_alone_fails_at_package(self):
        parser = Parser()
        with pytest.raises(ParseError, match="Missing package declaration") as exc:
            parser.parse('syntax = "proto3";')
        assert exc.value.kind == ErrorKind.STRUCTURAL_COUNT
        assert parser.get_syntax() == "proto3"

    def test_minimal_document(self):
        proto = """\
syntax = "proto3";
package sample;
import "a/b.proto";
option go_package = ".;main";

service Echo {
    rpc Say(SayRequest) returns (SayResponse);
}

message SayRequest {
    string text = 1;
    string lang = 2;
}
"""
        parser = Parser()
        parser.parse(proto)
        assert parser.get_syntax() == "proto3"
        assert parser.get_package_name() == "sample"
        assert parser.get_imports() == ["a/b.proto"]
        assert parser.get_options() == {"go_package": ".;main"}
        rpc = parser.get_services()[0].get_rpcs()[0]
        assert (rpc.name, rpc.request, rpc.response) == ("Say", "SayRequest", "SayResponse")
        assert parser.get_messages()[0].fields == {
            "text": FieldDescriptor(type_name="string"),
            "lang": FieldDescriptor(type_name="string"),
        }

    def test_rpc_with_option_body(self):
        proto = """\
syntax = "proto3";
package sample;
service Echo {
    rpc First(A) returns (B);
    rpc Second(C) returns (R) {
        option (x) = {
            k: "v";
        };
    };
}
"""
        parser = Parser()
        parser.parse(proto)
        rpcs = parser.get_services()[0].get_rpcs()
        assert [r.name for r in rpcs] == ["First", "Second"]
        assert rpcs[1].response == "R"

    def test_two_services(self):
        proto = """\
syntax = "proto3";
package sample;
service Alpha {
    rpc A(Req) returns (Res);
}
service Beta {
    rpc B(Req) returns Res;
}
"""
        parser = Parser()
        parser.parse(proto)
        assert [s.name for s in parser.get_services()] == ["Alpha", "Beta"]

    def test_nested_response_info(self):
        proto = """\
syntax = "proto3";
package sample;
message Reply {
    message ResponseInfo {
        string responseType = 1;
    }
    ResponseInfo responseInfo = 1;
}
"""
        parser = Parser()
        parser.parse(proto)
        fields = parser.get_messages()[0].get_fields()
        nested = fields["ResponseInfo"]
        assert isinstance(nested, Message)
        assert nested.get_fields() == {"responseType": FieldDescriptor(type_name="string")}
        assert fields["responseInfo"] == FieldDescriptor(type_name="ResponseInfo")

    def test_unquoted_import(self):
        proto = """\
syntax = "proto3";
package sample;
import google/api/annotations.proto;
"""
        with pytest.raises(ParseError) as exc:
            Parser().parse(proto)
        assert exc.value.kind == ErrorKind.QUOTE_VIOLATION


class TestErrorOrdering:
    def test_proto2_rejected(self):
        with pytest.raises(ParseError, match="proto3"):
            Parser().parse('syntax = "proto2";\npackage sample;')

    def test_missing_syntax(self):
        with pytest.raises(ParseError, match="Missing syntax declaration"):
            Parser().parse("package sample;")

    def test_multiple_packages(self):
        with pytest.raises(ParseError, match="Multiple package lines"):
            Parser().parse('syntax = "proto3";\npackage a;\npackage b;')

    def test_first_error_stops_later_sections(self):
        proto = """\
syntax = "proto3";
package sample;
option broken = "x;
service Echo {
    rpc Say(A) returns (B);
}
message A {
    string x = 1;
}
"""
        parser = Parser()
        with pytest.raises(ParseError):
            parser.parse(proto)
        assert parser.get_package_name() == "sample"
        assert parser.get_services() == []
        assert parser.get_messages() == []

    def test_parse_replaces_previous_model(self):
        parser = Parser()
        parser.parse('syntax = "proto3";\npackage first;\nimport "a.proto";')
        parser.parse('syntax = "proto3";\npackage second;')
        assert parser.get_package_name() == "second"
        assert parser.get_imports() == []

    def test_accessors_before_parse(self):
        parser = Parser()
        assert parser.get_options() == {}
        assert parser.get_imports() == []
        assert parser.get_services() == []
        assert parser.get_messages() == []


class TestReadFile:
    def test_read_file(self):
        path = _write_temp_proto(SELF_REGISTRATION_PROTO)
        try:
            parser = Parser()
            parser.read_file(path)
            assert parser.get_package_name() == "selfregistration_process"
            assert len(parser.get_messages()) == 4
        finally:
            os.unlink(path)

    def test_parse_proto_file(self):
        path = _write_temp_proto('syntax = "proto3";\npackage sample;\n')
        try:
            proto = parse_proto_file(path)
            assert proto.syntax == "proto3"
            assert proto.package == "sample"
            assert proto.services == []
        finally:
            os.unlink(path)

    def test_read_file_utf8_content(self):
        path = _write_temp_proto(
            'syntax = "proto3";\npackage sample;\noption title = "caf\u00e9_\u00fcber";\n'
        )
        try:
            parser = Parser()
            parser.read_file(path)
            assert parser.get_options() == {"title": "caf\u00e9_\u00fcber"}
        finally:
            os.unlink(path)

    def test_missing_file_raises_os_error(self):
        with pytest.raises(OSError):
            Parser().read_file("/nonexistent/path/to/file.proto")
