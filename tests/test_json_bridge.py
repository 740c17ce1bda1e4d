"""Tests for the JSON bridge."""

import json
import sys

import pytest

from bencodex_bridge.json_bridge import JSONBridge, from_json, from_json_string, to_json
from bencodex_bridge.models import (
    BencodexBinary,
    BencodexBoolean,
    BencodexDictionary,
    BencodexList,
    BencodexNull,
    BencodexNumber,
    BencodexText,
    to_value,
)
from bencodex_bridge.types import BinaryEncoding, JsonDecodeError, JsonDecodeErrorReason, JsonEncodeOptions


class TestToJson:
    """Tests for rendering values as JSON."""

    def setup_method(self):
        """Set up test fixtures."""
        self.base64 = JSONBridge(JsonEncodeOptions(binary_encoding=BinaryEncoding.BASE64))
        self.hex = JSONBridge(JsonEncodeOptions(binary_encoding=BinaryEncoding.HEX))

    def test_text_key_with_base64_binary(self):
        """Test a text-keyed dictionary holding binary."""
        value = BencodexDictionary({BencodexText("foo"): BencodexBinary(b"bar")})

        assert json.loads(self.base64.to_json(value)) == {"\ufefffoo": "b64:YmFy"}

    def test_hex_binary(self):
        """Test hexadecimal binary spelling."""
        assert self.hex.to_json(BencodexBinary(b"bar")) == '"0x626172"'
        assert self.hex.to_json(BencodexBinary(b"")) == '"0x"'
        assert self.base64.to_json(BencodexBinary(b"")) == '"b64:"'

    def test_default_is_base64(self):
        """Test that base64 is the default binary encoding."""
        assert to_json(BencodexBinary(b"bar")) == '"b64:YmFy"'

    def test_scalars(self):
        """Test numbers, booleans and null."""
        assert self.hex.to_json(BencodexNumber(-123)) == '"-123"'
        assert self.hex.to_json(BencodexNumber(10 ** 40)) == '"1' + "0" * 40 + '"'
        assert self.hex.to_json(BencodexBoolean(True)) == "true"
        assert self.hex.to_json(BencodexNull()) == "null"

    def test_text_newline_escaped(self):
        """Test that newlines in text use JSON's escape."""
        assert self.hex.to_json(BencodexText("a\nb")) == '"\ufeffa\\nb"'

    def test_text_not_ascii_escaped(self):
        """Test that non-ASCII text is written as is by default."""
        assert self.hex.to_json(BencodexText("한글")) == '"\ufeff한글"'

    def test_ensure_ascii(self):
        """Test escaping non-ASCII output."""
        bridge = JSONBridge(JsonEncodeOptions(ensure_ascii=True))
        assert bridge.to_json(BencodexText("é")) == '"\\ufeff\\u00e9"'

    def test_containers(self):
        """Test lists and dictionaries with binary keys."""
        value = to_value([{b"\x00": "x"}, []])
        assert self.hex.to_json(value) == '[{"0x00":"\ufeffx"},[]]'

    def test_pretty(self):
        """Test indented output."""
        bridge = JSONBridge(JsonEncodeOptions(binary_encoding=BinaryEncoding.HEX, indent=2))
        text = bridge.to_json(to_value({"a": [None]}))

        assert text == '{\n  "\ufeffa": [\n    null\n  ]\n}'

    def test_number_with_thousands_of_digits(self):
        """Test numbers longer than the interpreter's int/str conversion limit."""
        assert self.hex.to_json(BencodexNumber(-(10 ** 5000))) == '"-1' + "0" * 5000 + '"'
        assert self.hex.to_json_object(BencodexNumber(10 ** 5000)) == "1" + "0" * 5000

    def test_matches_json_dumps(self):
        """Test that output is what json.dumps makes of the intermediate tree."""
        value = to_value({b"k": [1, {"a": [], "b": {}}, [None, True]], "t": "é"})
        for indent in (None, 0, 2, 4):
            bridge = JSONBridge(JsonEncodeOptions(binary_encoding=BinaryEncoding.HEX, indent=indent))
            separators = (",", ":") if indent is None else (",", ": ")
            expected = json.dumps(bridge.to_json_object(value), ensure_ascii=False,
                                  indent=indent, separators=separators)
            assert bridge.to_json(value) == expected

    def test_deep_nesting(self):
        """Test rendering lists nested beyond the recursion limit."""
        depth = sys.getrecursionlimit() * 5
        value = BencodexList()
        for _ in range(depth - 1):
            value = BencodexList((value,))

        assert self.hex.to_json(value) == "[" * depth + "]" * depth
        tree = self.hex.to_json_object(value)
        levels = 1
        while tree:
            tree = tree[0]
            levels += 1
        assert levels == depth

    def test_to_json_object(self):
        """Test the intermediate JSON tree."""
        assert self.hex.to_json_object(to_value({b"k": [1, True]})) == {"0x6b": ["1", True]}

    def test_rejects_non_values(self):
        """Test that plain objects are not rendered."""
        with pytest.raises(TypeError):
            self.hex.to_json_object("plain")


class TestFromJson:
    """Tests for mapping JSON to values."""

    def setup_method(self):
        """Set up test fixtures."""
        self.bridge = JSONBridge()

    def test_markers(self):
        """Test classification of marked strings."""
        assert self.bridge.from_json("b64:YmFy") == BencodexBinary(b"bar")
        assert self.bridge.from_json("0x626172") == BencodexBinary(b"bar")
        assert self.bridge.from_json("0x") == BencodexBinary(b"")
        assert self.bridge.from_json("\ufefffoo") == BencodexText("foo")
        assert self.bridge.from_json("\ufeff") == BencodexText("")

    def test_numbers_as_strings(self):
        """Test decimal digit strings."""
        assert self.bridge.from_json("-42") == BencodexNumber(-42)
        assert self.bridge.from_json("0") == BencodexNumber(0)
        assert self.bridge.from_json("1" * 50) == BencodexNumber(int("1" * 50))

    def test_number_string_with_thousands_of_digits(self):
        """Test digit strings longer than the interpreter's int/str conversion limit."""
        assert self.bridge.from_json("1" + "0" * 5000) == BencodexNumber(10 ** 5000)
        assert self.bridge.from_json_string('"-1' + "0" * 5000 + '"') == BencodexNumber(-(10 ** 5000))

    def test_deep_nesting(self):
        """Test mapping arrays nested beyond the recursion limit."""
        depth = sys.getrecursionlimit() * 5
        document = []
        expected = BencodexList()
        for _ in range(depth):
            document = [document]
            expected = BencodexList((expected,))

        assert self.bridge.from_json(document) == expected

    def test_deep_nesting_error_location(self):
        """Test that errors deep in a document still report their location."""
        depth = sys.getrecursionlimit() * 2
        document = [1]
        for _ in range(depth):
            document = [document]

        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json(document)
        assert exc_info.value.location == "$" + "[0]" * (depth + 1)

    def test_base64_marker_wins(self):
        """Test that the b64 prefix is checked before the hex prefix."""
        assert self.bridge.from_json("b64:MHgx") == BencodexBinary(b"0x1")

    def test_literals(self):
        """Test JSON booleans and null."""
        assert self.bridge.from_json(True) == BencodexBoolean(True)
        assert self.bridge.from_json(False) == BencodexBoolean(False)
        assert self.bridge.from_json(None) == BencodexNull()

    def test_containers(self):
        """Test arrays and objects."""
        value = self.bridge.from_json({"0x61": ["1", None], "\ufeffa": {}})

        assert value == BencodexDictionary({
            BencodexBinary(b"a"): BencodexList((BencodexNumber(1), BencodexNull())),
            BencodexText("a"): BencodexDictionary(),
        })

    def test_text_newline_round_trip(self):
        """Test that escaped newlines come back as real newlines."""
        assert self.bridge.from_json_string('"\ufeffa\\nb"') == BencodexText("a\nb")

    def test_from_json_string_bytes(self):
        """Test parsing UTF-8 encoded JSON."""
        assert self.bridge.from_json_string('["\ufeff한"]'.encode("utf-8")) == \
            BencodexList((BencodexText("한"),))

    def test_scenario_object(self):
        """Test the text-keyed base64 object."""
        value = from_json_string('{"\\ufefffoo": "b64:YmFy"}')
        assert value == BencodexDictionary({BencodexText("foo"): BencodexBinary(b"bar")})

    def test_module_from_json(self):
        """Test the convenience function on a parsed document."""
        assert from_json(["\ufeffx"]) == BencodexList((BencodexText("x"),))


class TestFromJsonErrors:
    """Tests for JSON that has no Bencodex meaning."""

    def setup_method(self):
        """Set up test fixtures."""
        self.bridge = JSONBridge()

    def assert_invalid_json(self, data, location=None):
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json(data)
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON
        if location is not None:
            assert exc_info.value.location == location
        return exc_info.value

    def test_malformed_json_text(self):
        """Test text that is not JSON at all."""
        for text in ['{"a": ', "[1,]", "", b"\"\xc3\x28\""]:
            with pytest.raises(JsonDecodeError) as exc_info:
                self.bridge.from_json_string(text)
            assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON_STRING

    def test_numeric_literals_rejected(self):
        """Test that JSON numbers must be strings."""
        self.assert_invalid_json(1, "$")
        self.assert_invalid_json(1.5, "$")
        self.assert_invalid_json(["1", 2], "$[1]")

    def test_numeric_literal_with_thousands_of_digits(self):
        """Test that a huge JSON number is rejected as a number, not a crash."""
        for text in ["1" * 5000, "[" + "9" * 5000 + "]", "1" * 5000 + ".5"]:
            with pytest.raises(JsonDecodeError) as exc_info:
                self.bridge.from_json_string(text)
            assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON

    def test_numeric_literal_location_in_text(self):
        """Test the location of a numeric literal parsed from text."""
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json_string('["\\ufeffa", [null, 2.5e3]]')
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON
        assert exc_info.value.location == "$[1][1]"
        assert "2.5e3" in str(exc_info.value)

    @pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", '["\\ufeffa", NaN]', '{"0x00": Infinity}'])
    def test_non_finite_constants_rejected(self, text):
        """Test that NaN and the infinities are not JSON."""
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json_string(text)
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON_STRING

    def test_text_nested_too_deeply_to_parse(self):
        """Test that JSON text nested beyond what the parser handles is an error."""
        depth = 100000
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json_string("[" * depth + "]" * depth)
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON_STRING

    def test_unmarked_string(self):
        """Test strings with no marker."""
        error = self.assert_invalid_json("hello", "$")
        assert "hello" in str(error)

    def test_malformed_number_string(self):
        """Test digit strings that are not integers."""
        self.assert_invalid_json("1-2")
        self.assert_invalid_json("-")
        self.assert_invalid_json("--1")

    def test_empty_string(self):
        """Test that an empty string is no value."""
        self.assert_invalid_json("")

    def test_malformed_base64(self):
        """Test invalid base64 payloads."""
        self.assert_invalid_json("b64:!!!")
        self.assert_invalid_json("b64:YmF")

    def test_malformed_hex(self):
        """Test invalid hexadecimal payloads."""
        self.assert_invalid_json("0xzz")
        self.assert_invalid_json("0x123")

    def test_number_object_key(self):
        """Test that object keys must be binary or text."""
        self.assert_invalid_json({"1": None}, '$["1"]')

    def test_unmarked_object_key(self):
        """Test an object key with no marker."""
        self.assert_invalid_json({"\ufeffa": {"plain": None}}, '$["\ufeffa"]["plain"]')

    def test_duplicate_mapped_keys(self):
        """Test two JSON keys that name the same binary key."""
        self.assert_invalid_json({"0x00": None, "b64:AA==": True})

    def test_lone_surrogate_text(self):
        """Test text that cannot be encoded as UTF-8."""
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json_string('"\\ufeff\\ud800"')
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON

    def test_numbers_in_text(self):
        """Test that numeric JSON literals anywhere in a document are rejected."""
        with pytest.raises(JsonDecodeError) as exc_info:
            self.bridge.from_json_string('{"\\ufeffn": 1}')
        assert exc_info.value.reason == JsonDecodeErrorReason.INVALID_JSON
        assert exc_info.value.location == '$["\ufeffn"]'


class TestJsonRoundTrip:
    """Tests for from_json(to_json(v)) == v."""

    @pytest.mark.parametrize("binary_encoding", [BinaryEncoding.BASE64, BinaryEncoding.HEX])
    def test_round_trip(self, binary_encoding, sample_dictionary):
        """Test a mixed dictionary under both binary encodings."""
        bridge = JSONBridge(JsonEncodeOptions(binary_encoding=binary_encoding))
        assert bridge.from_json_string(bridge.to_json(sample_dictionary)) == sample_dictionary

    @pytest.mark.parametrize("binary_encoding", [BinaryEncoding.BASE64, BinaryEncoding.HEX])
    def test_round_trip_awkward_strings(self, binary_encoding):
        """Test text that looks like a marker or a number."""
        value = to_value({
            "0x00": "b64:AA==",
            "123": "-1",
            "\ufeff": "",
            b"\xff" * 3: b"0x",
        })
        bridge = JSONBridge(JsonEncodeOptions(binary_encoding=binary_encoding))

        assert bridge.from_json_string(bridge.to_json(value)) == value
