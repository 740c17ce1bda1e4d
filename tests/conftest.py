"""Pytest configuration and fixtures."""

import json
import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

import pytest
import yaml

from bencodex_bridge.models import BencodexValue, to_value
from bencodex_bridge.types import BinaryEncoding

TESTSUITE_DIR = Path(__file__).parent / "fixtures" / "testsuite"


@dataclass
class SuiteCase:
    """One test suite entry: the value, its canonical bytes and its JSON form."""
    name: str
    value: BencodexValue
    encoded: bytes
    json: str


def convert_binary_encoding(document: Any, binary_encoding: BinaryEncoding) -> Any:
    """Respell every binary string (values and object keys) in the target encoding."""
    if isinstance(document, dict):
        return {
            convert_binary_encoding(key, binary_encoding): convert_binary_encoding(value, binary_encoding)
            for key, value in document.items()
        }
    if isinstance(document, list):
        return [convert_binary_encoding(item, binary_encoding) for item in document]
    if isinstance(document, str):
        if binary_encoding == BinaryEncoding.BASE64 and document.startswith("0x"):
            return "b64:" + base64.b64encode(bytes.fromhex(document[2:])).decode("ascii")
        if binary_encoding == BinaryEncoding.HEX and document.startswith("b64:"):
            return "0x" + base64.b64decode(document[4:]).hex()
    return document


def load_testsuite(directory: Path = TESTSUITE_DIR,
                   binary_encoding: BinaryEncoding = BinaryEncoding.HEX) -> List[SuiteCase]:
    """
    Load ``<name>.dat`` / ``<name>.yaml`` / ``<name>.repr.json`` triples.

    The JSON files are written with hexadecimal binary; they are respelled
    when ``binary_encoding`` asks for base64.
    """
    cases = []
    for dat_path in sorted(directory.glob("*.dat")):
        name = dat_path.name[:-len(".dat")]
        with open(directory / f"{name}.yaml", encoding="utf-8") as f:
            value = to_value(yaml.safe_load(f))
        document = json.loads((directory / f"{name}.repr.json").read_text(encoding="utf-8"))
        document = convert_binary_encoding(document, binary_encoding)
        cases.append(SuiteCase(
            name=name,
            value=value,
            encoded=dat_path.read_bytes(),
            json=json.dumps(document, ensure_ascii=False),
        ))
    return cases


def pytest_generate_tests(metafunc):
    """Parametrize ``suite_case`` (hex JSON) and ``suite_case_base64`` over the test suite."""
    if "suite_case" in metafunc.fixturenames:
        cases = load_testsuite()
        metafunc.parametrize("suite_case", cases, ids=[case.name for case in cases])
    if "suite_case_base64" in metafunc.fixturenames:
        cases = load_testsuite(binary_encoding=BinaryEncoding.BASE64)
        metafunc.parametrize("suite_case_base64", cases, ids=[case.name for case in cases])


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for tests that write files."""
    return tmp_path


@pytest.fixture
def sample_dictionary():
    """Dictionary mixing binary and text keys with nested containers."""
    return to_value({
        b"binary": b"\x00\x01\x02",
        "text": "hello\nworld",
        "number": -12345678901234567890,
        "flags": [True, False, None],
        "nested": {"empty": {}, "list": []},
    })
