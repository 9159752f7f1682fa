"""
Decoding of encoded log records and text serialization of nested values.

Numbers are never converted through float: the decoder keeps the literal
token so nanosecond timestamps and large counters render exactly as emitted.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from logconsole.errors import DecodeError, MarshalError


@dataclass(frozen=True)
class Number:
    """A JSON numeric literal kept in its original textual form"""
    token: str

    def __str__(self) -> str:
        return self.token

    def __int__(self) -> int:
        return int(self.token)

    def __float__(self) -> float:
        return float(self.token)

    def is_integer(self) -> bool:
        """True when the token is a plain integer literal"""
        digits = self.token[1:] if self.token.startswith('-') else self.token
        return digits.isdigit()


def _reject_constant(name: str):
    raise ValueError(f"invalid literal {name}")


_SURROGATE = re.compile('[\ud800-\udfff]')
_SURROGATE_ESCAPE = re.compile(r'\\u[dD][89a-fA-F]')
_SURROGATE_ESCAPE_BYTES = re.compile(rb'\\u[dD][89a-fA-F]')


def _has_surrogate_escape(data: Union[bytes, bytearray, str]) -> bool:
    if isinstance(data, str):
        return _SURROGATE_ESCAPE.search(data) is not None
    return _SURROGATE_ESCAPE_BYTES.search(data) is not None


def _replace_lone_surrogates(record: Dict[str, Any]) -> None:
    """Replace unpaired surrogates left by \\uXXXX escapes with U+FFFD, in place"""
    stack: List[Any] = [record]
    while stack:
        container = stack.pop()
        if isinstance(container, dict):
            items = list(container.items())
            container.clear()
            for key, value in items:
                if isinstance(value, str):
                    value = _SURROGATE.sub('\ufffd', value)
                elif isinstance(value, (dict, list)):
                    stack.append(value)
                container[_SURROGATE.sub('\ufffd', key)] = value
        else:
            for i, value in enumerate(container):
                if isinstance(value, str):
                    container[i] = _SURROGATE.sub('\ufffd', value)
                elif isinstance(value, (dict, list)):
                    stack.append(value)


def decode_record(data: Union[bytes, bytearray, str]) -> Dict[str, Any]:
    """
    Decode exactly one JSON object into a field mapping.

    Args:
        data: One encoded record

    Returns:
        Mapping of field name to str, Number, bool, None, list or dict

    Raises:
        DecodeError: If data is not a single well-formed JSON object
    """
    try:
        record = json.loads(
            data,
            parse_int=Number,
            parse_float=Number,
            parse_constant=_reject_constant
        )
    except (ValueError, TypeError, RecursionError) as e:
        raise DecodeError(f"cannot decode event: {e}") from e

    if not isinstance(record, dict):
        raise DecodeError(
            f"cannot decode event: expected a JSON object, got {type(record).__name__}"
        )

    # Paired escapes are already combined by json; what is left is unpaired
    if _has_surrogate_escape(data):
        _replace_lone_surrogates(record)

    return record


def marshal_value(value: Any) -> str:
    """
    Serialize a decoded value as compact JSON.

    Object keys are sorted and Number tokens are written verbatim.

    Raises:
        MarshalError: If value (or anything nested in it) has no JSON form,
            or is nested too deeply
    """
    try:
        return _marshal(value)
    except RecursionError:
        raise MarshalError("value nested too deeply")


def _marshal(value: Any) -> str:
    if value is None:
        return 'null'
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if isinstance(value, Number):
        return value.token
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return '[' + ','.join(_marshal(v) for v in value) + ']'
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise MarshalError(f"unsupported key type: {type(key).__name__}")
        items = []
        for key in sorted(value):
            items.append(json.dumps(key, ensure_ascii=False) + ':' + _marshal(value[key]))
        return '{' + ','.join(items) + '}'
    raise MarshalError(f"unsupported type: {type(value).__name__}")
