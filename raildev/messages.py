"""JSON messages exchanged with the remote terminal service."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

DataPayload = Union[str, bytes, None]


@dataclass(frozen=True)
class ClientMessage:
    type: str
    payload: dict = field(default_factory=dict)

    def to_json(self) -> str:
        """Compact JSON with the payload fields inline."""
        return json.dumps(
            {"type": self.type, "payload": self.payload}, separators=(",", ":")
        )


def _check_range(name: str, value: int, upper: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= upper:
        raise ValueError(f"{name} must be an integer between 0 and {upper}")
    return value


def data_message(data: str) -> ClientMessage:
    return ClientMessage("session_data", {"data": data})


def window_size_message(cols: int, rows: int) -> ClientMessage:
    return ClientMessage(
        "window_resize",
        {"cols": _check_range("cols", cols, 0xFFFF), "rows": _check_range("rows", rows, 0xFFFF)},
    )


def signal_message(signal: int) -> ClientMessage:
    return ClientMessage("signal", {"signal": _check_range("signal", signal, 0xFF)})


def command_message(command: str, args: Sequence[str] = ()) -> ClientMessage:
    return ClientMessage(
        "exec_command", {"command": command, "args": list(args), "env": {}}
    )


def init_shell_message(shell: Optional[str] = None) -> ClientMessage:
    return ClientMessage("init_shell", {"shell": shell})


@dataclass(frozen=True)
class ServerPayload:
    data: DataPayload = None
    message: str = ""
    code: Optional[int] = None


@dataclass(frozen=True)
class ServerMessage:
    type: str
    payload: ServerPayload


def _byte_list(value: Any) -> Optional[bytes]:
    if isinstance(value, list) and all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value
    ):
        return bytes(value)
    return None


def _parse_data(value: Any) -> DataPayload:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        # An object without a valid byte array is the empty payload.
        return _byte_list(value.get("data")) if "data" in value else None
    if isinstance(value, list):
        if not value:
            return None
        if len(value) == 1:
            buffer = _byte_list(value[0])
            if buffer is not None:
                return buffer
    raise ValueError("data did not match any variant of the data payload")


def _parse_payload(value: Any) -> ServerPayload:
    if not isinstance(value, dict):
        raise ValueError("payload must be an object")
    data = _parse_data(value["data"]) if "data" in value else None
    message = value.get("message", "")
    if not isinstance(message, str):
        raise ValueError("message must be a string")
    code = value.get("code")
    if code is not None and (
        not isinstance(code, int) or isinstance(code, bool) or not -(2**31) <= code < 2**31
    ):
        raise ValueError("code must be a 32-bit integer")
    return ServerPayload(data=data, message=message, code=code)


def parse_server_message(text: str) -> ServerMessage:
    """Decode a server message; raise ValueError when it is malformed."""
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("server message must be an object")
    if "type" not in raw or not isinstance(raw["type"], str):
        raise ValueError("server message needs a string type")
    if "payload" not in raw:
        raise ValueError("server message needs a payload")
    return ServerMessage(type=raw["type"], payload=_parse_payload(raw["payload"]))