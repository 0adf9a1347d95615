"""
Minecraft Server List Ping (SLP) 客户端。

实现 1.7+ 版本的状态查询：握手包 + 状态请求包，读取服务器返回的 JSON，
从中提取在线人数、最大人数、版本名和 MOTD。

Wire format: every packet is ``VarInt(length) + VarInt(packet_id) + payload``;
strings are ``VarInt(byte_length) + UTF-8``.
"""
import asyncio
import json
import re
import struct
from dataclasses import dataclass
from typing import Any, Optional

# 协议号只影响服务器回显的兼容性判断，不影响状态查询本身
DEFAULT_PROTOCOL_VERSION = 47
NEXT_STATE_STATUS = 1
MAX_PACKET_LENGTH = 2 ** 21

_FORMAT_CODE = re.compile("§.", re.DOTALL)


class SlpProtocolError(ValueError):
    """服务器响应不符合 SLP 协议。"""


@dataclass(frozen=True)
class ServerStatus:
    players: int
    max_players: int
    version: str
    motd: str


def encode_varint(value: int) -> bytes:
    """编码 32 位 VarInt，负数按补码处理。"""
    value &= 0xFFFFFFFF
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """从 data[offset:] 解码一个 VarInt，返回 (值, 新偏移)。"""
    result = 0
    for i in range(5):
        if offset >= len(data):
            raise SlpProtocolError("Truncated VarInt")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            if result & (1 << 31):
                result -= 1 << 32
            return result, offset
    raise SlpProtocolError("VarInt is too long")


def encode_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return encode_varint(len(raw)) + raw


def build_packet(packet_id: int, payload: bytes = b"") -> bytes:
    body = encode_varint(packet_id) + payload
    return encode_varint(len(body)) + body


def build_handshake(host: str, port: int, protocol_version: int = DEFAULT_PROTOCOL_VERSION) -> bytes:
    payload = (
        encode_varint(protocol_version)
        + encode_string(host)
        + struct.pack(">H", port)
        + encode_varint(NEXT_STATE_STATUS)
    )
    return build_packet(0x00, payload)


async def read_packet(reader: asyncio.StreamReader) -> bytes:
    """读取一个完整数据包，返回去掉长度前缀后的包体。"""
    length = 0
    for i in range(5):
        byte = (await reader.readexactly(1))[0]
        length |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            break
    else:
        raise SlpProtocolError("Packet length VarInt is too long")
    if length <= 0 or length > MAX_PACKET_LENGTH:
        raise SlpProtocolError(f"Invalid packet length: {length}")
    return await reader.readexactly(length)


def parse_status_packet(body: bytes) -> dict:
    """解析状态响应包（packet id 0x00），返回其中的 JSON 对象。"""
    packet_id, offset = decode_varint(body)
    if packet_id != 0x00:
        raise SlpProtocolError(f"Unexpected packet id: {packet_id:#x}")
    length, offset = decode_varint(body, offset)
    if length < 0 or offset + length > len(body):
        raise SlpProtocolError("Status string is truncated")
    data = json.loads(body[offset:offset + length].decode("utf-8"))
    if not isinstance(data, dict):
        raise SlpProtocolError("Status payload is not a JSON object")
    return data


def flatten_description(description: Any) -> str:
    """把 MOTD 的聊天组件（字符串 / dict / list）拼成纯文本。"""
    if description is None:
        return ""
    if isinstance(description, str):
        return description
    if isinstance(description, list):
        return "".join(flatten_description(part) for part in description)
    if isinstance(description, dict):
        text = str(description.get("text", ""))
        return text + "".join(flatten_description(part) for part in description.get("extra") or [])
    return str(description)


def clean_motd(description: Any) -> str:
    """去掉 § 格式代码后的 MOTD。"""
    return _FORMAT_CODE.sub("", flatten_description(description)).strip()


def parse_status(data: dict) -> ServerStatus:
    try:
        players = data.get("players") or {}
        version = data.get("version") or {}
        return ServerStatus(
            players=int(players.get("online", 0)),
            max_players=int(players.get("max", 0)),
            version=str(version.get("name") or "Unknown"),
            motd=clean_motd(data.get("description")),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise SlpProtocolError(f"Malformed status payload: {e}") from e


async def query_status(
    host: str,
    port: int,
    timeout: float,
    protocol_version: Optional[int] = None,
) -> ServerStatus:
    """向服务器发起一次状态查询。

    Raises:
        SlpProtocolError: 响应格式错误。
        OSError / EOFError / asyncio.TimeoutError: 网络层失败。
    """
    handshake = build_handshake(host, port, protocol_version or DEFAULT_PROTOCOL_VERSION)

    async def _query() -> ServerStatus:
        reader, writer = await asyncio.open_connection(host, port)
        try:
            writer.write(handshake + build_packet(0x00))
            await writer.drain()
            body = await read_packet(reader)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
        return parse_status(parse_status_packet(body))

    return await asyncio.wait_for(_query(), timeout=timeout)
