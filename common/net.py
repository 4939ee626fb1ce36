# common/net.py
import asyncio
import json
from typing import Any, Dict

# Newline-delimited JSON protocol helpers

def encode(obj: Dict[str, Any]) -> bytes:
    return (json.dumps(obj, separators=(",", ":")) + "\n").encode("utf-8")

async def send_json(writer: asyncio.StreamWriter, obj: Dict[str, Any]):
    writer.write(encode(obj))
    await writer.drain()

async def read_json(reader: asyncio.StreamReader) -> Dict[str, Any]:
    """Read one message; returns {} at EOF and raises ValueError on garbage."""
    line = await reader.readline()
    if not line:
        return {}
    msg = json.loads(line.decode("utf-8"))
    if not isinstance(msg, dict):
        raise ValueError("message must be a JSON object")
    return msg
