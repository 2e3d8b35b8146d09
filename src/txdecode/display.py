"""
Terminal rendering of resolutions.
"""

from typing import Any, List, Tuple, Union

from txdecode.abi.types import AbiType, AddressType, ArrayType, BytesType, IntType, TupleType, UintType, parse_type
from txdecode.core.models import Resolution
from txdecode.utils.colors import bold, cyan, dim, error, function_name, green, success, yellow

ZERO_ADDRESS = "0x" + "00" * 20
MAX_BYTES_SHOWN = 32


def _group_digits(number: int) -> str:
    text = str(abs(number))
    if len(text) > 6:
        text = f"{abs(number):_}"
    return f"-{text}" if number < 0 else text


def format_value(value: Any, abi_type: Union[AbiType, str]) -> str:
    """
    Format one decoded value for display.

    Integers longer than six digits are grouped with underscores and every
    integer carries its width; byte strings longer than 32 bytes are cut
    with the full length appended.
    """
    if isinstance(abi_type, str):
        abi_type = parse_type(abi_type)

    if isinstance(abi_type, AddressType):
        if str(value).lower() == ZERO_ADDRESS:
            return f"{value} (Zero Address)"
        return str(value)
    if isinstance(abi_type, UintType):
        return f"{_group_digits(value)} (uint{abi_type.bits})"
    if isinstance(abi_type, IntType):
        return f"{_group_digits(value)} (int{abi_type.bits})"
    if isinstance(abi_type, BytesType):
        data = bytes(value)
        if len(data) <= MAX_BYTES_SHOWN:
            return "0x" + data.hex()
        return f"0x{data[:MAX_BYTES_SHOWN].hex()}... ({len(data)} bytes)"
    if isinstance(abi_type, ArrayType):
        return "[" + ", ".join(format_value(v, abi_type.element) for v in value) + "]"
    if isinstance(abi_type, TupleType):
        return "(" + ", ".join(format_value(v, t) for v, t in zip(value, abi_type.components)) + ")"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return repr(value)
    return str(value)


def _table(rows: List[Tuple[str, str, str]]) -> List[str]:
    headers = ("Parameter", "Type", "Value")
    widths = [max(len(r[i]) for r in rows + [headers]) for i in range(2)]

    # Pad before coloring so escape codes do not skew the columns
    lines = [
        "  ".join([
            bold(cyan(headers[0].ljust(widths[0]))),
            bold(yellow(headers[1].ljust(widths[1]))),
            bold(green(headers[2])),
        ])
    ]
    lines.append(dim("-" * (widths[0] + widths[1] + 4 + max(len(r[2]) for r in rows + [headers]))))
    for name, type_name, value in rows:
        lines.append("  ".join([name.ljust(widths[0]), yellow(type_name.ljust(widths[1])), value]))
    return lines


def render_resolution(resolution: Resolution) -> str:
    """Render a Resolution as the text the CLI prints."""
    if not resolution.resolved:
        return error(
            f"unknown function, 4-byte selector {resolution.selector.hex} "
            f"({resolution.argument_length} argument bytes)"
        )

    call = resolution.call
    lines = [
        f"{success('Function:')} {function_name(call.signature)}",
        dim(f"selector {call.selector}, source {call.source}"
            + (" (cached)" if resolution.from_cache else "")),
    ]
    if call.params:
        rows = [(p.name, p.type, format_value(p.value, p.type)) for p in call.params]
        lines.append("")
        lines.extend(_table(rows))
    return "\n".join(lines)
