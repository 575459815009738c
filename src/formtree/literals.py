"""Literal reading and canonical rendering for token values.

``read_token`` turns the text of a leaf token (symbol, keyword, number,
string, character, symbolic value) into its scalar value; ``read_regex``
does the same for ``#"..."`` literals. ``render_value`` is the inverse: it
produces the canonical spelling of a value, which re-reads to an equal value
but is not guaranteed to match the original spelling (``0x1F`` renders as
``31``, ``1N`` as ``1``).

Thread Safety:
All functions are pure. Safe to call from any thread.

"""

import math
import re
from decimal import Decimal
from fractions import Fraction

from formtree.errors import ReaderError
from formtree.values import Char, Keyword, Regex, Scalar, Symbol

_INT_RE = re.compile(
    r"([-+]?)(?:(0)|([1-9][0-9]*)|0[xX]([0-9A-Fa-f]+)|0([0-7]+)"
    r"|([1-9][0-9]?)[rR]([0-9A-Za-z]+)|0[0-9]+)(N)?"
)
_FLOAT_RE = re.compile(r"([-+]?[0-9]+(\.[0-9]*)?([eE][-+]?[0-9]+)?)(M)?")
_RATIO_RE = re.compile(r"([-+]?[0-9]+)/([0-9]+)")

_CHAR_NAMES: dict[str, str] = {
    "newline": "\n",
    "space": " ",
    "tab": "\t",
    "backspace": "\b",
    "formfeed": "\f",
    "return": "\r",
}
_CHAR_SPELLINGS: dict[str, str] = {v: k for k, v in _CHAR_NAMES.items()}

_STRING_ESCAPES: dict[str, str] = {
    "t": "\t",
    "r": "\r",
    "n": "\n",
    "\\": "\\",
    '"': '"',
    "b": "\b",
    "f": "\f",
}
_STRING_SPELLINGS: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\b": "\\b",
    "\f": "\\f",
}

_SYMBOLIC_VALUES: dict[str, float] = {
    "Inf": math.inf,
    "-Inf": -math.inf,
    "NaN": math.nan,
}


# =============================================================================
# Reading
# =============================================================================


def read_token(text: str) -> Scalar:
    """Read the text of a leaf token into its value.

    Args:
        text: Literal token text exactly as it appears in source.

    Returns:
        The token's scalar value.

    Raises:
        ReaderError: If the text is not a valid literal.

    """
    if not text:
        raise ReaderError("Empty token")
    first = text[0]
    if first == '"':
        return read_string(text)
    if first == "\\":
        return read_char(text)
    if first == ":":
        return _read_keyword(text)
    if text.startswith("##"):
        return _read_symbolic(text)
    if first.isdigit() or (first in "+-" and len(text) > 1 and text[1].isdigit()):
        return read_number(text)
    if text == "nil":
        return None
    if text == "true":
        return True
    if text == "false":
        return False
    return Symbol(text)


def read_number(text: str) -> int | float | Fraction | Decimal:
    """Read an integer, float, ratio or big-decimal literal.

    Raises:
        ReaderError: If the text is not a number.

    """
    match = _INT_RE.fullmatch(text)
    if match:
        if match.group(2) is not None:
            return 0
        sign = -1 if match.group(1) == "-" else 1
        if match.group(3) is not None:
            return sign * int(match.group(3))
        if match.group(4) is not None:
            return sign * int(match.group(4), 16)
        if match.group(5) is not None:
            return sign * int(match.group(5), 8)
        if match.group(7) is not None:
            radix = int(match.group(6))
            try:
                return sign * int(match.group(7), radix)
            except ValueError:
                raise ReaderError(f"Invalid number: {text}") from None
        raise ReaderError(f"Invalid number: {text}")

    match = _FLOAT_RE.fullmatch(text)
    if match:
        if match.group(4):
            return Decimal(match.group(1))
        return float(match.group(1))

    match = _RATIO_RE.fullmatch(text)
    if match:
        denominator = int(match.group(2))
        if denominator == 0:
            raise ReaderError(f"Divide by zero: {text}")
        ratio = Fraction(int(match.group(1)), denominator)
        return ratio.numerator if ratio.denominator == 1 else ratio

    raise ReaderError(f"Invalid number: {text}")


def read_string(text: str) -> str:
    """Decode a string literal (including its surrounding quotes).

    Raises:
        ReaderError: On unsupported escapes or a missing closing quote.

    """
    if len(text) < 2 or not text.endswith('"'):
        raise ReaderError("EOF while reading string")
    body = text[1:-1]
    if "\\" not in body:
        return body

    out: list[str] = []
    pos = 0
    end = len(body)
    while pos < end:
        char = body[pos]
        if char != "\\":
            out.append(char)
            pos += 1
            continue
        pos += 1
        if pos >= end:
            raise ReaderError("EOF while reading string")
        escape = body[pos]
        if escape in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[escape])
            pos += 1
        elif escape == "u":
            digits = body[pos + 1 : pos + 5]
            if len(digits) != 4 or not _is_hex(digits):
                raise ReaderError(f"Invalid unicode escape: \\u{digits}")
            out.append(chr(int(digits, 16)))
            pos += 5
        elif escape in "01234567":
            run = pos
            while run < end and run - pos < 3 and body[run] in "01234567":
                run += 1
            code = int(body[pos:run], 8)
            if code > 0o377:
                raise ReaderError("Octal escape sequence must be in range [0, 377]")
            out.append(chr(code))
            pos = run
        else:
            raise ReaderError(f"Unsupported escape character: \\{escape}")
    return "".join(out)


def read_char(text: str) -> Char:
    """Decode a character literal such as ``\\a``, ``\\newline`` or ``\\u00e9``.

    Raises:
        ReaderError: On unknown character names.

    """
    body = text[1:]
    if not body:
        raise ReaderError("EOF while reading character")
    if len(body) == 1:
        return Char(body)
    if body in _CHAR_NAMES:
        return Char(_CHAR_NAMES[body])
    if body[0] == "u" and len(body) == 5 and _is_hex(body[1:]):
        return Char(chr(int(body[1:], 16)))
    if body[0] == "o" and 2 <= len(body) <= 4 and all(c in "01234567" for c in body[1:]):
        code = int(body[1:], 8)
        if code > 0o377:
            raise ReaderError("Octal escape sequence must be in range [0, 377]")
        return Char(chr(code))
    raise ReaderError(f"Unsupported character: {text}")


def read_regex(text: str) -> Regex:
    """Read a ``#"..."`` literal; the pattern is kept verbatim."""
    if len(text) < 3 or not text.startswith('#"') or not text.endswith('"'):
        raise ReaderError("EOF while reading regex")
    return Regex(text[2:-1])


def _read_keyword(text: str) -> Keyword:
    name = text[1:]
    if not name or name == ":" or name.endswith(":"):
        raise ReaderError(f"Invalid token: {text}")
    return Keyword(name)


def _read_symbolic(text: str) -> float:
    value = _SYMBOLIC_VALUES.get(text[2:])
    if value is None:
        raise ReaderError(f"Unknown symbolic value: {text}")
    return value


def _is_hex(digits: str) -> bool:
    return all(c in "0123456789abcdefABCDEF" for c in digits)


# =============================================================================
# Rendering
# =============================================================================


def render_value(value: Scalar) -> str:
    """Return the canonical source spelling of a token value.

    Example:
        >>> render_value(Symbol("defn"))
        'defn'
        >>> render_value("Adds two numbers")
        '"Adds two numbers"'
        >>> render_value(None)
        'nil'

    """
    match value:
        case None:
            return "nil"
        case bool():
            return "true" if value else "false"
        case Symbol(name=name):
            return name
        case Keyword(name=name):
            return f":{name}"
        case str():
            return '"' + "".join(_STRING_SPELLINGS.get(c, c) for c in value) + '"'
        case int():
            return str(value)
        case float():
            if math.isnan(value):
                return "##NaN"
            if math.isinf(value):
                return "##Inf" if value > 0 else "##-Inf"
            return repr(value)
        case Fraction():
            return f"{value.numerator}/{value.denominator}"
        case Decimal():
            return f"{value}M"
        case Char(value=char):
            return _render_char(char)
        case Regex(pattern=pattern):
            return f'#"{pattern}"'
        case _:
            msg = f"Not a token value: {value!r}"
            raise TypeError(msg)


def _render_char(char: str) -> str:
    spelling = _CHAR_SPELLINGS.get(char)
    if spelling is not None:
        return f"\\{spelling}"
    # \uXXXX only reaches the BMP; astral characters are never whitespace
    if (char.isprintable() and not char.isspace()) or ord(char) > 0xFFFF:
        return f"\\{char}"
    return f"\\u{ord(char):04x}"


__all__ = [
    "read_char",
    "read_number",
    "read_regex",
    "read_string",
    "read_token",
    "render_value",
]
