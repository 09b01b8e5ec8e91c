"""Text sanitization for server-supplied strings.

Player names, chat lines and error messages come straight off the wire and
end up in the terminal. Control and zero-width characters are stripped so a
hostile name cannot move the cursor or hide text.
"""

import re

# Control chars to strip (keep \t=0x09, \n=0x0a, \r=0x0d)
_CONTROL_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]"
)

# Zero-width and BOM characters
_ZERO_WIDTH_RE = re.compile(
    r"[\u200b\u200c\u200d\u2060\ufeff\u00ad]"
)

# ESC sequences are removed whole, not just the ESC byte
_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def sanitize_text(text: str) -> str:
    """Strip ANSI sequences, control characters and zero-width chars."""
    text = _ANSI_RE.sub("", text)
    text = _CONTROL_RE.sub("", text)
    text = _ZERO_WIDTH_RE.sub("", text)
    return text


def single_line(text: str, max_len: int = 200) -> str:
    """Sanitize and collapse to one line, truncating long input."""
    line = " ".join(sanitize_text(text).split())
    if len(line) > max_len:
        return line[: max_len - 3] + "..."
    return line
