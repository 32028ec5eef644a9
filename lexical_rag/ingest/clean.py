import re

_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def normalize_text(s: str, dehyphenate: bool = False) -> str:
    if not s:
        return ""
    # Normalize Windows / old Mac line endings
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    s = s.replace("\u00a0", " ")  # nbsp -> space
    s = s.replace("\ufeff", "")  # BOM
    s = _CONTROL.sub("", s)
    if dehyphenate:
        # "configu-\nration" -> "configuration" (PDF line wraps)
        s = re.sub(r"(\w)-\n(\w)", r"\1\2", s)
    # Collapse runs of spaces/tabs
    s = re.sub(r"[ \t]{2,}", " ", s)
    # Trim excessive blank lines
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def printable_runs(data: bytes, min_run: int = 4) -> str:
    """Best-effort text from an opaque binary, like `strings`: ASCII printable runs."""
    runs = re.findall(rb"[\x20-\x7e\t\n]{%d,}" % min_run, data)
    return "\n".join(r.decode("ascii").strip() for r in runs if r.strip())
