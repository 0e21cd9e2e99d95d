"""Typed errors for jzip.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
- A code that is not complete yet during decode is NOT an error: the compact
  decoder answers ``None`` and the caller keeps reading bits.
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_FORMAT = 10
EXIT_UNSUPPORTED_VERSION = 11
EXIT_INPUT = 12
EXIT_VERIFY_MISMATCH = 13
EXIT_CAPACITY = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid codec spec, etc.)"),
    ExitCodeInfo(
        EXIT_FORMAT,
        "FORMAT",
        "Malformed compressed data (truncated dictionary, bad bit token, duplicate symbol, ...)",
    ),
    ExitCodeInfo(EXIT_UNSUPPORTED_VERSION, "UNSUPPORTED_VERSION", "Unsupported container version/revision"),
    ExitCodeInfo(EXIT_INPUT, "INPUT", "Unusable input (missing, empty, too large)"),
    ExitCodeInfo(EXIT_VERIFY_MISMATCH, "VERIFY_MISMATCH", "Decoded data differs from the original"),
    ExitCodeInfo(
        EXIT_CAPACITY,
        "CAPACITY",
        "Capacity exceeded (code longer than 255 bits, decoder index out of bounds)",
    ),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_NAME: dict[str, int] = {e.name: e.code for e in EXIT_CODES}
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def exit_code_by_name(name: str) -> int | None:
    return _EXIT_CODE_BY_NAME.get(name.strip().upper())


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/jzip/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every internal error extends `JzipError` and carries an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- `DecoderIndexError` means the compact decoder was built wrong; please report it.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class JzipError(Exception):
    """Base error for jzip."""

    exit_code: int = EXIT_FORMAT


class UsageError(JzipError):
    exit_code = EXIT_USAGE


class InputError(JzipError):
    """Nothing to compress: empty input, missing file, file too large."""

    exit_code = EXIT_INPUT


class FormatError(JzipError):
    """Compressed data does not follow the wire format."""

    exit_code = EXIT_FORMAT


class BadMagic(FormatError):
    pass


class TruncatedStream(FormatError):
    """Bits ran out in the middle of a code (strict decode only)."""


class InvalidCode(FormatError):
    """Bits are present but no code of the dictionary can ever match them."""


class UnsupportedVersion(JzipError):
    exit_code = EXIT_UNSUPPORTED_VERSION


class VerifyMismatch(JzipError):
    exit_code = EXIT_VERIFY_MISMATCH


class CapacityError(JzipError):
    exit_code = EXIT_CAPACITY


class DecoderIndexError(CapacityError):
    """Internal invariant violation: a path index fell outside the dense array."""
