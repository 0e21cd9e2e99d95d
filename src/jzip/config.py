"""Codec spec (v1) for jzip.

Goal: make compress/decompress settings reproducible (CLI, scripts, CI).

This module intentionally stays *small* and strict:
  - JSON only
  - explicit schema id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from jzip.core.codec_huffman import CHUNK_SIZE_DEFAULT, CHUNK_SIZE_MIN
from jzip.core.revision import NAME_TO_REVISION

SPEC_ID_V1 = "jzip.codec.v1"

MAX_INPUT_BYTES_DEFAULT = 20 * 1000 * 1000


class ConfigError(ValueError):
    pass


def _load_json_arg(spec_arg: str) -> dict[str, Any]:
    s = spec_arg.strip()
    if not s:
        raise ConfigError("codec spec: empty argument")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.exists() or not p.is_file():
            raise ConfigError(f"codec spec: file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        try:
            obj = json.loads(raw)
        except Exception as e:
            raise ConfigError(f"codec spec: invalid JSON in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise ConfigError(f"codec spec: JSON in {p} must be an object")
        return obj

    try:
        obj = json.loads(s)
    except Exception as e:
        raise ConfigError(f"codec spec: invalid inline JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ConfigError("codec spec: inline JSON must be an object")
    return obj


def _optional_int(obj: dict[str, Any], key: str, default: int, *, minimum: int) -> int:
    if key not in obj:
        return default
    v = obj.get(key)
    # bool is an int subclass, reject it explicitly
    if isinstance(v, bool) or not isinstance(v, int):
        raise ConfigError(f"codec spec: field '{key}' must be an integer")
    if v < minimum:
        raise ConfigError(f"codec spec: field '{key}' must be >= {minimum}")
    return v


def _optional_bool(obj: dict[str, Any], key: str, default: bool) -> bool:
    if key not in obj:
        return default
    v = obj.get(key)
    if isinstance(v, bool):
        return v
    raise ConfigError(f"codec spec: field '{key}' must be a boolean")


@dataclass(frozen=True)
class CodecSpecV1:
    """Settings for one compress/decompress run."""

    revision: str = "packed"
    chunk_size: int = CHUNK_SIZE_DEFAULT
    strict: bool = False
    max_input_bytes: int = MAX_INPUT_BYTES_DEFAULT
    jobs: int = 1

    def with_overrides(self, **kwargs: Any) -> "CodecSpecV1":
        """Return a copy with the non-None keyword values applied (CLI flags win)."""
        changes = {k: v for k, v in kwargs.items() if v is not None}
        if "revision" in changes:
            changes["revision"] = _check_revision(str(changes["revision"]))
        if "chunk_size" in changes and int(changes["chunk_size"]) < CHUNK_SIZE_MIN:
            raise ConfigError(f"chunk_size must be >= {CHUNK_SIZE_MIN}")
        if "jobs" in changes and int(changes["jobs"]) < 1:
            raise ConfigError("jobs must be >= 1")
        return replace(self, **changes)

    def to_json(self) -> str:
        obj = {
            "spec": SPEC_ID_V1,
            "revision": self.revision,
            "chunk_size": self.chunk_size,
            "strict": self.strict,
            "max_input_bytes": self.max_input_bytes,
            "jobs": self.jobs,
        }
        return json.dumps(obj, sort_keys=True)


def _check_revision(v: str) -> str:
    rev = v.strip().lower()
    if rev not in NAME_TO_REVISION:
        raise ConfigError(
            f"codec spec: revision must be one of {', '.join(sorted(NAME_TO_REVISION))} (got {v!r})"
        )
    return rev


def load_codec_spec(spec_arg: str) -> CodecSpecV1:
    """Load and validate a codec spec.

    spec_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(spec_arg)

    # Strict key set (keep it small and stable).
    allowed = {"spec", "revision", "chunk_size", "strict", "max_input_bytes", "jobs"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise ConfigError(f"codec spec: unsupported keys: {', '.join(extra)}")

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise ConfigError(f"codec spec: unsupported spec: {spec_id!r} (expected {SPEC_ID_V1!r})")

    revision = obj.get("revision", "packed")
    if not isinstance(revision, str) or not revision.strip():
        raise ConfigError("codec spec: field 'revision' must be a string")

    return CodecSpecV1(
        revision=_check_revision(revision),
        chunk_size=_optional_int(obj, "chunk_size", CHUNK_SIZE_DEFAULT, minimum=CHUNK_SIZE_MIN),
        strict=_optional_bool(obj, "strict", False),
        max_input_bytes=_optional_int(obj, "max_input_bytes", MAX_INPUT_BYTES_DEFAULT, minimum=1),
        jobs=_optional_int(obj, "jobs", 1, minimum=1),
    )
