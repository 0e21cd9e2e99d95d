"""jzip CLI.

This is the stable CLI entrypoint (console-script: ``jzip``).

UX policy:
  - results go to stdout, errors to stderr prefixed with ``[jzip]``
  - exit codes come from jzip.errors (see docs/exit_codes.md)
  - ``--debug`` re-raises to show the stack trace
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from jzip.config import CodecSpecV1, ConfigError, load_codec_spec
from jzip.errors import EXIT_FORMAT, EXIT_USAGE, JzipError


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_spec_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--spec",
        default=None,
        help=(
            "Codec spec (JSON). Use '@file.json' to load from file, or pass JSON inline. "
            "Explicit flags override the spec."
        ),
    )


def _resolve_spec(ns: argparse.Namespace) -> CodecSpecV1:
    spec = load_codec_spec(str(ns.spec)) if getattr(ns, "spec", None) else CodecSpecV1()
    return spec.with_overrides(
        revision=getattr(ns, "revision", None),
        chunk_size=getattr(ns, "chunk_size", None),
        jobs=getattr(ns, "jobs", None),
        strict=True if getattr(ns, "strict", False) else None,
    )


def _cmd_compress(ns: argparse.Namespace) -> int:
    from jzip.driver import compress_file, default_output_path
    from jzip.report import print_stats

    spec = _resolve_spec(ns)
    output = ns.output if ns.output is not None else default_output_path(ns.input)
    stats = compress_file(ns.input, output, spec)
    if ns.stats or ns.timings:
        print_stats(stats, str(output), timings=bool(ns.timings))
    else:
        print(f"{ns.input} -> {output}")
    return 0


def _cmd_decompress(ns: argparse.Namespace) -> int:
    from jzip.driver import decompress_file

    spec = _resolve_spec(ns)
    n = decompress_file(ns.input, ns.output, strict=spec.strict, jobs=spec.jobs)
    print(f"{ns.input} -> {ns.output} ({n} bytes)")
    return 0


def _cmd_verify(ns: argparse.Namespace) -> int:
    from jzip.driver import verify_file

    verify_file(ns.input, ns.original, jobs=int(ns.jobs or 1))
    print("OK")
    return 0


def _cmd_info(ns: argparse.Namespace) -> int:
    from jzip.driver import read_input
    from jzip.engine.container import container_chunk_count, unpack_container

    c = unpack_container(read_input(ns.input))
    h = c.header
    info = {
        "version": h.version,
        "revision": h.revision_name,
        "original_size": h.n,
        "chunk_size": h.chunk_size,
        "chunks": container_chunk_count(c),
        "symbols": len(c.mapping),
        "dict_size": c.dict_size,
        "body_size": len(c.body),
        "max_code_len": max((len(code) for code in c.mapping.values()), default=0),
    }
    if ns.codes:
        info["codes"] = {str(sym): "".join(map(str, code)) for sym, code in sorted(c.mapping.items())}
    print(json.dumps(info, indent=2))
    return 0


def _cmd_bench(ns: argparse.Namespace) -> int:
    from jzip.bench import bench_bytes
    from jzip.driver import read_input
    from jzip.report import format_bytes

    spec = _resolve_spec(ns)
    data = read_input(ns.input, max_bytes=spec.max_input_bytes)
    res = bench_bytes(data, spec, baseline=not ns.no_baseline)
    if ns.json:
        print(json.dumps(res.as_dict(), sort_keys=True))
        return 0
    for name, us in res.timings_us.items():
        print(f"{name}: {us} microseconds")
    print(f"Original file size: {format_bytes(res.original_size)}")
    print(f"Compressed file size: {format_bytes(res.jzip_size)} ({res.revision})")
    if res.zstd_size is not None:
        print(f"zstd baseline size: {format_bytes(res.zstd_size)}")
    return 0


def _cmd_spec_validate(ns: argparse.Namespace) -> int:
    # load is the validation
    load_codec_spec(str(ns.spec))
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="jzip", description="jzip: static Huffman byte compressor")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress a file (default output: <input>.jzip)")
    p_c.add_argument("input", type=Path)
    p_c.add_argument("output", type=Path, nargs="?", default=None)
    p_c.add_argument(
        "--revision",
        choices=["text", "packed", "chunked"],
        default=None,
        help="On-disk bit layout (default: packed)",
    )
    p_c.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Chunk size in bytes for --revision chunked (min 32, default 65536)",
    )
    p_c.add_argument("--stats", action="store_true", help="Print size statistics")
    p_c.add_argument("--timings", action="store_true", help="Print per-phase timings")
    _add_spec_arg(p_c)
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Decompress a .jzip file")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    p_d.add_argument(
        "--strict",
        action="store_true",
        help="Fail on a code cut off by the end of the data (default: drop it)",
    )
    p_d.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Parallel jobs for chunked files (default: 1)",
    )
    _add_spec_arg(p_d)
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Strict decode of a .jzip file")
    p_v.add_argument("input", type=Path)
    p_v.add_argument("--original", type=Path, default=None, help="Compare with the original file")
    p_v.add_argument("--jobs", type=int, default=1)
    _add_common_args(p_v)

    p_i = sub.add_parser("info", help="Show header and dictionary summary as JSON")
    p_i.add_argument("input", type=Path)
    p_i.add_argument("--codes", action="store_true", help="Include the full code table")
    _add_common_args(p_i)

    p_b = sub.add_parser("bench", help="Time every phase of a round trip on a file")
    p_b.add_argument("input", type=Path)
    p_b.add_argument("--revision", choices=["text", "packed", "chunked"], default=None)
    p_b.add_argument("--chunk-size", type=int, default=None)
    p_b.add_argument("--no-baseline", action="store_true", help="Skip the zstd size baseline")
    p_b.add_argument("--json", action="store_true", help="Print a JSON object")
    _add_spec_arg(p_b)
    _add_common_args(p_b)

    p_s = sub.add_parser("spec-validate", help="Validate a codec spec (v1)")
    p_s.add_argument("spec", help="Codec spec JSON (@file.json or inline JSON)")
    _add_common_args(p_s)

    return p


_COMMANDS = {
    "compress": _cmd_compress,
    "decompress": _cmd_decompress,
    "verify": _cmd_verify,
    "info": _cmd_info,
    "bench": _cmd_bench,
    "spec-validate": _cmd_spec_validate,
}


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        handler = _COMMANDS.get(ns.cmd)
        if handler is None:
            raise AssertionError("unreachable")
        return handler(ns)

    except SystemExit:
        raise
    except ConfigError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[jzip] {e}", file=sys.stderr)
        return EXIT_USAGE
    except JzipError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[jzip] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_FORMAT) or EXIT_FORMAT)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[jzip] error: {e}", file=sys.stderr)
        return EXIT_FORMAT


if __name__ == "__main__":
    raise SystemExit(main())
