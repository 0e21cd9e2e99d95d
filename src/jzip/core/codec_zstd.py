from __future__ import annotations

from dataclasses import dataclass

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None

ZSTD_LEVEL_DEFAULT = 19


def have_zstd() -> bool:
    return zstd is not None


@dataclass
class CodecZstd:
    """
    General purpose compressor used as a size baseline by ``jzip bench``.

    ``tight`` leaves the content size and checksum out of the frame, so the
    size compared with a jzip file is mostly payload.
    """

    level: int = ZSTD_LEVEL_DEFAULT
    tight: bool = True

    def _module(self):
        if zstd is None:
            raise RuntimeError(
                "zstandard is not installed (python3 -m pip install zstandard); "
                "the bench baseline needs it"
            )
        return zstd

    def compress(self, data: bytes) -> bytes:
        frame_opts = {"write_content_size": False, "write_checksum": False} if self.tight else {}
        c = self._module().ZstdCompressor(level=int(self.level), **frame_opts)
        return c.compress(data)

    def decompress(self, data: bytes, out_size: int | None = None) -> bytes:
        d = self._module().ZstdDecompressor()
        if out_size is None:
            return d.decompress(data)
        return d.decompress(data, max_output_size=int(out_size))

    def baseline_size(self, data: bytes) -> int | None:
        """Compressed size of ``data``, None when zstandard is missing."""
        if not have_zstd():
            return None
        return len(self.compress(data))
