import argparse
import os
import sys

from compressor import Compressor
from errors import HuffFormatError

COMPRESSED_SUFFIX = ".hf"  #: Default suffix for compressed files
DECOMPRESSED_SUFFIX = ".uhf"  #: Default suffix for restored files


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman compressor for single files"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    for name, alias, help_text in (
        ("compress", "c", "Compress a file"),
        ("decompress", "d", "Decompress a file produced by 'compress'"),
    ):
        sub = subparsers.add_parser(name, aliases=[alias], help=help_text)
        sub.add_argument("source", help="File to read")
        sub.add_argument(
            "-o",
            "--output",
            default=None,
            help="Output file path (default: derived from source)",
        )
        sub.add_argument(
            "-P",
            "--no-progress",
            action="store_true",
            help="Hide the progress line",
        )
        sub.add_argument(
            "-d",
            "--debug",
            type=int,
            default=0,
            metavar="LEVEL",
            help=(
                f"Diagnostic level: {Compressor.DEBUG_LOW} for a summary, "
                f"{Compressor.DEBUG_HIGH} for a full trace"
            ),
        )

    return parser


def default_output_path(source: str, compressing: bool) -> str:
    """Derive an output path when none is given.

    Compressed files get ``.hf`` appended. Restored files lose a trailing
    ``.hf`` and get ``.uhf`` so the original is never overwritten.

    :param source: Input file path.
    :type source: str
    :param compressing: ``True`` for compression, ``False`` otherwise.
    :type compressing: bool
    :returns: Output file path.
    :rtype: str
    """
    if compressing:
        return source + COMPRESSED_SUFFIX
    if source.endswith(COMPRESSED_SUFFIX):
        source = source[: -len(COMPRESSED_SUFFIX)]
    return source + DECOMPRESSED_SUFFIX


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``."""
    if total <= 0:
        return "0%"
    return f"{100.0 * done / total:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


class FileProgress:
    """Callable progress reporter for one file.

    Redraws only when the whole-percent value changes.

    :ivar label: Action label (e.g., "Compressing" or "Decompressing").
    :type label: str
    :ivar path: Path displayed for the file being processed.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Bytes processed so far.
        :type done: int
        :param total: Total bytes to process.
        :type total: int
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def _read_input(path: str):
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        print(f"[!] Input file not found: {path}")
        return None


def _run(label: str, action, source: str, data: bytes, hide_progress: bool):
    if hide_progress:
        return action(data)
    result = action(data, on_progress=FileProgress(label, source))
    sys.stdout.write("\n")
    sys.stdout.flush()
    return result


def compress_file(
    source: str, output_path: str, hide_progress: bool, debug: int = 0
) -> None:
    """Compress ``source`` into ``output_path``.

    :param source: File to compress.
    :type source: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param debug: Diagnostic level passed to :class:`Compressor`.
    :type debug: int
    :returns: None
    :rtype: None
    """
    data = _read_input(source)
    if data is None:
        return
    comp = _run(
        "Compressing",
        Compressor(debug=debug).compress,
        source,
        data,
        hide_progress,
    )
    with open(output_path, "wb") as out:
        out.write(comp)
    print("Size before compression: ", _fmt_bytes(len(data)))
    print("Size after compression: ", _fmt_bytes(len(comp)))
    print(f"Compression ratio: {len(data) / len(comp):.2f}")


def decompress_file(
    source: str, output_path: str, hide_progress: bool, debug: int = 0
) -> None:
    """Decompress ``source`` into ``output_path``.

    The whole stream is decoded before the output file is opened, so a
    corrupt input never leaves a partial file behind.

    :param source: Compressed file.
    :type source: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param debug: Diagnostic level passed to :class:`Compressor`.
    :type debug: int
    :returns: None
    :rtype: None
    :raises HuffFormatError: If ``source`` is not a valid compressed file.
    """
    comp = _read_input(source)
    if comp is None:
        return
    data = _run(
        "Decompressing",
        Compressor(debug=debug).decompress,
        source,
        comp,
        hide_progress,
    )
    with open(output_path, "wb") as out:
        out.write(data)
    print("Size before decompression: ", _fmt_bytes(len(comp)))
    print("Size after decompression: ", _fmt_bytes(len(data)))


def main():
    """Entry point for the CLI tool.

    :returns: None
    :rtype: None
    """
    parser = get_parser()
    args = parser.parse_args()

    compressing = args.cmd in ["compress", "c"]
    output = args.output or default_output_path(args.source, compressing)
    if os.path.abspath(output) == os.path.abspath(args.source):
        print("[!] Output path must differ from the input path")
        sys.exit(2)

    if compressing:
        compress_file(args.source, output, args.no_progress, args.debug)
        return
    try:
        decompress_file(args.source, output, args.no_progress, args.debug)
    except HuffFormatError as e:
        print(f"[!] Cannot decompress {args.source}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
