from typing import Callable, Dict, Optional, Tuple

from bitops import BitReader, BitWriter
from errors import BadMagicError, HuffFormatError, TruncatedPayloadError
from huffman import (
    BITS_PER_INT,
    BITS_PER_WORD,
    PSEUDO_EOF,
    HuffmanNode,
    build_tree,
    count_frequencies,
    iter_leaves,
    make_codings,
    read_header,
    write_header,
)


class Compressor:
    """Huffman compressor with a tree header.

    Stream layout: 32-bit magic number, pre-order tree header, one code
    per input byte, the pseudo-EOF code, then zero padding to a byte
    boundary.

    :ivar MAGIC: Magic number opening every compressed stream.
    :type MAGIC: int
    :ivar debug: Diagnostic verbosity; ``DEBUG_LOW`` prints a summary per
        run, ``DEBUG_HIGH`` also traces the tree and every code.
    :type debug: int
    """

    MAGIC = 0xFACE8201
    DEBUG_LOW = 1
    DEBUG_HIGH = 4

    def __init__(self, debug: int = 0):
        """
        :param debug: Diagnostic verbosity level.
        :type debug: int
        """
        self.debug = debug

    def _log(self, level: int, message: str) -> None:
        if self.debug >= level:
            print(message)

    def compress(
        self,
        data: bytes,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Compress raw ``data``.

        :param data: Input bytes to compress.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input bytes encoded so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Compressed byte stream. Empty input still yields the magic
                  number, a one-leaf tree and an empty end-of-stream code.
        :rtype: bytes
        """
        output = BitWriter()
        self.compress_bits(BitReader(data), output, on_progress)
        return output.flush()

    def decompress(
        self,
        data: bytes,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Decompress data produced by ``compress``.

        :param data: Compressed byte stream.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting compressed bytes consumed so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Original uncompressed bytes.
        :rtype: bytes
        :raises BadMagicError: If ``data`` does not start with ``MAGIC``.
        :raises TruncatedHeaderError: If ``data`` ends inside the tree header.
        :raises TruncatedPayloadError: If ``data`` ends before the
            end-of-stream code.
        """
        output = BitWriter()
        self.decompress_bits(BitReader(data), output, on_progress)
        return output.flush()

    def compress_bits(
        self,
        reader: BitReader,
        writer: BitWriter,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Compress everything in ``reader`` into ``writer``.

        ``reader`` is read twice: once to count symbols, then again from
        the start to encode them. ``writer`` is not flushed.

        :param reader: Uncompressed input at its first bit.
        :type reader: BitReader
        :param writer: Destination for the compressed stream.
        :type writer: BitWriter
        :param on_progress: Optional ``on_progress(done, total)`` callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bits written.
        :rtype: int
        """
        start = writer.bits_written
        counts = count_frequencies(reader)
        root = build_tree(counts)
        codes = make_codings(root)
        if self.debug >= self.DEBUG_HIGH:
            for symbol in sorted(codes):
                code, length = codes[symbol]
                self._log(
                    self.DEBUG_HIGH,
                    f"encoding for {symbol} is {_bit_string(code, length)}",
                )

        writer.write_bits(self.MAGIC, BITS_PER_INT)
        self._log(self.DEBUG_HIGH, f"wrote magic number {self.MAGIC:#010x}")
        write_header(root, writer)
        self._trace_leaves(root, "wrote")

        reader.reset()
        self._write_compressed_bits(codes, reader, writer, on_progress)

        written = writer.bits_written - start
        self._log(
            self.DEBUG_LOW,
            f"compressed {reader.bits_read} bits into {written} bits "
            f"using {len(codes)} codes",
        )
        return written

    def decompress_bits(
        self,
        reader: BitReader,
        writer: BitWriter,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Decompress a stream from ``reader`` into ``writer``.

        :param reader: Compressed input at its first bit.
        :type reader: BitReader
        :param writer: Destination for the recovered bytes.
        :type writer: BitWriter
        :param on_progress: Optional ``on_progress(done, total)`` callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Number of bits read.
        :rtype: int
        :raises HuffFormatError: If the stream is foreign, truncated or
            carries a malformed tree.
        """
        start = reader.bits_read
        try:
            magic = reader.read_bits(BITS_PER_INT)
        except EOFError:
            raise BadMagicError(
                "Input is too short to hold a magic number"
            ) from None
        if magic != self.MAGIC:
            raise BadMagicError(f"Illegal header starts with {magic:#010x}")

        root = read_header(reader)
        self._trace_leaves(root, "read")
        self._read_compressed_bits(root, reader, writer, on_progress)

        consumed = reader.bits_read - start
        self._log(
            self.DEBUG_LOW,
            f"decompressed {consumed} bits into {writer.bits_written} bits",
        )
        return consumed

    def _trace_leaves(self, root: HuffmanNode, verb: str) -> None:
        if self.debug < self.DEBUG_HIGH:
            return
        for leaf in iter_leaves(root):
            self._log(self.DEBUG_HIGH, f"{verb} leaf with value {leaf.value}")

    @staticmethod
    def _write_compressed_bits(
        codes: Dict[int, Tuple[int, int]],
        reader: BitReader,
        writer: BitWriter,
        on_progress: Optional[Callable[[int, int], None]],
    ) -> None:
        """Write the code of every input byte, then the pseudo-EOF code.

        :param codes: Code table from :func:`huffman.make_codings`.
        :type codes: Dict[int, Tuple[int, int]]
        :param reader: Input positioned at its first bit.
        :type reader: BitReader
        :param writer: Destination bit stream.
        :type writer: BitWriter
        :param on_progress: Optional ``on_progress(done, total)`` callback.
        :type on_progress: Optional[Callable[[int, int], None]]
        """
        total = reader.total_bytes
        while True:
            try:
                symbol = reader.read_bits(BITS_PER_WORD)
            except EOFError:
                break
            code, length = codes[symbol]
            writer.write_bits(code, length)
            if on_progress is not None:
                on_progress(reader.pos, total)

        code, length = codes[PSEUDO_EOF]
        writer.write_bits(code, length)

    @staticmethod
    def _read_compressed_bits(
        root: HuffmanNode,
        reader: BitReader,
        writer: BitWriter,
        on_progress: Optional[Callable[[int, int], None]],
    ) -> None:
        """Walk the tree one bit at a time until the pseudo-EOF leaf.

        :raises TruncatedPayloadError: If the bits run out first.
        :raises HuffFormatError: If a single-leaf tree holds a byte symbol.
        """
        if root.is_leaf:
            if root.value != PSEUDO_EOF:
                raise HuffFormatError(
                    f"Single-leaf tree holds symbol {root.value}, "
                    "not the end-of-stream marker"
                )
            return

        total = reader.total_bytes
        current = root
        while True:
            try:
                bit = reader.read_bits(1)
            except EOFError:
                raise TruncatedPayloadError(
                    "Bad input, no PSEUDO_EOF before end of data"
                ) from None
            current = current.right if bit else current.left

            if current.is_leaf:
                if current.value == PSEUDO_EOF:
                    break
                writer.write_bits(current.value, BITS_PER_WORD)
                current = root
                if on_progress is not None:
                    on_progress(reader.pos, total)


def _bit_string(code: int, length: int) -> str:
    return format(code, f"0{length}b") if length else ""
