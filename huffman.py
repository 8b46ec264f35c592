import heapq
from typing import Dict, Iterator, List, Tuple

from bitops import BitReader, BitWriter
from errors import HuffFormatError, TruncatedHeaderError

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE  #: End-of-stream symbol, one past the byte range


class HuffmanNode:
    """Node of a Huffman prefix-code tree.

    :ivar value: Symbol stored at a leaf (0-256); 0 for internal nodes.
    :type value: int
    :ivar weight: Sum of the leaf frequencies in this subtree.
    :type weight: int
    :ivar left: Left child (bit ``0``), ``None`` for leaves.
    :type left: HuffmanNode | None
    :ivar right: Right child (bit ``1``), ``None`` for leaves.
    :type right: HuffmanNode | None
    :ivar order: Tie-break key between nodes of equal weight.
    :type order: int
    """

    def __init__(self, value=0, weight=0, left=None, right=None, order=0):
        """Create a Huffman node.

        :param int value: Symbol for leaf nodes.
        :param int weight: Frequency (weight) associated with this node.
        :param left: Left child node, if any.
        :type left: HuffmanNode|None
        :param right: Right child node, if any.
        :type right: HuffmanNode|None
        :param int order: Insertion rank used to break weight ties.
        :returns: None
        :rtype: None
        """
        self.value = value
        self.weight = weight
        self.left = left
        self.right = right
        self.order = order

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __lt__(self, other):
        """Order nodes by weight, then by insertion rank.

        :param other: Another node to compare with.
        :type other: HuffmanNode
        :rtype: bool
        """
        return (self.weight, self.order) < (other.weight, other.order)


def count_frequencies(reader: BitReader) -> List[int]:
    """Tally 8-bit words from ``reader`` until it runs out.

    The pseudo-EOF slot is seeded with 1 so the end marker always gets a
    code. The reader is left at its end; call :meth:`BitReader.reset`
    before reading it again.

    :param reader: Input positioned at its first bit.
    :type reader: BitReader
    :returns: ``ALPH_SIZE + 1`` counts indexed by symbol.
    :rtype: List[int]
    """
    freq = [0] * (ALPH_SIZE + 1)
    freq[PSEUDO_EOF] = 1
    while True:
        try:
            value = reader.read_bits(BITS_PER_WORD)
        except EOFError:
            break
        freq[value] += 1
    return freq


def build_tree(counts: List[int]) -> HuffmanNode:
    """Build a Huffman tree from a symbol frequency table.

    Leaves enter the heap in symbol order and carry their symbol as tie-break
    rank; merged nodes are ranked after every leaf in creation order. The
    first node popped becomes the left child. This makes the tree, and so
    the compressed bytes, reproducible.

    :param counts: Frequency per symbol, indexed 0..``PSEUDO_EOF``.
    :type counts: List[int]
    :returns: Root of the tree. A table with a single nonzero entry yields
        a lone leaf.
    :rtype: HuffmanNode
    :raises ValueError: If no symbol has a nonzero count.
    """
    heap = [
        HuffmanNode(value=sym, weight=count, order=sym)
        for sym, count in enumerate(counts)
        if count > 0
    ]
    if not heap:
        raise ValueError("Cannot build a Huffman tree from an empty table")
    heapq.heapify(heap)

    order = len(counts)
    while len(heap) > 1:
        left = heapq.heappop(heap)
        right = heapq.heappop(heap)
        merged = HuffmanNode(
            weight=left.weight + right.weight,
            left=left,
            right=right,
            order=order,
        )
        order += 1
        heapq.heappush(heap, merged)

    return heap[0]


def make_codings(root: HuffmanNode) -> Dict[int, Tuple[int, int]]:
    """Derive the code table of a tree.

    :param root: Root of the Huffman tree.
    :type root: HuffmanNode
    :returns: Mapping from symbol to ``(code, length)``; left edges are 0,
        right edges are 1.
    :rtype: Dict[int, Tuple[int, int]]
    """
    codes: Dict[int, Tuple[int, int]] = {}
    _collect_codes(root, 0, 0, codes)
    return codes


def _collect_codes(node: HuffmanNode, code: int, length: int, codes: Dict):
    if node.is_leaf:
        codes[node.value] = (code, length)
        return
    _collect_codes(node.left, code << 1, length + 1, codes)
    _collect_codes(node.right, (code << 1) | 1, length + 1, codes)


def iter_leaves(root: HuffmanNode) -> Iterator[HuffmanNode]:
    """Yield the leaves of a tree in pre-order (left before right)."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def write_header(root: HuffmanNode, writer: BitWriter):
    """Serialize a tree in pre-order.

    A leaf is written as a ``1`` bit followed by its value in
    ``BITS_PER_WORD + 1`` bits (wide enough for ``PSEUDO_EOF``). An internal
    node is a ``0`` bit followed by its left and right subtrees.

    :param root: Tree to serialize.
    :type root: HuffmanNode
    :param writer: Destination bit stream.
    :type writer: BitWriter
    :returns: None
    :rtype: None
    """
    if root.is_leaf:
        writer.write_bits(1, 1)
        writer.write_bits(root.value, BITS_PER_WORD + 1)
    else:
        writer.write_bits(0, 1)
        write_header(root.left, writer)
        write_header(root.right, writer)


def read_header(reader: BitReader) -> HuffmanNode:
    """Rebuild a tree written by :func:`write_header`.

    Reconstructed nodes have weight 0.

    :param reader: Source bit stream, positioned at the header.
    :type reader: BitReader
    :returns: Root of the reconstructed tree.
    :rtype: HuffmanNode
    :raises TruncatedHeaderError: If the input ends inside the header.
    :raises HuffFormatError: If a leaf value is out of range or the tree is
        deeper than any tree over ``ALPH_SIZE + 1`` symbols can be.
    """
    return _read_node(reader, 0)


def _read_node(reader: BitReader, depth: int) -> HuffmanNode:
    if depth > ALPH_SIZE:
        raise HuffFormatError("Tree header nests deeper than a valid tree")
    try:
        bit = reader.read_bits(1)
        if bit == 1:
            value = reader.read_bits(BITS_PER_WORD + 1)
    except EOFError:
        raise TruncatedHeaderError(
            f"Input ended inside the tree header after {reader.bits_read} bits"
        ) from None

    if bit == 1:
        if value > PSEUDO_EOF:
            raise HuffFormatError(f"Leaf value {value} is out of range")
        return HuffmanNode(value=value)

    left = _read_node(reader, depth + 1)
    right = _read_node(reader, depth + 1)
    return HuffmanNode(left=left, right=right)
