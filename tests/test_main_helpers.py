def test_default_output_path(m):
    assert m.default_output_path("notes.txt", True) == "notes.txt.hf"
    assert m.default_output_path("notes.txt.hf", False) == "notes.txt.uhf"
    assert m.default_output_path("blob", False) == "blob.uhf"


def test_fmt_pct_and_bytes(m):
    assert m._fmt_pct(0, 0) == "0%"
    assert m._fmt_pct(50, 100).strip().endswith("%")
    assert m._fmt_pct(10, 10).strip().startswith("100")

    assert m._fmt_bytes(0) == "0.00 B"
    assert m._fmt_bytes(1024).endswith("KiB")


def test_file_progress_calls_bucketed(no_progress, m):
    p = m.FileProgress("Compressing", "x.txt")
    p(0, 100)
    p(0, 100)
    p(10, 100)
    p(10, 100)
    p(19, 100)
    p(19, 100)
    p(5, 0)
    assert len(no_progress) == 3
    assert all(line.startswith("Compressing x.txt") for line in no_progress)


def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["compress", "file1", "-o", "out.hf"])
    assert ns.cmd in ("compress", "c")
    assert ns.output == "out.hf" and ns.debug == 0 and not ns.no_progress
    ns2 = parser.parse_args(["d", "in.hf", "-P", "-d", "4"])
    assert ns2.cmd in ("decompress", "d")
    assert ns2.output is None and ns2.no_progress and ns2.debug == 4
