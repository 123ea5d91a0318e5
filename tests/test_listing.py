import os

from listing import Entry, list_directory, read_entries, render_listing, sort_entries


def test_directories_first_keeps_read_order():
    entries = [Entry("fileB", False, 3.0), Entry("dirA", True, 2.0), Entry("fileA", False, 1.0)]
    names = [e.name for e in sort_entries(entries)]
    assert names == ["dirA", "fileB", "fileA"]


def test_date_sort_oldest_first_then_directories_first():
    entries = [
        Entry("new.txt", False, 30.0),
        Entry("newdir", True, 40.0),
        Entry("old.txt", False, 10.0),
        Entry("olddir", True, 5.0),
    ]
    names = [e.name for e in sort_entries(entries, "date")]
    assert names == ["olddir", "newdir", "old.txt", "new.txt"]


def test_unknown_sort_mode_is_ignored():
    entries = [Entry("b", False, 2.0), Entry("a", False, 1.0)]
    assert [e.name for e in sort_entries(entries, "size")] == ["b", "a"]


def test_render_empty_directory():
    assert render_listing("filesystem/public/", []) == "filesystem/public/\n\n0 directories, 0 files\n"


def test_render_tree_and_pluralization():
    out = render_listing("filesystem/", [
        Entry("docs", True, 0.0),
        Entry("a.txt", False, 0.0),
        Entry("b.txt", False, 0.0),
    ])
    assert out == (
        "filesystem/\n"
        "├── docs/\n"
        "├── a.txt\n"
        "└── b.txt\n"
        "\n"
        "1 directory, 2 files\n"
    )


def test_render_single_file():
    out = render_listing("x/", [Entry("only", False, 0.0)])
    assert out.splitlines()[1] == "└── only"
    assert out.endswith("0 directories, 1 file\n")


def test_read_entries_filters_private(tmp_path):
    (tmp_path / "secret").mkdir()
    (tmp_path / "open").mkdir()
    (tmp_path / "f.txt").write_text("x")
    private = frozenset({str(tmp_path / "secret")})

    names = sorted(e.name for e in read_entries(str(tmp_path), private))
    assert names == ["f.txt", "open"]

    names = sorted(e.name for e in read_entries(str(tmp_path)))
    assert names == ["f.txt", "open", "secret"]


def test_list_directory_by_date(tmp_path):
    for name, ts in (("c.txt", 300), ("a.txt", 100), ("b.txt", 200)):
        p = tmp_path / name
        p.write_text(name)
        os.utime(p, (ts, ts))
    (tmp_path / "sub").mkdir()

    out = list_directory(str(tmp_path), "root/", sort="date")
    assert out.splitlines()[1:5] == ["├── sub/", "├── a.txt", "├── b.txt", "└── c.txt"]
    assert out.endswith("1 directory, 3 files\n")
