from __future__ import annotations

from pathlib import Path

from blogsite.posts import Post, parse_front_matter, parse_post, slug_from_path, split_front_matter


def test_front_matter_round_trip() -> None:
    raw = '---\ntitle: "Hi"\ndate: "2024-01-01"\n---\nHello'
    post = parse_post(Path("posts/hi.md"), raw)
    assert post == Post(
        title="Hi",
        slug="hi",
        date="2024-01-01",
        excerpt="",
        html_content="<p>Hello</p>\n",
    )


def test_missing_leading_delimiter_is_not_a_post() -> None:
    assert parse_post("hello.md", "Hello\nworld") is None


def test_empty_file_is_not_a_post() -> None:
    assert parse_post("empty.md", "") is None


def test_delimiter_must_match_exactly() -> None:
    assert parse_post("a.md", " ---\ntitle: x\n---\n") is None
    assert parse_post("a.md", "----\ntitle: x\n---\n") is None


def test_title_keeps_unicode_line_separators() -> None:
    post = parse_post("p.md", '---\ntitle: "A\x85B"\n---\nx\u2028y\n')
    assert post is not None
    assert post.title == "A\x85B"
    assert post.html_content == "<p>x\u2028y</p>\n"


def test_windows_line_endings() -> None:
    post = parse_post("win.md", '---\r\ntitle: "Win"\r\n---\r\nBody\r\n')
    assert post is not None
    assert post.title == "Win"
    assert post.html_content == "<p>Body</p>\n"


def test_unclosed_front_matter_has_empty_body() -> None:
    post = parse_post("open.md", '---\ntitle: "Open"\n# not body')
    assert post is not None
    assert post.title == "Open"
    assert post.html_content == ""


def test_split_front_matter() -> None:
    assert split_front_matter("---\na: b\n---\nx\ny") == (["a: b"], ["x", "y"])
    assert split_front_matter("---\n---") == ([], [])
    assert split_front_matter("nope") is None


def test_unknown_keys_ignored_and_missing_default_to_empty() -> None:
    metadata = parse_front_matter(["author: Someone", "tags: [a, b]", 'excerpt: "Short"'])
    assert metadata == {"title": "", "date": "", "excerpt": "Short"}


def test_last_duplicate_key_wins() -> None:
    metadata = parse_front_matter(['title: "First"', 'title: "Second"'])
    assert metadata["title"] == "Second"


def test_quote_stripping_is_literal() -> None:
    metadata = parse_front_matter([
        "title: Unquoted",
        'date: "2024-02-03',
        'excerpt: "He said \\"hi\\""',
    ])
    assert metadata["title"] == "Unquoted"
    assert metadata["date"] == "2024-02-03"
    assert metadata["excerpt"] == 'He said \\"hi\\"'


def test_prefix_requires_space_after_colon() -> None:
    assert parse_front_matter(["title:NoSpace"])["title"] == ""


def test_slug_from_filename_stem() -> None:
    assert slug_from_path(Path("posts/my-first-post.md")) == "my-first-post"
    assert slug_from_path("notes.draft.md") == "notes.draft"


def test_slug_defaults_to_untitled() -> None:
    assert slug_from_path("") == "untitled"


def test_body_is_rendered() -> None:
    raw = "---\ntitle: T\n---\n# Heading\n\n- item\n```\n<code>\n```\n"
    post = parse_post("t.md", raw)
    assert post is not None
    assert post.html_content == (
        "<h1>Heading</h1>\n<li>item</li>\n<pre><code>&lt;code&gt;\n</code></pre>\n"
    )


def test_summary_omits_html_content() -> None:
    post = Post(title="T", slug="t", date="2024", excerpt="E", html_content="<p>x</p>\n")
    assert post.summary() == {"title": "T", "slug": "t", "date": "2024", "excerpt": "E"}
