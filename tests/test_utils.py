from pathlib import Path

from inkpress import utils
from inkpress.html_utils import escape_html, join_root_url, site_root


def test_tag_url_scheme():
    assert utils.tag_segment("Machine  Learning") == "machine-learning"
    assert utils.tag_slug("C++ Tips") == "c%2B%2B-tips"
    assert utils.tag_url("AI") == "tags/ai"
    assert utils.tag_url("Deep Learning") == "tags/deep-learning"
    assert utils.tag_path("Deep Learning") == "/tags/deep-learning/"
    assert utils.post_path("hello-world") == "/blog/hello-world/"


def test_tag_key_ignores_case_and_whitespace_runs():
    assert utils.tag_key("AI") == utils.tag_key("ai")
    assert utils.tag_key(" Machine   Learning ") == "machine learning"
    assert utils.tag_key("machine-learning") != utils.tag_key("machine learning")


def test_segment_from_slug_and_titleize():
    assert utils.segment_from_slug("c%2B%2B-tips") == "c++-tips"
    assert utils.segment_from_slug("Deep-Learning") == "deep-learning"
    assert utils.titleize_tag("machine-learning") == "Machine Learning"
    assert utils.titleize_tag("ai") == "Ai"
    assert utils.titleize_tag("large language models") == "Large Language Models"


def test_post_ids_and_paths():
    assert utils.post_id_from_path(Path("posts/hello-world.md")) == "hello-world"
    assert utils.post_id_from_path(Path("posts/_upcoming.md")) == "upcoming"
    assert utils.is_markdown(Path("a.MD"))
    assert not utils.is_markdown(Path("a.txt"))
    assert utils.is_draft(Path("posts/_upcoming.md"))
    assert not utils.is_draft(Path("posts/upcoming.md"))
    assert utils.slugify("Hello, World!") == "hello-world"
    assert utils.slugify("!!!") == "untitled"


def test_ensure_clean_dir(tmp_path):
    target = tmp_path / "build"
    (target / "nested").mkdir(parents=True)
    (target / "old.txt").write_text("old", encoding="utf-8")
    (target / "nested" / "deep.txt").write_text("old", encoding="utf-8")
    utils.ensure_clean_dir(target)
    assert target.is_dir()
    assert list(target.iterdir()) == []

    fresh = tmp_path / "fresh" / "dir"
    utils.ensure_clean_dir(fresh)
    assert fresh.is_dir()


def test_html_helpers():
    assert escape_html('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"
    assert join_root_url("https://example.com/", "/about") == "https://example.com/about"
    assert join_root_url("https://example.com", "about") == "https://example.com/about"
    assert join_root_url("", "about") == "/about"
    assert site_root("https://example.com/", "/blog/") == "https://example.com/blog"
    assert site_root("https://example.com", "") == "https://example.com"
