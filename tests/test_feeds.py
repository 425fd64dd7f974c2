import json
from datetime import date, datetime, timezone

from inkpress.content import Post
from inkpress.feeds import (
    SitemapEntry,
    SitemapGenerator,
    TagIndexGenerator,
    create_default_feed_registry,
)
from inkpress.repository import CorpusSnapshot

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
CONFIG = {"site_url": "https://example.com", "base_path": "", "site_name": "Blog"}


def make_post(post_id, post_date, tags):
    return Post(
        id=post_id,
        title=post_id.title(),
        date=post_date,
        read_time="",
        excerpt="",
        tags=tags,
        content_html="<p>Body</p>",
    )


def make_snapshot():
    return CorpusSnapshot.from_posts(
        [
            make_post("older", date(2024, 1, 1), ["AI"]),
            make_post("newer", date(2024, 3, 1), ["ai", "Machine Learning"]),
        ]
    )


def test_sitemap_entry_to_xml():
    entry = SitemapEntry("https://example.com/?a=1&b=2", "2024-01-01", "weekly", 1)
    assert entry.to_xml() == (
        "  <url><loc>https://example.com/?a=1&amp;b=2</loc><lastmod>2024-01-01</lastmod>"
        "<changefreq>weekly</changefreq><priority>1.0</priority></url>"
    )


def test_sitemap_lists_routes_posts_and_tags():
    content = SitemapGenerator(NOW).generate(make_snapshot(), CONFIG)
    assert content.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<urlset')
    assert content.endswith("</urlset>\n")
    locs = [line.split("<loc>")[1].split("</loc>")[0] for line in content.splitlines() if "<loc>" in line]
    assert locs == [
        "https://example.com/",
        "https://example.com/tags/",
        "https://example.com/blog/newer/",
        "https://example.com/blog/older/",
        "https://example.com/tags/machine-learning/",
        "https://example.com/tags/ai/",
    ]
    assert (
        "<loc>https://example.com/blog/older/</loc><lastmod>2024-01-01</lastmod>"
        "<changefreq>monthly</changefreq><priority>0.8</priority>"
    ) in content
    assert (
        "<loc>https://example.com/tags/ai/</loc><lastmod>2024-06-01</lastmod>"
        "<changefreq>weekly</changefreq><priority>0.6</priority>"
    ) in content
    assert "<priority>1.0</priority>" in content
    assert "<priority>0.7</priority>" in content


def test_sitemap_honours_base_path():
    config = dict(CONFIG, base_path="/blog-root/")
    entries = SitemapGenerator(NOW).entries(make_snapshot(), config)
    assert entries[0].loc == "https://example.com/blog-root/"
    assert entries[2].loc == "https://example.com/blog-root/blog/newer/"


def test_sitemap_skipped_without_site_url(tmp_path):
    generator = SitemapGenerator(NOW)
    assert generator.generate(make_snapshot(), {"site_url": ""}) is None
    assert generator.write(tmp_path, make_snapshot(), {"site_url": ""}) is False
    assert not (tmp_path / "sitemap.xml").exists()


def test_tag_index_generator():
    payload = json.loads(TagIndexGenerator().generate(make_snapshot(), CONFIG))
    assert payload == [
        {
            "name": "Machine Learning",
            "slug": "machine-learning",
            "url": "https://example.com/tags/machine-learning/",
            "count": 1,
            "posts": ["newer"],
        },
        {
            "name": "ai",
            "slug": "ai",
            "url": "https://example.com/tags/ai/",
            "count": 2,
            "posts": ["newer", "older"],
        },
    ]


def test_default_registry_writes_feeds(tmp_path):
    registry = create_default_feed_registry(NOW)
    generated = registry.generate_all(tmp_path, make_snapshot(), CONFIG)
    assert generated == ["sitemap.xml", "tags.json"]
    assert (tmp_path / "sitemap.xml").read_text(encoding="utf-8").endswith("</urlset>\n")

    local_only = tmp_path / "local"
    local_only.mkdir()
    assert registry.generate_all(local_only, make_snapshot(), {"site_url": ""}) == ["tags.json"]
