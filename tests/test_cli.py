from datetime import date

import yaml
from click.testing import CliRunner

from inkpress import __version__
from inkpress.build import BuildError
from inkpress.cli import cli


def create_project(root):
    posts = root / "posts"
    posts.mkdir()
    (posts / "first.md").write_text(
        "---\ntitle: First\ndate: 2024-01-01\ntags: [AI]\n---\n\nFirst body.\n",
        encoding="utf-8",
    )
    (posts / "second.md").write_text(
        "---\ntitle: Second\ndate: 2024-03-01\ntags: [ai, Python]\n"
        "references:\n  1: https://example.com/a\n---\n\nSee [1].\n",
        encoding="utf-8",
    )
    (posts / "_draft.md").write_text(
        "---\ntitle: Draft\ndate: 2024-05-01\n---\n\nWIP\n", encoding="utf-8"
    )


def mock_prompts(monkeypatch, responses):
    answers = iter(responses)

    class MockQuestion:
        def ask(self):
            return next(answers)

    def mock_prompt(*args, **kwargs):
        return MockQuestion()

    monkeypatch.setattr("inkpress.cli.questionary.text", mock_prompt)
    monkeypatch.setattr("inkpress.cli.questionary.confirm", mock_prompt)


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_build(monkeypatch, tmp_path):
    create_project(tmp_path)
    (tmp_path / "inkpress.yaml").write_text("site_url: https://example.com\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 2 posts and 2 tag pages" in result.output
    assert "Feeds: sitemap.xml, tags.json" in result.output
    assert (tmp_path / "output" / "blog" / "second" / "index.html").exists()


def test_cli_build_options(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(
        cli, ["build", "--drafts", "--output", "public", "--base-path", "/sub"]
    )
    assert result.exit_code == 0
    assert "Built 3 posts" in result.output
    assert "Feeds: tags.json" in result.output
    home = (tmp_path / "public" / "index.html").read_text(encoding="utf-8")
    assert 'href="/sub/blog/draft/"' in home


def test_cli_build_failure(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)

    def failing_build_site(*args, **kwargs):
        raise BuildError(tmp_path / "posts" / "first.md", "Undefined variable: nope")

    monkeypatch.setattr("inkpress.build.build_site", failing_build_site)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "posts/first.md" in result.output
    assert "Undefined variable: nope" in result.output


def test_cli_build_without_posts_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Expected posts directory" in result.output


def test_cli_list(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines == [
        "2024-03-01  second  Second  #ai #Python",
        "2024-01-01  first  First  #AI",
    ]

    result = runner.invoke(cli, ["list", "--tag", "AI"])
    assert [line.split()[1] for line in result.output.splitlines()] == ["second", "first"]

    result = runner.invoke(cli, ["list", "--drafts"])
    assert result.output.splitlines()[0] == "2024-05-01  draft  Draft [draft]"


def test_cli_list_reports_skipped_documents(monkeypatch, tmp_path):
    create_project(tmp_path)
    (tmp_path / "posts" / "broken.md").write_text("---\ndate: nope\n---\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "Skipped broken.md: title:" in result.output
    assert "second  Second" in result.output


def test_cli_tags(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["tags"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["Python (1)", "ai (2)"]


def test_cli_show(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["show", "second"])
    assert result.exit_code == 0
    assert 'class="citation-link">[1]</a>' in result.output

    result = runner.invoke(cli, ["show", "missing"])
    assert result.exit_code == 1
    assert "missing: no such post" in result.output

    assert runner.invoke(cli, ["show", "draft"]).exit_code == 1
    assert runner.invoke(cli, ["show", "draft", "--drafts"]).exit_code == 0


def test_cli_commands_require_posts_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["list"])
    assert result.exit_code == 1
    assert "No posts directory found" in result.output


def test_cli_sitemap(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["sitemap"])
    assert result.exit_code == 1
    assert "No site_url configured" in result.output

    result = runner.invoke(cli, ["sitemap", "--site-url", "https://example.com"])
    assert result.exit_code == 0
    assert "<loc>https://example.com/blog/second/</loc>" in result.output
    assert "<loc>https://example.com/tags/python/</loc>" in result.output
    assert "/blog/draft/" not in result.output


def test_cli_post_creates_file(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    mock_prompts(monkeypatch, ["My New Post", "AI, Python ,", False])

    result = CliRunner().invoke(cli, ["post"], catch_exceptions=False)
    assert result.exit_code == 0
    target = tmp_path / "posts" / "my-new-post.md"
    assert target.exists()
    assert "Created posts/my-new-post.md" in result.output

    text = target.read_text(encoding="utf-8")
    assert text.startswith("---\n")
    frontmatter = yaml.safe_load(text.split("---\n")[1])
    assert frontmatter["title"] == "My New Post"
    assert frontmatter["date"] == date.today().isoformat()
    assert frontmatter["tags"] == ["AI", "Python"]


def test_cli_post_creates_draft(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    mock_prompts(monkeypatch, ["Work in progress", "", True])

    result = CliRunner().invoke(cli, ["post"], catch_exceptions=False)
    assert result.exit_code == 0
    assert (tmp_path / "posts" / "_work-in-progress.md").exists()


def test_cli_post_duplicate_detection(monkeypatch, tmp_path):
    create_project(tmp_path)
    monkeypatch.chdir(tmp_path)
    mock_prompts(monkeypatch, ["Draft", "", False])

    result = CliRunner().invoke(cli, ["post"])
    assert result.exit_code == 1
    assert "already exists: _draft.md" in result.output
    assert not (tmp_path / "posts" / "draft.md").exists()


def test_cli_post_cancelled(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    mock_prompts(monkeypatch, [None])
    result = CliRunner().invoke(cli, ["post"])
    assert result.exit_code == 1
    assert not (tmp_path / "posts").exists()


def test_module_main_entrypoint():
    from inkpress.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import inkpress.cli as cli_mod

    called = {}

    def fake_cli():
        called["ran"] = True

    monkeypatch.setattr(cli_mod, "cli", fake_cli)
    cli_mod.main()
    assert called["ran"]
