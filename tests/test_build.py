"""End-to-end builds against a temporary project tree."""

import pytest

from mdpress.build import build_site, check_site, render_site
from mdpress.cli import main
from mdpress.errors import ArtifactError, MetadataError, TemplateError


def populate(site):
    site.add("articles", "2024-01-10-first", body="## Context\n\nFirst intro.\n\n## Body\n\nText.\n",
             date="2024-01-10T08:00:00Z", tags=("python",))
    site.add("articles", "second", body="Second *post*.\n", date="2024-02-01T08:00:00Z", tags=("python", "web"))
    site.add("articles", "secret", date="2024-03-01T08:00:00Z", draft=True, tags=("hidden",))


class TestBuildSite:
    def test_writes_pages_indexes_and_artifacts(self, site):
        populate(site)
        site.redirects = {"/old/": "/articles/second.html"}

        result = build_site(site.config())
        out = site.root / "output"

        assert [item.slug for item in result.items] == ["second", "first"]
        assert (out / "articles" / "first.html").is_file()
        assert (out / "articles" / "second.html").is_file()
        assert (out / "articles" / "index.html").is_file()
        assert (out / "index.html").is_file()
        assert (out / "sitemap.xml").is_file()
        assert (out / "feed.xml").is_file()
        assert (out / "old" / "index.html").is_file()

        page = (out / "articles" / "second.html").read_text(encoding="utf-8")
        assert "<p>Second <em>post</em>.</p>" in page
        assert "February 01, 2024" in page
        assert 'href="/articles/second.html"' in page

        index = (out / "index.html").read_text(encoding="utf-8")
        assert index.index("/articles/second.html") < index.index("/articles/first.html")
        assert "<span>python=2</span>" in index

    def test_drafts_are_excluded_everywhere(self, site):
        populate(site)
        build_site(site.config())
        out = site.root / "output"

        assert not (out / "articles" / "secret.html").exists()
        for name in ["index.html", "articles/index.html", "sitemap.xml", "feed.xml"]:
            text = (out / name).read_text(encoding="utf-8")
            assert "secret" not in text
            assert "hidden" not in text

    def test_include_drafts(self, site):
        populate(site)
        result = build_site(site.config(), include_drafts=True)

        assert result.items[0].slug == "secret"
        assert "secret" in (site.root / "output" / "sitemap.xml").read_text(encoding="utf-8")

    def test_hello_world_clean_url(self, site):
        site.site["clean_urls"] = True
        site.content["articles"]["url_pattern"] = "{date}-{stem}"
        site.add("articles", "2025-01-15-hello-world", date="2025-01-15T10:00:00Z")

        [item] = build_site(site.config()).items

        assert item.slug == "hello-world"
        assert (site.root / "output" / "articles" / "2025-01-15-hello-world" / "index.html").is_file()
        sitemap = (site.root / "output" / "sitemap.xml").read_text(encoding="utf-8")
        assert "<loc>https://example.com/articles/2025-01-15-hello-world/</loc>" in sitemap

    def test_rebuild_is_byte_identical(self, site):
        populate(site)
        site.site["asset_hashing_enabled"] = True
        site.site["asset_manifest_path"] = "assets.json"
        (site.root / "static" / "css").mkdir(parents=True)
        (site.root / "static" / "css" / "style.css").write_text("body {}\n", encoding="utf-8")

        build_site(site.config(), workers=4)
        first = site.read_output()
        build_site(site.config(), workers=1)

        assert site.read_output() == first
        assert "assets.json" in first

    def test_asset_hash_filter_and_static_copy(self, site):
        site.site["asset_hashing_enabled"] = True
        site.site["root_static"] = {"robots.txt": "robots.txt"}
        static = site.root / "static"
        (static / "css").mkdir(parents=True)
        (static / "css" / "style.css").write_text("body {}\n", encoding="utf-8")
        (static / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
        site.template("index.html", '<link href="{{ "css/style.css" | asset_hash }}">\n')

        result = build_site(site.config())
        out = site.root / "output"

        hashed = result.manifest["css/style.css"]
        assert f'<link href="{hashed}">' in (out / "index.html").read_text(encoding="utf-8")
        assert (out / hashed.lstrip("/")).is_file()
        assert (out / "static" / "css" / "style.css").is_file()
        assert (out / "robots.txt").read_text(encoding="utf-8") == "User-agent: *\n"

    def test_dynamic_values_reach_templates(self, site):
        site.dynamic = {"github": "ada-l"}
        site.template("index.html", "{{ config.dynamic.github }}\n")

        build_site(site.config())

        assert (site.root / "output" / "index.html").read_text(encoding="utf-8") == "ada-l\n"


class TestFailures:
    def test_template_error_writes_nothing(self, site):
        populate(site)
        site.template("article.html", "{{ meta.title | nosuchfilter }}")

        with pytest.raises(TemplateError):
            build_site(site.config())

        assert not (site.root / "output").exists()

    def test_missing_template(self, site):
        site.add("articles", "post", template="missing.html")
        with pytest.raises(TemplateError) as excinfo:
            build_site(site.config())
        assert "post.md" in str(excinfo.value)

    def test_output_collision(self, site):
        site.add("articles", "2024-01-01-same", date="2024-01-01T00:00:00Z")
        site.add("articles", "2024-02-01-same", date="2024-02-01T00:00:00Z")
        with pytest.raises(MetadataError):
            build_site(site.config())

    def test_sitemap_without_domain(self, site):
        site.site["domain"] = ""
        site.add("articles", "post")
        with pytest.raises(ArtifactError):
            build_site(site.config())
        assert not (site.root / "output").exists()

    def test_domain_optional_when_artifacts_disabled(self, site):
        site.site.update(domain="", sitemap_enabled=False, rss_enabled=False)
        site.add("articles", "post")
        outputs = render_site([], site.config())
        assert "sitemap.xml" not in outputs
        assert "feed.xml" not in outputs


def test_check_site_does_not_write(site):
    populate(site)
    items = check_site(site.config())
    assert len(items) == 2
    assert not (site.root / "output").exists()


class TestCli:
    def test_build_command(self, site, capsys):
        populate(site)
        config_path = site.write_config()

        assert main(["build", "-c", str(config_path)]) == 0

        out = capsys.readouterr().out
        assert "Build completed in" in out
        assert (site.root / "output" / "index.html").is_file()

    def test_check_command(self, site, capsys):
        populate(site)
        assert main(["check", "-c", str(site.write_config()), "--include-drafts"]) == 0
        assert "Checked 3 items." in capsys.readouterr().out

    def test_clean_removes_stale_output(self, site):
        populate(site)
        stale = site.root / "output" / "stale.html"
        stale.parent.mkdir()
        stale.write_text("x", encoding="utf-8")

        assert main(["build", "-c", str(site.write_config()), "--clean"]) == 0
        assert not stale.exists()

    def test_errors_exit_nonzero(self, site, capsys):
        (site.root / "content" / "articles").mkdir()
        (site.root / "content" / "articles" / "orphan.md").write_text("x", encoding="utf-8")

        assert main(["build", "-c", str(site.write_config())]) == 1

        err = capsys.readouterr().err
        assert "orphan.md" in err
        assert "no metadata file found" in err

    def test_guide_needs_no_config(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert main(["guide"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("# mdpress ")
        assert "mdpress check" in out
        assert 'url_pattern = "{year}/{stem}"' in out

    def test_missing_config(self, tmp_path, capsys):
        assert main(["check", "-c", str(tmp_path / "nope.toml")]) == 1
        assert "not found" in capsys.readouterr().err
