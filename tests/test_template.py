from pathlib import Path

from margin.session import RenderSession
from margin.template import BODY_TOKEN, build_template_shell, directory_base_href


def test_base_href_points_at_source_directory(tmp_path):
    source = tmp_path / "notes" / "a.md"
    source.parent.mkdir()
    source.write_text("x", encoding="utf-8")
    href = directory_base_href(source)
    assert href.startswith("file://")
    assert href.endswith("/notes/")
    assert href == f"{source.parent.resolve().as_uri()}/"


def test_shell_structure(tmp_path):
    shell = build_template_shell(tmp_path / "doc.md", tmp_path / "assets")
    text = shell.text
    assert text.startswith("<!DOCTYPE html>")
    assert '<meta charset="utf-8"/>' in text
    assert 'http-equiv="X-UA-Compatible"' in text
    assert f'<base href="{shell.base_href}"/>' in text
    assert f'<link rel="stylesheet" href="{shell.stylesheet_href}"/>' in text
    assert f'<script src="{shell.script_href}" async defer></script>' in text
    assert text.count(BODY_TOKEN) == 1
    assert text.index(BODY_TOKEN) < text.index("<script")


def test_assets_resolve_against_install_dir(tmp_path):
    shell = build_template_shell(tmp_path / "doc.md", tmp_path / "install", "style.css", "hl.js")
    assert shell.stylesheet_href == (tmp_path / "install" / "style.css").resolve().as_uri()
    assert shell.script_href == (tmp_path / "install" / "hl.js").resolve().as_uri()


def test_missing_assets_still_compose(tmp_path):
    shell = build_template_shell(tmp_path / "doc.md", tmp_path / "does-not-exist")
    html_doc = shell.compose("<p>hello</p>")
    assert "<p>hello</p>" in html_doc
    assert BODY_TOKEN not in html_doc


def test_compose_fills_single_substitution_point(tmp_path):
    shell = build_template_shell(tmp_path / "doc.md", tmp_path)
    first = shell.compose("<p>one</p>")
    second = shell.compose("<p>two</p>")
    assert "<p>one</p>" in first and "<p>one</p>" not in second
    assert first.replace("<p>one</p>", "") == second.replace("<p>two</p>", "")


def test_body_containing_token_is_not_re_expanded(tmp_path):
    shell = build_template_shell(tmp_path / "doc.md", tmp_path)
    html_doc = shell.compose(f"<code>{BODY_TOKEN}</code>")
    assert html_doc.count(BODY_TOKEN) == 1


def test_title_is_escaped(tmp_path):
    shell = build_template_shell(tmp_path / "a<b>.md", tmp_path)
    assert "<title>a&lt;b&gt;.md</title>" in shell.text


def test_session_builds_shell_once(tmp_path):
    source = tmp_path / "doc.md"
    session = RenderSession.for_file(source, tmp_path / "assets")
    assert session.source_path == Path(source)
    assert session.shell.base_href == directory_base_href(source)
    assert session.shell is session.shell
