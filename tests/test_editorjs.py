"""Tests for blog block rendering."""
import json

from academy_web.services.editorjs import RENDERERS, render_block, render_content


def document(*blocks):
    return {"time": 1717000000000, "blocks": list(blocks), "version": "2.29.1"}


def test_renders_blocks_in_order():
    html = render_content(document(
        {"type": "header", "data": {"text": "Summer camp", "level": 3}},
        {"type": "paragraph", "data": {"text": "Registration is <b>open</b>."}},
        {"type": "delimiter", "data": {}},
    ))

    assert html.split("\n") == [
        '<h3 class="font-bold my-4 text-2xl">Summer camp</h3>',
        '<p class="mb-4 leading-relaxed">Registration is <b>open</b>.</p>',
        '<hr class="my-8">',
    ]


def test_accepts_json_string():
    content = json.dumps(document({"type": "paragraph", "data": {"text": "Hello"}}))

    assert render_content(content) == '<p class="mb-4 leading-relaxed">Hello</p>'


def test_header_level_out_of_range_falls_back_to_h2():
    assert render_block({"type": "header", "data": {"text": "T", "level": 9}}).startswith("<h2")


def test_image_escapes_attributes_and_caption():
    html = render_block({
        "type": "image",
        "data": {"file": {"url": "https://cdn.example.com/a.jpg?x=1&y=2"}, "caption": 'Coach "Sam" <3'},
    })

    assert 'src="https://cdn.example.com/a.jpg?x=1&amp;y=2"' in html
    assert "alt=\"Coach &quot;Sam&quot; &lt;3\"" in html
    assert "<figcaption" in html


def test_image_without_caption_uses_default_alt():
    html = render_block({"type": "image", "data": {"file": {"url": "/a.jpg"}}})

    assert 'alt="Blog image"' in html
    assert "figcaption" not in html


def test_lists():
    ordered = render_block({"type": "list", "data": {"style": "ordered", "items": ["One", "Two"]}})
    nested = render_block({"type": "list", "data": {"style": "unordered", "items": [{"content": "Serve", "items": []}]}})

    assert ordered.startswith("<ol") and "<li>One</li><li>Two</li>" in ordered
    assert nested.startswith("<ul") and "<li>Serve</li>" in nested


def test_checklist_marks_checked_items():
    html = render_block({
        "type": "checklist",
        "data": {"items": [{"text": "Racket", "checked": True}, {"text": "Water", "checked": False}]},
    })

    assert '<input type="checkbox" disabled checked> Racket' in html
    assert '<input type="checkbox" disabled> Water' in html


def test_unknown_blocks_are_dropped():
    html = render_content(document(
        {"type": "warning", "data": {"title": "?"}},
        {"type": "paragraph", "data": {"text": "Kept"}},
        "not a block",
    ))

    assert html == '<p class="mb-4 leading-relaxed">Kept</p>'


def test_unparseable_string_is_escaped():
    assert render_content("<script>x</script>") == (
        '<div class="prose lg:prose-xl max-w-none">&lt;script&gt;x&lt;/script&gt;</div>'
    )


def test_content_without_blocks():
    assert render_content(None) == '<div class="prose lg:prose-xl max-w-none"></div>'
    assert render_content({"text": "a"}).startswith('<div class="prose')


def test_inline_markup_is_cleaned():
    html = render_block({
        "type": "paragraph",
        "data": {"text": 'Hi <script>alert(1)</script><a href="javascript:alert(1)">x</a> <i>ok</i>'},
    })

    assert "<script" not in html
    assert "javascript:" not in html
    assert "<i>ok</i>" in html


def test_unsafe_sources_are_dropped():
    image = render_block({"type": "image", "data": {"file": {"url": "javascript:alert(1)"}}})
    embed = render_block({"type": "embed", "data": {"embed": " JavaScript:alert(1)"}})

    assert image == ""
    assert embed == ""


def test_tolerates_odd_block_data():
    html = render_content(document(
        {"type": "embed", "data": {"embed": "https://www.youtube.com/embed/x", "width": "100%", "height": None}},
        {"type": "checklist", "data": {"items": ["Racket", {"text": "Water", "checked": True}]}},
        {"type": "image", "data": {"file": "https://cdn.example.com/b.jpg"}},
        {"type": "list", "data": {"items": "not a list"}},
        {"type": "paragraph", "data": "not an object"},
    ))

    assert 'width="580" height="320"' in html
    assert '<input type="checkbox" disabled> Racket' in html
    assert '<input type="checkbox" disabled checked> Water' in html
    assert 'src="https://cdn.example.com/b.jpg"' in html
    assert '<p class="mb-4 leading-relaxed"></p>' in html


def test_failing_block_is_skipped(monkeypatch):
    def broken(data):
        raise TypeError("bad block")

    monkeypatch.setitem(RENDERERS, "quote", broken)

    html = render_content(document(
        {"type": "quote", "data": {"text": "x"}},
        {"type": "paragraph", "data": {"text": "Kept"}},
    ))

    assert html == '<p class="mb-4 leading-relaxed">Kept</p>'
