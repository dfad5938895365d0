"""Tests for the plain-tree and archive-tree parsers."""

import pytest

from mindmap_outline import (
    AssetStore,
    ParseError,
    ParseErrorKind,
    parse_archive_tree,
    parse_plain_tree,
)

# --- plain tree -------------------------------------------------------------


def test_plain_tree_inside_map_element():
    root = parse_plain_tree('<map version="1.0.1"><node TEXT="Root"><node TEXT="A"/></node></map>')
    assert root.title == "Root"
    assert [c.title for c in root.children] == ["A"]


def test_plain_tree_children_in_source_order():
    root = parse_plain_tree(
        '<map><node TEXT="R"><node TEXT="1"/><node TEXT="2"/><node TEXT="3"/></node></map>'
    )
    assert [c.title for c in root.children] == ["1", "2", "3"]


def test_plain_tree_direct_children_only():
    root = parse_plain_tree(
        '<map><node TEXT="R">'
        '<node TEXT="A"><node TEXT="A1"><node TEXT="A1a"/></node></node>'
        '</node></map>'
    )
    assert [c.title for c in root.children] == ["A"]
    assert [c.title for c in root.children[0].children] == ["A1"]


def test_plain_tree_rich_content_title():
    root = parse_plain_tree(
        '<map><node><richcontent TYPE="NODE"><html><body><p>  Hello  </p></body></html>'
        '</richcontent></node></map>'
    )
    assert root.title == "Hello"


def test_plain_tree_blank_rich_content():
    root = parse_plain_tree('<map><node><richcontent TYPE="NODE">   </richcontent></node></map>')
    assert root.title == "[Empty]"


def test_plain_tree_missing_text():
    root = parse_plain_tree('<map><node TEXT="R"><node/></node></map>')
    assert root.children[0].title == "[No Text]"


def test_plain_tree_note_is_not_title():
    root = parse_plain_tree(
        '<map><node><richcontent TYPE="NOTE"><p>a note</p></richcontent></node></map>'
    )
    assert root.title == "[No Text]"


def test_plain_tree_leaf_images():
    root = parse_plain_tree(
        '<map><node TEXT="R"><node TEXT="Pic">'
        '<richcontent TYPE="NODE"><html><body>'
        '<img src="images/a.png"/><img src="images/b.png"/>'
        '</body></html></richcontent>'
        '</node></node></map>'
    )
    leaf = root.children[0]
    assert leaf.title == "Pic"
    assert leaf.image_ref == "![image](images/a.png) ![image](images/b.png)"


def test_plain_tree_branch_images_ignored():
    root = parse_plain_tree(
        '<map><node TEXT="R"><node TEXT="Branch">'
        '<richcontent TYPE="NODE"><html><body><img src="x.png"/></body></html></richcontent>'
        '<node TEXT="Leaf"/>'
        '</node></node></map>'
    )
    assert root.children[0].image_ref is None


@pytest.mark.parametrize("text", ["<map/>", "<map><other/></map>", "<map"])
def test_plain_tree_no_root(text):
    with pytest.raises(ParseError) as exc:
        parse_plain_tree(text)
    assert exc.value.kind == ParseErrorKind.NO_ROOT_NODE


# --- archive tree -----------------------------------------------------------


def test_archive_tree(vault, make_xmind):
    store = AssetStore(vault)
    root, resources = parse_archive_tree(make_xmind(), "maps/plan.xmind", store)

    assert root.title == "Root"
    assert root.image_ref is None
    assert set(resources) == {"pic.png", "leaf.jpg"}

    branch, missing = root.children
    assert branch.title == "Branch"
    assert branch.image_ref == resources["pic.png"]
    assert branch.children[0].title == "Leaf"
    assert branch.children[0].image_ref == resources["leaf.jpg"]

    # Not in the archive: silently no image
    assert missing.title == "Missing"
    assert missing.image_ref is None


def test_archive_tree_untitled_and_plain_img(vault, make_xmind):
    content = (
        '<xmap-content><sheet><topic><title>Root</title><children><topics type="attached">'
        '<topic><img src="xap:resources/pic.png"/></topic>'
        '<topic><title></title><img src="http://example.com/x.png"/></topic>'
        '</topics></children></topic></sheet></xmap-content>'
    )
    root, resources = parse_archive_tree(make_xmind(content), "plan.xmind", AssetStore(vault))
    first, second = root.children
    assert first.title == "[Untitled]"
    assert first.image_ref == resources["pic.png"]
    assert second.title == "[Untitled]"
    assert second.image_ref is None


def test_archive_tree_branch_does_not_borrow_child_image(vault, make_xmind):
    content = (
        '<xmap-content><sheet><topic><title>Root</title><children><topics>'
        '<topic><title>Branch</title><children><topics>'
        '<topic><title>Leaf</title><img src="xap:resources/pic.png"/></topic>'
        '</topics></children></topic>'
        '</topics></children></topic></sheet></xmap-content>'
    )
    root, _ = parse_archive_tree(make_xmind(content), "plan.xmind", AssetStore(vault))
    branch = root.children[0]
    assert branch.image_ref is None
    assert branch.children[0].image_ref is not None


def test_archive_tree_includes_detached_topics(vault, make_xmind):
    content = (
        '<xmap-content><sheet><topic><title>Root</title><children>'
        '<topics type="attached"><topic><title>A</title></topic></topics>'
        '<topics type="detached"><topic><title>Floating</title></topic></topics>'
        '</children></topic></sheet></xmap-content>'
    )
    root, _ = parse_archive_tree(make_xmind(content, {}), "plan.xmind", AssetStore(vault))
    assert [c.title for c in root.children] == ["A", "Floating"]


def test_invalid_archive(vault):
    with pytest.raises(ParseError) as exc:
        parse_archive_tree(b"not a zip file", "plan.xmind", AssetStore(vault))
    assert exc.value.kind == ParseErrorKind.INVALID_ARCHIVE


def test_missing_content_entry_keeps_extracted_assets(tmp_path, vault, make_xmind):
    store = AssetStore(vault)
    with pytest.raises(ParseError) as exc:
        parse_archive_tree(make_xmind(content=None), "plan.xmind", store)
    assert exc.value.kind == ParseErrorKind.NO_CONTENT_ENTRY

    # Resources are extracted before content.xml is looked up
    written = store.ledger.paths_for("plan.xmind")
    assert len(written) == 2
    assert all((tmp_path / p).exists() for p in written)


@pytest.mark.parametrize(
    "content, kind",
    [
        ("<xmap-content/>", ParseErrorKind.NO_SHEET),
        ("<xmap-content", ParseErrorKind.NO_SHEET),
        ("<xmap-content><sheet><title>x</title></sheet></xmap-content>", ParseErrorKind.NO_ROOT_TOPIC),
    ],
)
def test_archive_structure_errors(vault, make_xmind, content, kind):
    with pytest.raises(ParseError) as exc:
        parse_archive_tree(make_xmind(content, {}), "plan.xmind", AssetStore(vault))
    assert exc.value.kind == kind


def test_damaged_content_entry(vault, damaged_xmind):
    with pytest.raises(ParseError) as exc:
        parse_archive_tree(damaged_xmind, "plan.xmind", AssetStore(vault))
    assert exc.value.kind == ParseErrorKind.INVALID_ARCHIVE
