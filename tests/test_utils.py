from bson import ObjectId

from app.core.utils import get_excerpt_from_content, to_object_id


def test_short_content_is_its_own_excerpt():
    assert get_excerpt_from_content("Short text") == "Short text"


def test_excerpt_cut_on_word_boundary():
    content = "alpha beta gamma delta"

    assert get_excerpt_from_content(content, max_length=12) == "alpha beta..."


def test_excerpt_without_spaces():
    assert get_excerpt_from_content("x" * 200, max_length=150) == "x" * 150 + "..."


def test_to_object_id():
    oid = ObjectId()

    assert to_object_id(str(oid)) == oid
    assert to_object_id(oid) is oid
    assert to_object_id("not-an-id") is None
    assert to_object_id(None) is None
