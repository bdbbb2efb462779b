from models.folder_models import Folder, FolderCode
from models.memo_models import DEFAULT_TITLE, Memo, coerce_title


def test_coerce_title_replaces_blank_input():
    assert coerce_title("") == DEFAULT_TITLE
    assert coerce_title("   ") == DEFAULT_TITLE
    assert coerce_title(None) == DEFAULT_TITLE
    assert DEFAULT_TITLE == "無題"


def test_coerce_title_keeps_text_verbatim():
    assert coerce_title("  Groceries ") == "  Groceries "


def test_memo_from_dict_uses_wire_keys_and_defaults():
    memo = Memo.from_dict({"id": "m1", "title": "t", "folderId": "f1", "createdUser": "u1"})
    assert memo.id == "m1"
    assert memo.folder_id == "f1"
    assert memo.created_user == "u1"
    assert memo.description == ""

    empty = Memo.from_dict({})
    assert empty.id == ""
    assert empty.folder_id == FolderCode.NONE


def test_memo_mutable_fields_exclude_owner_and_creation_date():
    memo = Memo(id="m1", title="t", description="d", created_user="u1", created_date="2024")
    fields = memo.mutable_fields()
    assert set(fields) == {"title", "description", "folderId", "updatedDate"}


def test_folder_round_trips_through_dict():
    folder = Folder(id="f1", name="仕事", created_user="u1", updated_date="2024-01-01")
    assert Folder.from_dict(folder.to_dict()) == folder
