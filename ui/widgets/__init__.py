from .memo_list import MemoListWidget
from .upsert_form import UpsertFormWidget

__all__ = [
    "MemoListWidget",
    "UpsertFormWidget",
]
