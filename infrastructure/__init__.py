"""宿主适配：配置存储、字段列表与记录取值的约定及实现。"""

from .config_store import JsonConfigStore
from .host import (
    ConfigStore,
    MemoryConfigStore,
    MemoryTable,
    RecordSource,
    SchemaLookup,
    make_getter,
    resolve_field_id,
)
from .tables import load_excel_table, load_json_table, open_table

__all__ = [
    "ConfigStore",
    "JsonConfigStore",
    "MemoryConfigStore",
    "MemoryTable",
    "RecordSource",
    "SchemaLookup",
    "load_excel_table",
    "load_json_table",
    "make_getter",
    "open_table",
    "resolve_field_id",
]
