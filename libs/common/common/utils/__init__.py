from common.utils.json_model import JsonModel, JsonSnakeCaseModel
from common.utils.msgspec import SerializationError, decode_json, encode_json
from common.utils.utils import ContextVarManager, cached_classmethod, deep_merge, get_logger, is_dict, lookup_dotted, use_context_var

__all__ = [
    "ContextVarManager",
    "JsonModel",
    "JsonSnakeCaseModel",
    "SerializationError",
    "cached_classmethod",
    "decode_json",
    "deep_merge",
    "encode_json",
    "get_logger",
    "is_dict",
    "lookup_dotted",
    "use_context_var",
]
