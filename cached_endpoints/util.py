import dataclasses
import json
from typing import Any, Mapping, Type


def clamp(value, min, max):
    return sorted((min, value, max))[1]


def canonical_json(value: Any) -> str:
    """
    Serialize `value` so that equal values always produce equal strings.

    Mapping keys are sorted and anything JSON does not know about (bytes, dates, enums) falls back to `str()`.
    """
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode('utf-8', errors='replace')
    return json.dumps(value, sort_keys=True, default=str, separators=(',', ':'))


def merge_headers(*layers: Mapping[str, str]) -> dict:
    """
    Merge header mappings left to right, later layers winning.

    Header names are case-insensitive, so a later `content-type` replaces an earlier `Content-Type` instead of sitting
    beside it.
    """
    merged = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
    return merged


class DataclassJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        return super().default(o)


class DataclassJSONDecoder(json.JSONDecoder):
    def __init__(self, class_type: Type, **kwargs) -> None:
        super().__init__(**kwargs)
        self.__class_type = class_type

    def decode(self, s):
        result = super().decode(s)
        return self.__class_type(**result)
