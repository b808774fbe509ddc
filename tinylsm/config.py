"""Engine configuration loaded from, and saved to, a TOML file."""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from dataclasses import dataclass
from typing import Any, ClassVar

import tomli_w

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.toml"


@dataclass(frozen=True)
class _Field:
    """Where one setting lives in the TOML document and what type it has."""

    attr: str
    section: tuple[str, ...]
    key: str
    kind: str  # "int", "float", "str" or "char"

    def read(self, document: dict[str, Any]) -> Any:
        table: Any = document
        for name in self.section:
            table = table[name]
            if not isinstance(table, dict):
                raise TypeError(f"[{'.'.join(self.section)}] is not a table")
        value = table[self.key]
        if self.kind == "int":
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{self.key} must be an integer")
            return value
        if self.kind == "float":
            if not isinstance(value, float):
                raise TypeError(f"{self.key} must be a floating point number")
            return value
        if not isinstance(value, str):
            raise TypeError(f"{self.key} must be a string")
        if self.kind == "char":
            if not value:
                raise ValueError(f"{self.key} must not be empty")
            return value[0]
        return value

    def write(self, document: dict[str, Any], value: Any) -> None:
        table = document
        for name in self.section:
            table = table.setdefault(name, {})
        table[self.key] = value


_FIELDS: tuple[_Field, ...] = (
    _Field("lsm_tol_mem_size_limit", ("lsm", "core"), "LSM_TOL_MEM_SIZE_LIMIT", "int"),
    _Field("lsm_per_mem_size_limit", ("lsm", "core"), "LSM_PER_MEM_SIZE_LIMIT", "int"),
    _Field("lsm_block_size", ("lsm", "core"), "LSM_BLOCK_SIZE", "int"),
    _Field("lsm_sst_level_ratio", ("lsm", "core"), "LSM_SST_LEVEL_RATIO", "int"),
    _Field("lsm_block_cache_capacity", ("lsm", "cache"), "LSM_BLOCK_CACHE_CAPACITY", "int"),
    _Field("lsm_block_cache_k", ("lsm", "cache"), "LSM_BLOCK_CACHE_K", "int"),
    _Field("redis_expire_header", ("redis",), "REDIS_EXPIRE_HEADER", "str"),
    _Field("redis_hash_value_preffix", ("redis",), "REDIS_HASH_VALUE_PREFFIX", "str"),
    _Field("redis_field_prefix", ("redis",), "REDIS_FIELD_PREFIX", "str"),
    _Field("redis_field_separator", ("redis",), "REDIS_FIELD_SEPARATOR", "char"),
    _Field("redis_list_separator", ("redis",), "REDIS_LIST_SEPARATOR", "char"),
    _Field("redis_sorted_set_prefix", ("redis",), "REDIS_SORTED_SET_PREFIX", "str"),
    _Field("redis_sorted_set_score_len", ("redis",), "REDIS_SORTED_SET_SCORE_LEN", "int"),
    _Field("redis_set_prefix", ("redis",), "REDIS_SET_PREFIX", "str"),
    _Field("bloom_filter_expected_size", ("bloom_filter",), "BLOOM_FILTER_EXPECTED_SIZE", "int"),
    _Field(
        "bloom_filter_expected_error_rate",
        ("bloom_filter",),
        "BLOOM_FILTER_EXPECTED_ERROR_RATE",
        "float",
    ),
)

_DEFAULTS: dict[str, Any] = {
    "lsm_tol_mem_size_limit": 64 * 1024 * 1024,
    "lsm_per_mem_size_limit": 4 * 1024 * 1024,
    "lsm_block_size": 32 * 1024,
    "lsm_sst_level_ratio": 4,
    "lsm_block_cache_capacity": 1024,
    "lsm_block_cache_k": 8,
    "redis_expire_header": "REDIS_EXPIRE_",
    "redis_hash_value_preffix": "REDIS_HASH_VALUE_",
    "redis_field_prefix": "REDIS_FIELD_",
    "redis_field_separator": "$",
    "redis_list_separator": "#",
    "redis_sorted_set_prefix": "REDIS_SORTED_SET_",
    "redis_sorted_set_score_len": 32,
    "redis_set_prefix": "REDIS_SET_",
    "bloom_filter_expected_size": 65536,
    "bloom_filter_expected_error_rate": 0.1,
}


class TomlConfig:
    """Engine settings; every value falls back to a built-in default."""

    _instance: ClassVar["TomlConfig | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    lsm_tol_mem_size_limit: int
    lsm_per_mem_size_limit: int
    lsm_block_size: int
    lsm_sst_level_ratio: int
    lsm_block_cache_capacity: int
    lsm_block_cache_k: int
    redis_expire_header: str
    redis_hash_value_preffix: str
    redis_field_prefix: str
    redis_field_separator: str
    redis_list_separator: str
    redis_sorted_set_prefix: str
    redis_sorted_set_score_len: int
    redis_set_prefix: str
    bloom_filter_expected_size: int
    bloom_filter_expected_error_rate: float

    def __init__(self, file_path: str | os.PathLike[str] = "") -> None:
        self.config_file_path = os.fspath(file_path)
        self._set_defaults()
        if self.config_file_path:
            self.load_from_file(self.config_file_path)

    def _set_defaults(self) -> None:
        for name, value in _DEFAULTS.items():
            setattr(self, name, value)

    def load_from_file(self, file_path: str | os.PathLike[str]) -> bool:
        """Load every setting from ``file_path``.

        All keys are required.  On any failure the defaults are kept and
        False is returned.
        """
        self._set_defaults()
        try:
            with open(file_path, "rb") as handle:
                document = tomllib.load(handle)
            values = {field.attr: field.read(document) for field in _FIELDS}
        except (OSError, tomllib.TOMLDecodeError, KeyError, TypeError, ValueError) as err:
            _log.error("failed to load configuration from %s: %r", file_path, err)
            return False
        for name, value in values.items():
            setattr(self, name, value)
        _log.info("configuration loaded successfully from %s", file_path)
        return True

    def save_to_file(self, file_path: str | os.PathLike[str]) -> bool:
        """Write the current settings to ``file_path`` as TOML."""
        document: dict[str, Any] = {}
        for field in _FIELDS:
            field.write(document, getattr(self, field.attr))
        try:
            with open(file_path, "w", encoding="utf-8") as handle:
                handle.write(tomli_w.dumps(document))
        except OSError as err:
            _log.error("failed to save configuration to %s: %s", file_path, err)
            return False
        _log.info("configuration saved successfully to %s", file_path)
        return True

    @classmethod
    def get_instance(
        cls, config_path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH
    ) -> "TomlConfig":
        """Return the process-wide configuration, created on first call."""
        with cls._instance_lock:
            if cls._instance is None:
                path = os.fspath(config_path)
                if not (os.path.isfile(path) and os.access(path, os.R_OK)):
                    _log.warning(
                        "config file not found or unreadable: %s, using default configuration",
                        path,
                    )
                    path = DEFAULT_CONFIG_PATH
                cls._instance = cls(path)
            return cls._instance