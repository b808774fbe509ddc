import tomllib

import pytest

from tinylsm.config import TomlConfig


def test_basic_block_size_default():
    config = TomlConfig.get_instance("../../../../config.toml")
    assert config.lsm_block_size == 32768


def test_get_instance_is_shared():
    first = TomlConfig.get_instance("does-not-exist.toml")
    second = TomlConfig.get_instance("another-missing.toml")
    assert first is second


def test_defaults_without_file():
    config = TomlConfig("")
    assert config.lsm_tol_mem_size_limit == 67108864
    assert config.lsm_per_mem_size_limit == 4194304
    assert config.lsm_block_size == 32768
    assert config.lsm_sst_level_ratio == 4
    assert config.lsm_block_cache_capacity == 1024
    assert config.lsm_block_cache_k == 8
    assert config.redis_expire_header == "REDIS_EXPIRE_"
    assert config.redis_hash_value_preffix == "REDIS_HASH_VALUE_"
    assert config.redis_field_prefix == "REDIS_FIELD_"
    assert config.redis_field_separator == "$"
    assert config.redis_list_separator == "#"
    assert config.redis_sorted_set_prefix == "REDIS_SORTED_SET_"
    assert config.redis_sorted_set_score_len == 32
    assert config.redis_set_prefix == "REDIS_SET_"
    assert config.bloom_filter_expected_size == 65536
    assert config.bloom_filter_expected_error_rate == 0.1


def test_missing_file_keeps_defaults(tmp_path):
    config = TomlConfig(tmp_path / "absent.toml")
    assert config.lsm_block_size == 32768
    assert config.load_from_file(tmp_path / "absent.toml") is False


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "config.toml"
    config = TomlConfig("")
    config.lsm_block_size = 4096
    config.redis_set_prefix = "SET_"
    config.bloom_filter_expected_error_rate = 0.25
    assert config.save_to_file(path) is True

    loaded = TomlConfig(path)
    assert loaded.lsm_block_size == 4096
    assert loaded.redis_set_prefix == "SET_"
    assert loaded.bloom_filter_expected_error_rate == 0.25
    assert loaded.redis_field_separator == "$"


def test_saved_file_layout(tmp_path):
    path = tmp_path / "config.toml"
    assert TomlConfig("").save_to_file(path)
    with open(path, "rb") as handle:
        document = tomllib.load(handle)
    assert document["lsm"]["core"]["LSM_BLOCK_SIZE"] == 32768
    assert document["lsm"]["cache"]["LSM_BLOCK_CACHE_K"] == 8
    assert document["redis"]["REDIS_LIST_SEPARATOR"] == "#"
    assert document["bloom_filter"]["BLOOM_FILTER_EXPECTED_SIZE"] == 65536


def test_separator_takes_first_character(tmp_path):
    path = tmp_path / "config.toml"
    TomlConfig("").save_to_file(path)
    text = path.read_text(encoding="utf-8").replace('"$"', '"@!"')
    path.write_text(text, encoding="utf-8")
    assert TomlConfig(path).redis_field_separator == "@"


def test_missing_key_fails_and_keeps_defaults(tmp_path):
    path = tmp_path / "config.toml"
    config = TomlConfig("")
    config.lsm_block_size = 1024
    config.save_to_file(path)
    text = path.read_text(encoding="utf-8")
    path.write_text(
        "\n".join(line for line in text.splitlines() if "LSM_BLOCK_CACHE_K" not in line),
        encoding="utf-8",
    )
    reloaded = TomlConfig("")
    assert reloaded.load_from_file(path) is False
    assert reloaded.lsm_block_size == 32768


@pytest.mark.parametrize(
    "original, replacement",
    [("LSM_BLOCK_SIZE = 32768", 'LSM_BLOCK_SIZE = "big"'),
     ("BLOOM_FILTER_EXPECTED_ERROR_RATE = 0.1", "BLOOM_FILTER_EXPECTED_ERROR_RATE = 1")],
)
def test_wrong_type_fails(tmp_path, original, replacement):
    path = tmp_path / "config.toml"
    TomlConfig("").save_to_file(path)
    text = path.read_text(encoding="utf-8")
    assert original in text
    path.write_text(text.replace(original, replacement), encoding="utf-8")
    assert TomlConfig("").load_from_file(path) is False


def test_invalid_toml_fails(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[lsm\ncore = ", encoding="utf-8")
    config = TomlConfig(path)
    assert config.lsm_sst_level_ratio == 4
    assert config.load_from_file(path) is False