"""
Tests for the resolution caches.
"""

import json
import os
import threading
from unittest.mock import patch

import pytest

from txdecode.core.selector import Selector
from txdecode.sources.cache import FileCache, MemoryCache, selector_key, verified_abi_key


class TestKeys:
    def test_selector_key(self):
        assert selector_key(Selector.from_hex("0xA9059CBB")) == "0xa9059cbb"
        assert selector_key("0xA9059CBB") == "0xa9059cbb"

    def test_verified_abi_key_lowercases_address(self):
        key = verified_abi_key(137, "0xdAC17F958D2ee523a2206206994597C13D831ec7")
        assert key == "abi-137-0xdac17f958d2ee523a2206206994597c13d831ec7"


class TestMemoryCache:
    def test_get_put(self):
        cache = MemoryCache()
        assert cache.get("k") is None
        cache.put("k", {"signature": "a()"})
        assert cache.get("k") == {"signature": "a()"}
        assert "k" in cache
        assert len(cache) == 1

    def test_put_overwrites(self):
        cache = MemoryCache()
        cache.put("k", {"v": 1})
        cache.put("k", {"v": 2})
        assert cache.get("k") == {"v": 2}

    def test_values_are_copied(self):
        cache = MemoryCache()
        value = {"functions": [{"name": "a"}]}
        cache.put("k", value)
        value["functions"].append({"name": "b"})
        fetched = cache.get("k")
        fetched["functions"].clear()
        assert cache.get("k") == {"functions": [{"name": "a"}]}


class TestFileCache:
    def test_round_trip(self, tmp_path):
        cache = FileCache(tmp_path)
        cache.put("0xa9059cbb", {"signature": "transfer(address,uint256)", "source": "4byte"})
        assert cache.get("0xa9059cbb") == {"signature": "transfer(address,uint256)", "source": "4byte"}
        assert (tmp_path / "0xa9059cbb.json").exists()

    def test_creates_directory(self, tmp_path):
        FileCache(tmp_path / "nested" / "cache")
        assert (tmp_path / "nested" / "cache").is_dir()

    def test_missing_entry(self, tmp_path):
        assert FileCache(tmp_path).get("0x12345678") is None

    def test_corrupt_entry_reads_as_miss(self, tmp_path):
        (tmp_path / "0x12345678.json").write_text("{not json")
        assert FileCache(tmp_path).get("0x12345678") is None

    def test_non_dict_entry_reads_as_miss(self, tmp_path):
        (tmp_path / "0x12345678.json").write_text(json.dumps(["a"]))
        assert FileCache(tmp_path).get("0x12345678") is None

    def test_unsafe_key_rejected(self, tmp_path):
        cache = FileCache(tmp_path)
        with pytest.raises(ValueError):
            cache.put("../escape", {"v": 1})

    def test_failed_write_leaves_previous_entry_and_no_temp_files(self, tmp_path):
        cache = FileCache(tmp_path)
        cache.put("0xa9059cbb", {"signature": "transfer(address,uint256)"})

        with patch("txdecode.sources.cache.os.replace", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                cache.put("0xa9059cbb", {"signature": "other(uint256)"})

        assert cache.get("0xa9059cbb") == {"signature": "transfer(address,uint256)"}
        assert sorted(os.listdir(tmp_path)) == ["0xa9059cbb.json"]

    def test_concurrent_writers_converge(self, tmp_path):
        cache = FileCache(tmp_path)
        value = {"signature": "transfer(address,uint256)", "source": "4byte"}

        threads = [threading.Thread(target=cache.put, args=("0xa9059cbb", value)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.get("0xa9059cbb") == value
        assert sorted(os.listdir(tmp_path)) == ["0xa9059cbb.json"]
