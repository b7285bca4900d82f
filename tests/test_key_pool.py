"""Key pool parsing, rotation and failure bookkeeping.

Run with `python -m unittest tests.test_key_pool` from the project root.
"""

import os
import unittest
from unittest.mock import patch

from src.core.errors import ConfigurationError
from src.utils.key_pool import KeyPool, mask_key, parse_api_keys
from tests.stubs import make_config


class TestParseApiKeys(unittest.TestCase):
	"""Tests cleaning of the configured key string."""

	def test_comma_separated(self):
		self.assertEqual(parse_api_keys("key1,key2,key3"), ["key1", "key2", "key3"])

	def test_removes_quotes(self):
		self.assertEqual(parse_api_keys('"key1","key2"'), ["key1", "key2"])

	def test_removes_repeated_quotes(self):
		self.assertEqual(parse_api_keys('""key1"", "key2"""'), ["key1", "key2"])

	def test_trims_whitespace(self):
		self.assertEqual(parse_api_keys("  key1  ,  key2  "), ["key1", "key2"])

	def test_single_key_without_comma(self):
		self.assertEqual(parse_api_keys("single_key_value"), ["single_key_value"])

	def test_single_quoted_key(self):
		self.assertEqual(parse_api_keys('  "only-one"  '), ["only-one"])

	def test_filters_empty_pieces(self):
		self.assertEqual(parse_api_keys("key1,,key2,"), ["key1", "key2"])

	def test_empty_or_missing(self):
		self.assertEqual(parse_api_keys(""), [])
		self.assertEqual(parse_api_keys(None), [])
		self.assertEqual(parse_api_keys(' , "" ,'), [])

	def test_reparsing_quoted_join_is_stable(self):
		"""Tests that quoting and re-joining parsed keys yields the same keys."""
		keys = parse_api_keys(' "a1" ,b2,, "c3"')
		rejoined = ",".join(f'"{k}"' for k in keys)
		self.assertEqual(parse_api_keys(rejoined), keys)

class TestKeyPoolRotation(unittest.TestCase):
	"""Tests next_available / advance / mark_failed semantics."""

	def setUp(self):
		self.pool = KeyPool(["key1", "key2", "key3"])

	def test_empty_pool_is_a_configuration_error(self):
		with self.assertRaises(ConfigurationError):
			KeyPool([])

	def test_first_key_initially(self):
		self.assertEqual(self.pool.next_available(), (0, "key1"))

	def test_rotation_visits_every_key_once(self):
		seen = []
		for _ in range(len(self.pool)):
			index, _key = self.pool.next_available()
			seen.append(index)
			self.pool.advance()
		self.assertEqual(seen, [0, 1, 2])
		self.assertEqual(self.pool.next_available(), (0, "key1"))

	def test_skips_failed_keys(self):
		self.pool.next_available()
		self.pool.mark_failed(0)
		self.assertEqual(self.pool.next_available(), (1, "key2"))
		self.assertEqual(self.pool.cursor, 1)

	def test_skip_wraps_around(self):
		self.pool.cursor = 2
		self.pool.mark_failed(2)
		self.assertEqual(self.pool.next_available(), (0, "key1"))

	def test_mark_failed_is_idempotent_and_keeps_cursor(self):
		self.pool.cursor = 1
		self.pool.mark_failed(1)
		self.pool.mark_failed(1)
		self.assertEqual(self.pool.failed, {1})
		self.assertEqual(self.pool.cursor, 1)

	def test_mark_failed_rejects_unknown_index(self):
		with self.assertRaises(IndexError):
			self.pool.mark_failed(3)

	def test_exhaustion_resets(self):
		for index in range(3):
			self.pool.mark_failed(index)
		self.pool.cursor = 2
		self.assertEqual(self.pool.next_available(), (0, "key1"))
		self.assertEqual(self.pool.failed, set())
		self.assertEqual(self.pool.cursor, 0)

	def test_single_key_pool_never_locks(self):
		pool = KeyPool(["solo"])
		pool.mark_failed(0)
		self.assertTrue(pool.is_exhausted())
		self.assertEqual(pool.next_available(), (0, "solo"))
		self.assertFalse(pool.is_exhausted())

	def test_fail_over_picks_next_key(self):
		self.assertEqual(self.pool.fail_over(0), (1, "key2"))
		self.assertEqual(self.pool.failed, {0})

	def test_fail_over_reports_exhaustion_without_reset(self):
		self.pool.mark_failed(1)
		self.pool.mark_failed(2)
		self.assertIsNone(self.pool.fail_over(0))
		# The reset belongs to the next request
		self.assertEqual(self.pool.failed, {0, 1, 2})

	def test_snapshot_has_no_key_material(self):
		self.pool.mark_failed(2)
		snapshot = self.pool.snapshot()
		self.assertEqual(snapshot, {"total_keys": 3, "failed_keys": 1, "cursor": 0})
		self.assertNotIn("key1", repr(snapshot))

class TestKeyPoolFromEnv(unittest.TestCase):
	"""Tests loading the pool from the environment."""

	def test_prefers_pool_variable(self):
		with patch.dict(os.environ, {"GEMINI_API_KEYS": "a, b", "GEMINI_API_KEY": "c"}):
			pool = KeyPool.from_env(make_config())
		self.assertEqual(pool.keys, ("a", "b"))

	def test_falls_back_to_single_key_variable(self):
		with patch.dict(os.environ, {"GEMINI_API_KEYS": "", "GEMINI_API_KEY": '"c"'}):
			pool = KeyPool.from_env(make_config())
		self.assertEqual(pool.keys, ("c",))

	def test_missing_configuration(self):
		with patch.dict(os.environ, {"GEMINI_API_KEYS": "", "GEMINI_API_KEY": " , "}):
			with self.assertRaises(ConfigurationError):
				KeyPool.from_env(make_config())

class TestMaskKey(unittest.TestCase):

	def test_masks_long_and_short_keys(self):
		self.assertEqual(mask_key("AIzaSyABCDEFGHIJ1234"), "AIza...1234")
		self.assertEqual(mask_key("short"), "****")

if __name__ == "__main__":
	unittest.main()
