import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from minifill.core.exceptions import DictionaryLoadError
from minifill.data.dictionary import (
    DictionaryConfig,
    WordIndex,
    clear_word_index_cache,
    get_word_index,
    parse_entry,
)
from minifill.data.normalization import clean_entry


SAMPLE = (
    "# Crossword Master Dictionary\n"
    "\n"
    "CRANE;80\n"
    "CRATE;60\n"
    "CARES;45\n"
    "ACE;70\n"
    "AN;20\n"
    "crane;99\n"
    "BAD;0\n"
    "NOSCORE\n"
    "TOOLONGWORD;50\n"
    "CRANE;85\n"
)


class DictionaryTests(unittest.TestCase):
    def test_clean_entry_strips_separators(self) -> None:
        self.assertEqual(clean_entry("Ice cream"), "ICECREAM")
        self.assertEqual(clean_entry("can't"), "CANT")
        self.assertEqual(clean_entry("e.g."), "EG")

    def test_parse_entry_splits_on_last_semicolon(self) -> None:
        self.assertEqual(parse_entry("CRANE;80"), ("CRANE", 80))
        self.assertIsNone(parse_entry("A;B;80"))
        self.assertIsNone(parse_entry("CRANE;101"))
        self.assertIsNone(parse_entry("crane;50"))
        self.assertIsNone(parse_entry("# comment;5"))
        self.assertIsNone(parse_entry("CRANE;+50"))
        self.assertIsNone(parse_entry("CRANE;050"))
        self.assertIsNone(parse_entry("CRANE;5_0"))
        self.assertIsNone(parse_entry("CRANE;\N{ARABIC-INDIC DIGIT FIVE}0"))

    def test_index_loads_file_and_skips_invalid_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sample = Path(tmpdir) / "sample.dict"
            sample.write_text(SAMPLE, encoding="utf-8")

            index = WordIndex(DictionaryConfig(path=sample))
            self.assertEqual(len(index), 5)
            # lowercase, out-of-range score and missing score
            self.assertEqual(index.skipped_lines, 3)
            self.assertEqual(index.score("crane"), 85)
            self.assertTrue(index.contains("ace"))
            self.assertIn("CARES", index)
            self.assertNotIn("TOOLONGWORD", index)
            self.assertEqual(index.score("MISSING"), 0)

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(DictionaryLoadError):
                WordIndex.from_file(Path(tmpdir) / "absent.dict")

    def test_search_patterns(self) -> None:
        index = WordIndex.from_entries(
            [("CRANE", 80), ("CRATE", 60), ("CARES", 45), ("TRACE", 30), ("ACE", 70)]
        )
        self.assertEqual(index.search("CRA.E"), ["CRANE", "CRATE"])
        self.assertEqual(index.search("cr?_e"), ["CRANE", "CRATE"])
        self.assertEqual(index.search("....."), ["CRANE", "CRATE", "CARES", "TRACE"])
        self.assertEqual(index.search("Q...."), [])
        self.assertEqual(index.search("......"), [])
        self.assertEqual(index.search("C....", min_score=50), ["CRANE", "CRATE"])
        self.assertEqual(index.count("..A.."), 3)

    def test_search_sorted_orders_by_score_then_alphabetically(self) -> None:
        index = WordIndex.from_entries([("BEE", 40), ("ACE", 40), ("ICE", 90), ("APE", 10)])
        self.assertEqual(
            index.search_sorted("..E"),
            [("ICE", 90), ("ACE", 40), ("BEE", 40), ("APE", 10)],
        )

    def test_duplicates_keep_highest_score(self) -> None:
        index = WordIndex.from_entries([("ace", 20), ("ACE", 75), ("ACE", 50)])
        self.assertEqual(len(index), 1)
        self.assertEqual(index.score("ACE"), 75)

    def test_config_filters_length_and_score(self) -> None:
        index = WordIndex.from_entries(
            [("AN", 50), ("ACE", 10), ("CRANE", 60)], min_length=3, min_score=20
        )
        self.assertEqual(index.words_of_length(5), ["CRANE"])
        self.assertEqual(index.words_of_length(2), [])
        self.assertNotIn("ACE", index)

    def test_empty_index_builds(self) -> None:
        index = WordIndex.from_entries([])
        self.assertEqual(len(index), 0)
        self.assertEqual(index.search("....."), [])
        self.assertEqual(index.stats()["total_words"], 0)

    def test_stats(self) -> None:
        index = WordIndex.from_entries([("AN", 10), ("ACE", 30), ("CRANE", 50)])
        stats = index.stats()
        self.assertEqual(stats["total_words"], 3)
        self.assertEqual(stats["by_length"], {2: 1, 3: 1, 5: 1})
        self.assertEqual(stats["average_score"], 30.0)


class CachedIndexTests(unittest.TestCase):
    def setUp(self) -> None:
        clear_word_index_cache()

    def tearDown(self) -> None:
        clear_word_index_cache()

    def test_environment_variable_selects_dictionary(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            sample = Path(tmpdir) / "env.dict"
            sample.write_text("CRANE;80\n", encoding="utf-8")
            with patch.dict(os.environ, {"MINIFILL_DICTIONARY": str(sample)}):
                first = get_word_index()
                second = get_word_index()
            self.assertIs(first, second)
            self.assertIn("CRANE", first)

    def test_missing_default_dictionary_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(DictionaryLoadError):
                get_word_index(Path(tmpdir) / "missing.dict")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
