import unittest

from minifill.data.dictionary import WordIndex
from minifill.engine.quality import QualityPolicy, score_quality


class QualityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.index = WordIndex.from_entries([("ABCDE", 60), ("XYZ", 40), ("QQ", 10)])

    def test_formula_mixes_lengths_and_average(self) -> None:
        report = score_quality(["ABCDE", "XYZ", "QQ"], self.index, block_count=4)
        self.assertEqual(report.two_letter_words, 1)
        self.assertEqual(report.three_letter_words, 1)
        self.assertEqual(report.four_plus_words, 1)
        self.assertEqual(report.total_words, 3)
        self.assertAlmostEqual(report.average_word_score, 36.7)
        # 100 - 30 + 10 + 20 + 15 + 10
        self.assertEqual(report.score, 125)
        self.assertEqual(report.block_count, 4)
        self.assertTrue(report.acceptable)

    def test_low_average_is_penalized(self) -> None:
        report = score_quality(["QQ"], self.index)
        self.assertEqual(report.score, 100 - 30 + 5 - 20)

    def test_unknown_words_score_zero(self) -> None:
        report = score_quality(["ZZZZZ"], self.index)
        self.assertEqual(report.average_word_score, 0.0)
        self.assertEqual(report.score, 100 + 20 + 5 - 20)

    def test_empty_fill_has_no_average_adjustment(self) -> None:
        report = score_quality([], self.index)
        self.assertEqual(report.score, 100)
        self.assertTrue(report.acceptable)

    def test_too_many_two_letter_words_are_rejected(self) -> None:
        index = WordIndex.from_entries(
            [(word, 90) for word in ("AB", "AC", "AD", "AE", "AF", "ABCDE")]
        )
        words = ["AB", "AC", "AD", "AE", "AF", "ABCDE", "ABCDE", "ABCDE", "ABCDE", "ABCDE"]
        report = score_quality(words, index)
        self.assertGreaterEqual(report.score, 0)
        self.assertFalse(report.acceptable)
        self.assertTrue(QualityPolicy(max_two_letter=5).accepts(report))

    def test_policy_minimum_score(self) -> None:
        report = score_quality(["ABCDE"], self.index)
        self.assertFalse(QualityPolicy(min_score=report.score + 1).accepts(report))
        self.assertTrue(QualityPolicy(min_score=report.score).accepts(report))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
