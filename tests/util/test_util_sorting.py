import unittest

from driveplayer.util.sorting import natural_key, natural_sorted


class TestNaturalSort(unittest.TestCase):
    def test_numbers_compare_numerically(self) -> None:
        self.assertEqual(natural_sorted(["b10", "b2", "a1"]), ["a1", "b2", "b10"])

    def test_lesson_names(self) -> None:
        names = ["Lesson 10.mp4", "Lesson 2.mp4", "Lesson 1.mp4", "Intro.mp4"]
        self.assertEqual(
            natural_sorted(names),
            ["Intro.mp4", "Lesson 1.mp4", "Lesson 2.mp4", "Lesson 10.mp4"],
        )

    def test_case_insensitive(self) -> None:
        self.assertEqual(natural_sorted(["beta", "Alpha"]), ["Alpha", "beta"])

    def test_order_is_total(self) -> None:
        self.assertNotEqual(natural_key("A1"), natural_key("a1"))
        self.assertEqual(natural_sorted(["a1", "A1"]), natural_sorted(["A1", "a1"]))

    def test_numbers_sort_before_words(self) -> None:
        self.assertEqual(natural_sorted(["x", "1"]), ["1", "x"])

    def test_superscript_digits_sort_as_text(self) -> None:
        self.assertEqual(
            natural_sorted(["Potencia 2³", "Potencia 10", "Potencia 2"]),
            ["Potencia 2", "Potencia 2³", "Potencia 10"],
        )
        self.assertEqual(natural_key("x²")[0], ((1, "x²"),))


if __name__ == "__main__":
    unittest.main()
