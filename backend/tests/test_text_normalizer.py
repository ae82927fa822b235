"""Tests for document text cleanup."""

from tar_validator.services.text_normalizer import TextNormalizer


class TestWhitespace:
    def test_horizontal_runs_collapse(self):
        assert TextNormalizer().normalize("Total   Cost:\t\t500") == "Total Cost: 500"

    def test_line_breaks_survive(self):
        assert TextNormalizer().normalize("Traveler: Jane\nTitle: Analyst") == "Traveler: Jane\nTitle: Analyst"

    def test_blank_line_runs_collapse_to_one(self):
        assert TextNormalizer().normalize("a\n\n\n\n b \r\n\r\n\r\nc") == "a\n\nb\n\nc"

    def test_empty_input(self):
        assert TextNormalizer().normalize("") == ""
        assert TextNormalizer().normalize(None) == ""


class TestCharacterCleanup:
    def test_disallowed_characters_stripped(self):
        assert TextNormalizer().normalize("Name: Jane*Smith!") == "Name: JaneSmith"

    def test_phone_and_currency_kept(self):
        out = TextNormalizer().normalize("Phone: +1 (555) 123-4567 Cost: $ 1,250.00")
        assert out == "Phone: +1 (555) 123-4567 Cost: $1,250.00"


class TestOcrCorrections:
    def test_letters_before_digits_fixed(self):
        assert TextNormalizer().normalize("Room O12 floor I5 suite S9") == "Room 012 floor 15 suite 59"

    def test_words_untouched(self):
        assert TextNormalizer().normalize("Boston Illinois Oslo") == "Boston Illinois Oslo"

    def test_corrections_can_be_disabled(self):
        normalizer = TextNormalizer(ocr_corrections=True)
        assert normalizer.normalize("TARS0042", ocr_corrections=False) == "TARS0042"
        assert TextNormalizer(ocr_corrections=False).normalize("O12") == "O12"
