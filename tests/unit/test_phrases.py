"""Unit tests for skill_emulator.phrases."""

from skill_emulator.phrases import SamplePhrase, clean


def test_clean_strips_punctuation():
    assert clean("good? #%.morning") == "good morning"
    assert clean("good, -morning:") == "good morning"


def test_clean_keeps_letters_digits_and_spaces():
    assert clean("play track 5") == "play track 5"


class TestSamplePhrase:
    def test_literal_phrase(self):
        sample = SamplePhrase.compile("Play", "play now")
        assert sample.slot_names == ()
        assert sample.match("PLAY NOW")
        assert not sample.match("play now please")

    def test_slot_names_in_placeholder_order(self):
        sample = SamplePhrase.compile("Reversed", "reversed {SlotB} then {SlotA}")
        assert sample.slot_names == ("SlotB", "SlotA")
        found = sample.match("reversed a then b")
        assert [g.strip() for g in found.groups()] == ["a", "b"]

    def test_bar_form_names_slot_after_bar(self):
        sample = SamplePhrase.compile("Order", "order {pizza | Food} now")
        assert sample.slot_names == ("Food",)
        assert sample.match("order a large pizza now").group(1).strip() == "a large pizza"

    def test_punctuation_in_template_is_ignored(self):
        sample = SamplePhrase.compile("Hello", "hi, there!")
        assert sample.match("hi there")

    def test_regex_characters_are_literal(self):
        sample = SamplePhrase.compile("Plus", "one ^ two")
        assert sample.match("one ^ two")
        assert not sample.match("one two")

    def test_placeholder_may_capture_nothing(self):
        sample = SamplePhrase.compile("Slotted", "slot {SlotName}")
        assert sample.match("slot").group(1) == ""
