import pytest

from regbot.conversation import RegistrationFieldExtractor, merge_fields
from regbot.conversation.sessions import DialogueSession
from regbot.database.models import RegistrationFields, RegistrationStep


@pytest.fixture
def extractor():
    return RegistrationFieldExtractor()


def _fields(**values):
    return RegistrationFields(**values)


class TestNameExtraction:

    def test_introduction_is_captured_and_trimmed(self, extractor):
        updates = extractor.extract_updates(_fields(), RegistrationStep.GENDER, "My name is Ada Lovelace")
        assert updates["name"] == "Ada Lovelace"

    def test_trailing_punctuation_is_not_captured(self, extractor):
        updates = extractor.extract_updates(_fields(), RegistrationStep.GENDER, "Hi, I'm Grace Hopper.")
        assert updates["name"] == "Grace Hopper"

    def test_whole_message_is_the_answer_at_name_step(self, extractor):
        updates = extractor.extract_updates(_fields(), RegistrationStep.NAME, "  Ada  ")
        assert updates["name"] == "Ada"

    def test_plain_text_is_ignored_at_other_steps(self, extractor):
        updates = extractor.extract_updates(_fields(), RegistrationStep.DATE_OF_BIRTH, "Ada")
        assert "name" not in updates

    def test_set_name_is_not_proposed_again(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.NAME, "My name is Bob")
        assert "name" not in updates


class TestDateOfBirthExtraction:

    def test_date_inside_sentence(self, extractor):
        updates = extractor.extract_updates(
            _fields(name="Ada"), RegistrationStep.DATE_OF_BIRTH, "I was born on 1990-05-10, a Thursday")
        assert updates["date_of_birth"] == "1990-05-10"

    def test_day_range_is_not_calendar_aware(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.DATE_OF_BIRTH, "1990-02-31")
        assert updates["date_of_birth"] == "1990-02-31"

    @pytest.mark.parametrize("text", ["1990-13-01", "1990-00-10", "1990-05-32", "1990-05-00", "10/05/1990"])
    def test_out_of_range_or_wrong_format_is_left_unset(self, extractor, text):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.DATE_OF_BIRTH, text)
        assert "date_of_birth" not in updates


class TestGenderExtraction:

    def test_male(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.GENDER, "Male")
        assert updates["gender"] == "male"

    def test_other(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.GENDER, "other")
        assert updates["gender"] == "other"

    def test_male_test_runs_first_so_female_text_matches_male(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.GENDER, "female")
        assert updates["gender"] == "male"

    def test_no_gender_word(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.GENDER, "prefer not to say")
        assert "gender" not in updates


class TestBudgetAppExtraction:

    @pytest.mark.parametrize("text", ["yes", "Yep!", "yeah I do", "sure", "TRUE"])
    def test_affirmative_answers(self, extractor, text):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.USES_BUDGET_APP, text)
        assert updates["uses_budget_app"] is True

    @pytest.mark.parametrize("text", ["no", "Nope", "nah", "false"])
    def test_negative_answers_force_app_name_absent(self, extractor, text):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.USES_BUDGET_APP, text)
        assert updates["uses_budget_app"] is False
        assert "budget_app_name" in updates
        assert updates["budget_app_name"] is None

    def test_words_inside_other_words_do_not_match(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.USES_BUDGET_APP, "nothing yet")
        assert "uses_budget_app" not in updates

    def test_app_name_from_mention_in_same_turn(self, extractor):
        updates = extractor.extract_updates(
            _fields(name="Ada"), RegistrationStep.USES_BUDGET_APP, "yes, using YNAB")
        assert updates["uses_budget_app"] is True
        assert updates["budget_app_name"] == "YNAB"

    def test_app_name_not_taken_from_plain_answer_at_yes_no_step(self, extractor):
        updates = extractor.extract_updates(_fields(name="Ada"), RegistrationStep.USES_BUDGET_APP, "yes")
        assert "budget_app_name" not in updates

    def test_whole_message_is_the_app_name_at_app_step(self, extractor):
        fields = _fields(name="Ada", uses_budget_app=True)
        updates = extractor.extract_updates(fields, RegistrationStep.BUDGET_APP_NAME, " Mint ")
        assert updates["budget_app_name"] == "Mint"

    def test_app_name_requires_a_budget_app_user(self, extractor):
        fields = _fields(name="Ada", uses_budget_app=False)
        updates = extractor.extract_updates(fields, RegistrationStep.BUDGET_APP_NAME, "using Mint")
        assert "budget_app_name" not in updates


def test_complete_field_set_yields_no_updates(extractor):
    fields = _fields(
        name="Ada",
        date_of_birth="1990-05-10",
        gender="female",
        uses_budget_app=True,
        budget_app_name="YNAB",
    )
    message = "My name is Bob, 2000-01-01, male, no, using Mint"
    for step in RegistrationStep:
        assert extractor.extract_updates(fields, step, message) == {}


def test_extract_reads_session_state(extractor):
    session = DialogueSession(user_id="u1", current_step=RegistrationStep.NAME)
    assert extractor.extract(session, "Ada") == {"name": "Ada"}


class TestMergeFields:

    def test_set_fields_are_never_overwritten(self):
        current = _fields(name="Ada")
        merged = merge_fields(current, {"name": "Bob", "date_of_birth": "1990-05-10"})
        assert merged.name == "Ada"
        assert merged.date_of_birth == "1990-05-10"

    def test_returns_new_field_set(self):
        current = _fields()
        merged = merge_fields(current, {"name": "Ada"})
        assert current.name is None
        assert merged is not current

    def test_empty_string_counts_as_unset(self):
        merged = merge_fields(_fields(name=""), {"name": "Ada"})
        assert merged.name == "Ada"

    def test_no_budget_app_forces_app_name_absent(self):
        merged = merge_fields(_fields(name="Ada"), {"uses_budget_app": False})
        assert merged.uses_budget_app is False
        assert merged.budget_app_name is None

    def test_no_updates_keeps_field_set(self):
        current = _fields(name="Ada")
        assert merge_fields(current, {}) is current
