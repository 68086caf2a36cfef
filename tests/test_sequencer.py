from regbot.conversation import applicable_steps, next_field
from regbot.database.models import RegistrationFields, RegistrationStep


def test_starts_with_name():
    assert next_field(RegistrationFields()) == RegistrationStep.NAME


def test_follows_field_order():
    fields = RegistrationFields(name="Ada")
    assert next_field(fields) == RegistrationStep.DATE_OF_BIRTH

    fields = RegistrationFields(name="Ada", date_of_birth="1990-05-10")
    assert next_field(fields) == RegistrationStep.GENDER

    fields = RegistrationFields(name="Ada", date_of_birth="1990-05-10", gender="other")
    assert next_field(fields) == RegistrationStep.USES_BUDGET_APP


def test_returns_first_gap_not_last():
    fields = RegistrationFields(name="Ada", gender="male", uses_budget_app=False)
    assert next_field(fields) == RegistrationStep.DATE_OF_BIRTH


def test_empty_string_is_unset():
    assert next_field(RegistrationFields(name="")) == RegistrationStep.NAME


def test_budget_app_user_is_asked_for_app_name():
    fields = RegistrationFields(
        name="Ada", date_of_birth="1990-05-10", gender="female", uses_budget_app=True)
    assert next_field(fields) == RegistrationStep.BUDGET_APP_NAME


def test_no_budget_app_skips_app_name():
    fields = RegistrationFields(
        name="Ada", date_of_birth="1990-05-10", gender="male", uses_budget_app=False)
    assert next_field(fields) is None
    assert RegistrationStep.BUDGET_APP_NAME not in applicable_steps(fields)


def test_complete_with_app_name():
    fields = RegistrationFields(
        name="Ada", date_of_birth="1990-05-10", gender="male",
        uses_budget_app=True, budget_app_name="YNAB")
    assert next_field(fields) is None


def test_applicable_steps_count():
    assert len(applicable_steps(RegistrationFields())) == 5
    assert len(applicable_steps(RegistrationFields(uses_budget_app=True))) == 5
    assert len(applicable_steps(RegistrationFields(uses_budget_app=False))) == 4
