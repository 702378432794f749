"""Tests for line item mutations and the cascade they trigger."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from carryover.errors import NotFoundError, ValidationError
from carryover.models import BudgetTemplate, TemplateLine
from tests.conftest import assert_float_equal, assert_same_instant

AS_OF = datetime(2025, 2, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def chain(period_factory):
    return period_factory(1), period_factory(2)


@pytest.fixture
def template_line(template_repo, user):
    template = template_repo.create(BudgetTemplate(user_id=user.id, name="Monthly"))
    return template_repo.create_line(
        TemplateLine(template_id=template.id, name="Rent", kind="expense", amount=900.0)
    )


class TestCreateLine:
    def test_creates_and_recomputes_the_chain(self, line_service, period_repo, chain):
        jan, feb = chain

        line_service.create_line(jan.id, name="Salary", amount=3000, kind="income")
        line_service.create_line(jan.id, name="Rent", amount=1200, kind="expense")

        jan_row = period_repo.get_period_by_id(jan.id)
        feb_row = period_repo.get_period_by_id(feb.id)
        assert_float_equal(jan_row.ending_balance, 1800)
        assert_float_equal(jan_row.rollover_balance, 1800)
        assert_float_equal(feb_row.rollover_balance, 1800)

    def test_defaults(self, line_service, chain):
        line = line_service.create_line(chain[0].id, name="  Gym  ", amount=30, kind="expense")

        assert line.id is not None
        assert line.name == "Gym"
        assert line.recurrence == "one_off"
        assert line.is_manually_adjusted is False
        assert line.user_id == chain[0].user_id

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "", "amount": 10, "kind": "expense"},
            {"name": "x" * 101, "amount": 10, "kind": "expense"},
            {"name": "Bad", "amount": -1, "kind": "expense"},
            {"name": "Bad", "amount": float("nan"), "kind": "expense"},
            {"name": "Bad", "amount": "10", "kind": "expense"},
            {"name": "Bad", "amount": 10, "kind": "transfer"},
            {"name": "Bad", "amount": 10, "kind": "expense", "recurrence": "weekly"},
        ],
    )
    def test_rejects_malformed_input(self, line_service, period_repo, chain, fields):
        with pytest.raises(ValidationError):
            line_service.create_line(chain[0].id, **fields)

        assert period_repo.list_line_items(chain[0].id) == []
        assert period_repo.get_period_by_id(chain[0].id).ending_balance is None

    def test_missing_period(self, line_service):
        with pytest.raises(NotFoundError):
            line_service.create_line(404, name="Rent", amount=1, kind="expense")

    def test_rollover_id_is_not_a_period(self, line_service):
        with pytest.raises(ValidationError):
            line_service.create_line("rollover-1", name="Rent", amount=1, kind="expense")

    def test_unknown_template_line(self, line_service, chain):
        with pytest.raises(NotFoundError):
            line_service.create_line(chain[0].id, name="Rent", amount=1, kind="expense", template_line_id=77)


class TestUpdateAndDelete:
    def test_partial_update(self, line_service, period_repo, chain):
        jan, feb = chain
        line_service.create_line(jan.id, name="Salary", amount=2000, kind="income")
        line = line_service.create_line(jan.id, name="Food", amount=300, kind="expense")

        updated = line_service.update_line(line.id, amount=450)

        assert updated.name == "Food"
        assert updated.amount == 450.0
        assert updated.is_manually_adjusted is False
        assert_float_equal(period_repo.get_period_by_id(feb.id).rollover_balance, 1550)

    def test_amount_change_on_template_line_marks_manual(self, line_service, chain, template_line):
        line = line_service.create_line(
            chain[0].id, name="Rent", amount=900, kind="expense", template_line_id=template_line.id
        )

        updated = line_service.update_line(line.id, amount=950)

        assert updated.is_manually_adjusted is True

    def test_rollover_line_cannot_be_edited(self, line_service):
        with pytest.raises(ValidationError):
            line_service.update_line("rollover-3", amount=1)
        with pytest.raises(ValidationError):
            line_service.delete_line("rollover-3")

    def test_missing_line(self, line_service):
        with pytest.raises(NotFoundError):
            line_service.update_line(999, amount=1)

    def test_delete_releases_allocated_transactions(
        self, line_service, transaction_service, period_repo, transaction_repo, chain
    ):
        jan, _ = chain
        line_service.create_line(jan.id, name="Salary", amount=1000, kind="income")
        food = line_service.create_line(jan.id, name="Food", amount=300, kind="expense")
        txn = transaction_service.create_transaction(
            jan.id, name="Market", amount=80, kind="expense", envelope_line_id=food.id
        )
        assert_float_equal(period_repo.get_period_by_id(jan.id).ending_balance, 700)

        line_service.delete_line(food.id)

        assert transaction_repo.get_by_id(txn.id).envelope_line_id is None
        # The former allocation now counts as a free transaction.
        assert_float_equal(period_repo.get_period_by_id(jan.id).ending_balance, 920)


class TestChecking:
    def test_toggle_check(self, line_service, chain):
        line = line_service.create_line(chain[0].id, name="Salary", amount=1000, kind="income")

        checked = line_service.toggle_check(line.id, as_of=AS_OF)
        assert_same_instant(checked.checked_at, AS_OF)

        unchecked = line_service.toggle_check(line.id, as_of=AS_OF)
        assert unchecked.checked_at is None

    def test_naive_as_of_is_stored_as_utc(self, line_service, chain):
        line = line_service.create_line(chain[0].id, name="Salary", amount=1000, kind="income")

        checked = line_service.toggle_check(line.id, as_of=datetime(2025, 2, 14, 9, 30))

        assert_same_instant(checked.checked_at, AS_OF)

    def test_as_of_is_required(self, line_service, chain):
        line = line_service.create_line(chain[0].id, name="Salary", amount=1000, kind="income")

        with pytest.raises(ValidationError):
            line_service.toggle_check(line.id, as_of=None)

    def test_check_transactions_stamps_unchecked_only(
        self, line_service, transaction_service, chain
    ):
        jan, _ = chain
        earlier = datetime(2025, 1, 3, tzinfo=timezone.utc)
        food = line_service.create_line(jan.id, name="Food", amount=300, kind="expense")
        done = transaction_service.create_transaction(
            jan.id, amount=10, kind="expense", envelope_line_id=food.id, checked_at=earlier
        )
        open_txn = transaction_service.create_transaction(
            jan.id, amount=20, kind="expense", envelope_line_id=food.id
        )

        checked = line_service.check_transactions(food.id, as_of=AS_OF)

        assert [t.id for t in checked] == [open_txn.id]
        assert_same_instant(checked[0].checked_at, AS_OF)
        assert_same_instant(transaction_service.transactions.get_by_id(done.id).checked_at, earlier)


class TestResetFromTemplate:
    def test_restores_template_values(self, line_service, chain, template_line):
        line = line_service.create_line(
            chain[0].id, name="Rent", amount=900, kind="expense", template_line_id=template_line.id
        )
        line_service.update_line(line.id, name="Flat", amount=1000)

        reset = line_service.reset_from_template(line.id)

        assert reset.name == "Rent"
        assert reset.amount == 900.0
        assert reset.recurrence == "fixed"
        assert reset.is_manually_adjusted is False

    def test_unlinked_line(self, line_service, chain):
        line = line_service.create_line(chain[0].id, name="Gift", amount=50, kind="expense")

        with pytest.raises(ValidationError):
            line_service.reset_from_template(line.id)
