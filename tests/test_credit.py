"""Tests for store-credit customers, purchases, payments and settlement."""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from stallpilot.core.credit import (
    create_customer,
    customer_ledger,
    list_customers,
    register_payment,
    register_purchase,
)
from stallpilot.core.errors import BusinessRuleError, NotFoundError, ValidationError
from stallpilot.models.credit import CreditLedgerEntry
from stallpilot.models.enums import LedgerEntryKind, PaymentType
from stallpilot.models.sale import Sale
from tests.factories import CreditCustomerFactory, ShiftFactory


@pytest.fixture
async def shift(db_session, staff_user):
    return await ShiftFactory.create(db_session, staff_user)


@pytest.fixture
async def customer(db_session):
    return await CreditCustomerFactory.create(db_session, name="Dona Maria")


async def _entries(db_session, customer, kind=None):
    stmt = select(CreditLedgerEntry).where(CreditLedgerEntry.customer_id == customer.id)
    if kind is not None:
        stmt = stmt.where(CreditLedgerEntry.kind == kind)
    return list((await db_session.execute(stmt)).scalars().all())


class TestCustomers:
    async def test_create(self, db_session):
        customer = await create_customer(db_session, "  Seu Jorge ", "11 99999-0000")
        assert customer.name == "Seu Jorge"
        assert customer.balance_owed == 0
        assert customer.settled_at is None

    async def test_create_requires_name(self, db_session):
        with pytest.raises(ValidationError):
            await create_customer(db_session, "  ")

    async def test_list_orders_by_debt_then_name(self, db_session):
        await CreditCustomerFactory.create(db_session, name="Beto", balance_owed=Decimal("10.00"))
        await CreditCustomerFactory.create(db_session, name="Ana", balance_owed=Decimal("10.00"))
        await CreditCustomerFactory.create(db_session, name="Caio", balance_owed=Decimal("50.00"))
        await CreditCustomerFactory.create(db_session, name="Dani", is_active=False)

        names = [c.name for c in await list_customers(db_session)]

        assert names == ["Caio", "Ana", "Beto"]

    async def test_list_filters_by_name(self, db_session):
        await CreditCustomerFactory.create(db_session, name="Maria Clara")
        await CreditCustomerFactory.create(db_session, name="Joana")

        names = [c.name for c in await list_customers(db_session, "mar")]

        assert names == ["Maria Clara"]

    async def test_ledger_of_unknown_customer(self, db_session):
        with pytest.raises(NotFoundError):
            await customer_ledger(db_session, uuid.uuid4())


class TestPurchases:
    async def test_purchase_creates_credit_sale_and_raises_balance(
        self, db_session, customer, shift, staff_user
    ):
        entry = await register_purchase(
            db_session, customer.id, Decimal("12.00"), staff_user.id, shift.id, Decimal("2")
        )

        await db_session.refresh(customer)
        assert customer.balance_owed == Decimal("12.00")
        assert entry.kind == LedgerEntryKind.PURCHASE
        assert entry.marked_paid is False

        sale = (await db_session.execute(select(Sale).where(Sale.id == entry.sale_id))).scalar_one()
        assert sale.payment_type == PaymentType.CREDIT
        assert sale.credit_customer_id == customer.id
        assert sale.shift_id == shift.id
        assert sale.liters == Decimal("2")

    async def test_purchase_reopens_settled_account(self, db_session, customer, shift, staff_user):
        await register_purchase(db_session, customer.id, Decimal("5.00"), staff_user.id, shift.id)
        await register_payment(db_session, customer.id, Decimal("5.00"), staff_user.id)
        await db_session.refresh(customer)
        assert customer.settled_at is not None

        await register_purchase(db_session, customer.id, Decimal("3.00"), staff_user.id, shift.id)

        await db_session.refresh(customer)
        assert customer.settled_at is None
        assert customer.balance_owed == Decimal("3.00")

    async def test_inactive_customer(self, db_session, shift, staff_user):
        gone = await CreditCustomerFactory.create(db_session, name="Gone", is_active=False)
        with pytest.raises(NotFoundError):
            await register_purchase(db_session, gone.id, Decimal("1.00"), staff_user.id, shift.id)


class TestPayments:
    async def test_overpayment_is_rejected_without_changes(
        self, db_session, customer, shift, staff_user
    ):
        await register_purchase(db_session, customer.id, Decimal("10.00"), staff_user.id, shift.id)

        with pytest.raises(BusinessRuleError) as exc_info:
            await register_payment(db_session, customer.id, Decimal("10.01"), staff_user.id)

        assert exc_info.value.code == "PAYMENT_EXCEEDS_BALANCE"
        await db_session.refresh(customer)
        assert customer.balance_owed == Decimal("10.00")
        assert await _entries(db_session, customer, LedgerEntryKind.PAYMENT) == []

    async def test_payment_with_nothing_owed_is_rejected(self, db_session, customer, staff_user):
        with pytest.raises(BusinessRuleError):
            await register_payment(db_session, customer.id, Decimal("1.00"), staff_user.id)

    async def test_non_positive_payment(self, db_session, customer, staff_user):
        with pytest.raises(ValidationError):
            await register_payment(db_session, customer.id, Decimal("0"), staff_user.id)

    async def test_partial_payment_keeps_purchases_open(self, db_session, customer, shift, staff_user):
        await register_purchase(db_session, customer.id, Decimal("10.00"), staff_user.id, shift.id)

        await register_payment(db_session, customer.id, Decimal("4.00"), staff_user.id)

        await db_session.refresh(customer)
        assert customer.balance_owed == Decimal("6.00")
        assert customer.settled_at is None
        purchases = await _entries(db_session, customer, LedgerEntryKind.PURCHASE)
        assert [p.marked_paid for p in purchases] == [False]

    async def test_exact_payoff_settles_and_marks_purchases_paid(
        self, db_session, customer, shift, staff_user
    ):
        await register_purchase(db_session, customer.id, Decimal("10.00"), staff_user.id, shift.id)
        await register_purchase(db_session, customer.id, Decimal("5.50"), staff_user.id, shift.id)
        await register_payment(db_session, customer.id, Decimal("6.00"), staff_user.id)

        payment = await register_payment(db_session, customer.id, Decimal("9.50"), staff_user.id)

        await db_session.refresh(customer)
        assert customer.balance_owed == 0
        assert customer.settled_at == payment.date

        purchases = await _entries(db_session, customer, LedgerEntryKind.PURCHASE)
        assert len(purchases) == 2
        assert all(p.marked_paid for p in purchases)
        assert all(p.paid_at == payment.date for p in purchases)

    async def test_settlement_leaves_other_customers_alone(
        self, db_session, customer, shift, staff_user
    ):
        other = await CreditCustomerFactory.create(db_session, name="Other")
        await register_purchase(db_session, other.id, Decimal("3.00"), staff_user.id, shift.id)
        await register_purchase(db_session, customer.id, Decimal("3.00"), staff_user.id, shift.id)

        await register_payment(db_session, customer.id, Decimal("3.00"), staff_user.id)

        other_purchases = await _entries(db_session, other, LedgerEntryKind.PURCHASE)
        assert [p.marked_paid for p in other_purchases] == [False]

    async def test_ledger_lists_newest_first(self, db_session, customer, shift, staff_user):
        await register_purchase(db_session, customer.id, Decimal("8.00"), staff_user.id, shift.id)
        await register_payment(db_session, customer.id, Decimal("2.00"), staff_user.id)

        found, entries = await customer_ledger(db_session, customer.id)

        assert found.id == customer.id
        assert [e.kind for e in entries] == [LedgerEntryKind.PAYMENT, LedgerEntryKind.PURCHASE]


class TestCreditOverHttp:
    async def test_full_flow(self, staff_client):
        response = await staff_client.post("/credit/customers", data={"name": "Seu Ze", "phone": ""})
        assert response.status_code == 201
        customer_id = response.json()["id"]

        response = await staff_client.post(
            "/credit/purchases", data={"customer_id": customer_id, "amount": "15.00"}
        )
        assert response.status_code == 201

        response = await staff_client.post(
            "/credit/payments", data={"customer_id": customer_id, "amount": "20.00"}
        )
        assert response.status_code == 409
        assert response.json()["code"] == "PAYMENT_EXCEEDS_BALANCE"
        assert response.json()["details"]["balance_owed"] == "15.00"

        response = await staff_client.post(
            "/credit/payments", data={"customer_id": customer_id, "amount": "15.00"}
        )
        assert response.status_code == 201

        detail = (await staff_client.get(f"/credit/customers/{customer_id}")).json()
        assert Decimal(detail["customer"]["balance_owed"]) == 0
        assert detail["customer"]["settled_at"] is not None
        assert all(e["marked_paid"] for e in detail["entries"])

    async def test_list_customers(self, staff_client, db_session):
        await CreditCustomerFactory.create(db_session, name="Lia", balance_owed=Decimal("4.00"))
        response = await staff_client.get("/credit/customers", params={"q": "li"})
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Lia"]

    async def test_admin_can_read_but_not_sell(self, admin_client, db_session):
        customer = await CreditCustomerFactory.create(db_session)

        assert (await admin_client.get("/credit/customers")).status_code == 200
        response = await admin_client.post(
            "/credit/purchases", data={"customer_id": str(customer.id), "amount": "1.00"}
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/admin"

    async def test_unknown_customer(self, staff_client):
        response = await staff_client.get(f"/credit/customers/{uuid.uuid4()}")
        assert response.status_code == 404

    async def test_invalid_customer_id(self, staff_client):
        response = await staff_client.post(
            "/credit/payments", data={"customer_id": "abc", "amount": "1.00"}
        )
        assert response.status_code == 422
