import pytest

from paycli.common.state_machine import PaymentState
from paycli.services.processor.dispatcher import CommandDispatcher
from paycli.services.processor.models import Payment
from paycli.services.processor.service import PaymentProcessor
from paycli.services.processor.store import InMemoryPaymentStore, PaymentTimeline


@pytest.fixture
def store():
    return InMemoryPaymentStore()


@pytest.fixture
def timeline():
    return PaymentTimeline()


@pytest.fixture
def processor(store, timeline):
    return PaymentProcessor(store, timeline, service_name="paycli-test")


@pytest.fixture
def dispatcher(processor):
    return CommandDispatcher(processor)


@pytest.fixture
def seed_payment(store):
    """Insert a payment directly in the given state."""

    def _seed(payment_id: str = "P1", state: PaymentState = PaymentState.INITIATED, amount_cents: int = 1000):
        payment = Payment(
            id=payment_id,
            amount=f"{amount_cents / 100:.2f}",
            amount_cents=amount_cents,
            currency="MYR",
            merchant_id="M01",
            state=state,
        )
        store.upsert(payment_id, payment)
        return payment

    return _seed
