from sqlalchemy import event

from security.security_generate import user_generate

from .models import Agreement, Payment, User
from .utils import calculate_end_date


@event.listens_for(User, "before_insert")
def normalize_user(mapper, connection, target: User):
    target.normalize()


@event.listens_for(Agreement, "before_insert")
def set_agreement_number(mapper, connection, target: Agreement):
    if not target.agreement_number:
        target.agreement_number = user_generate.generate_agreement_number()


@event.listens_for(Agreement, "before_insert")
@event.listens_for(Agreement, "before_update")
def fill_end_date(mapper, connection, target: Agreement):
    if not target.end_date:
        target.end_date = calculate_end_date(
            target.start_date, target.lease_term_months
        )
    if target.end_date and target.start_date and target.end_date < target.start_date:
        raise ValueError("End date cannot be before start date.")


@event.listens_for(Payment, "before_insert")
def set_payment_reference(mapper, connection, target: Payment):
    if not target.payment_reference:
        target.payment_reference = user_generate.generate_payment_reference()


@event.listens_for(Payment, "before_insert")
@event.listens_for(Payment, "before_update")
def recompute_total(mapper, connection, target: Payment):
    target.total_amount = target.compute_total()
