import uuid

from models.utils import utcnow


class UserGenerate:
    def generate_reference(self, prefix: str = "PAY") -> str:
        stamp = utcnow().strftime("%Y%m%d")
        return f"{prefix}-{stamp}-{uuid.uuid4().hex[:10].upper()}"

    def generate_agreement_number(self) -> str:
        return self.generate_reference(prefix="AGR")

    def generate_payment_reference(self) -> str:
        return self.generate_reference(prefix="PAY")


user_generate = UserGenerate()
