"""Account generator for seeding repositories."""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator

from digital_bank.generators.base import BaseGenerator
from digital_bank.models import Account
from digital_bank.security import PasswordHasher


class AccountGenerator(BaseGenerator):
    """Generate synthetic bank accounts.

    Account numbers and emails are unique within one generator instance.
    Password digests are produced by ``hasher`` when given; otherwise a
    placeholder digest is stored and the account cannot be logged into.
    """

    BANKS = ["BCA", "BNI", "BRI", "Mandiri", "CIMB Niaga", "Permata", "Danamon", "Jago"]

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        hasher: PasswordHasher | None = None,
    ) -> None:
        super().__init__(seed, locale)
        self.hasher = hasher
        self._numbers: set[str] = set()
        self._emails: set[str] = set()

    def _account_number(self) -> str:
        while True:
            number = f"{self.random.randint(0, 9_999_999_999):010d}"
            if number not in self._numbers:
                self._numbers.add(number)
                return number

    def _email(self) -> str:
        local = self.fake.user_name()
        email = f"{local}@{self.fake.free_email_domain()}"
        suffix = 1
        while email in self._emails:
            suffix += 1
            email = f"{local}{suffix}@{self.fake.free_email_domain()}"
        self._emails.add(email)
        return email

    def generate(self, password: str = "password") -> Account:
        """Generate a single account.

        Parameters
        ----------
        password : str
            Plaintext hashed into the digest when a hasher is configured.

        Returns
        -------
        Account
            Generated account with a balance between 0 and 50 000.
        """
        owner_name = self.fake.name()
        balance = Decimal(self.random.randint(0, 5_000_000)) / 100
        created_at = datetime.now() - timedelta(days=self.random.randint(0, 730))
        digest = self.hasher.hash(password) if self.hasher else "!"

        return Account(
            account_id=self.fake.uuid4().replace("-", ""),
            owner_name=owner_name,
            account_number=self._account_number(),
            bank=self.random.choice(self.BANKS),
            balance=balance.quantize(Decimal("0.01")),
            password_digest=digest,
            email=self._email(),
            created_at=created_at,
        )

    def generate_batch(self, count: int, password: str = "password") -> Iterator[Account]:
        for _ in range(count):
            yield self.generate(password)
