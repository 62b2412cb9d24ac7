# ==============================================
# RecordGenerator - Synthetic Users
# ==============================================
#
# PURPOSE:
#   Produces realistic-looking user records for filling the source
#   index in development and test environments.
#
# FIELDS:
#   id              → random UUID4 string
#   first_name      → Faker first name
#   last_name       → Faker last name
#   age             → uniform in [min_age, max_age]
#   followers_count → uniform in [min_followers, max_followers]
#   timestamp       → current UTC time (millisecond precision)
#
# Passing seed= makes the names and numbers reproducible; ids stay
# random so two seeded runs never collide on the same index.
#
# ==============================================

import uuid
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from faker import Faker

from ..storage.record import MAX_AGE, MAX_FOLLOWERS, Record
from ..storage.record_store import check_batch_size


class RecordGenerator:
    def __init__(
        self,
        min_age: int = 18,
        max_age: int = 80,
        min_followers: int = 0,
        max_followers: int = 100000,
        seed: Optional[int] = None,
        locale: str = "en_US",
    ):
        if not 0 <= min_age <= max_age <= MAX_AGE:
            raise ValueError(f"Invalid age range: {min_age}..{max_age}")
        if not 0 <= min_followers <= max_followers <= MAX_FOLLOWERS:
            raise ValueError(f"Invalid followers range: {min_followers}..{max_followers}")

        self.min_age = min_age
        self.max_age = max_age
        self.min_followers = min_followers
        self.max_followers = max_followers

        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)

    def generate_record(self) -> Record:
        return Record(
            id=str(uuid.uuid4()),
            first_name=self.faker.first_name(),
            last_name=self.faker.last_name(),
            age=self.faker.random_int(min=self.min_age, max=self.max_age),
            followers_count=self.faker.random_int(min=self.min_followers, max=self.max_followers),
            timestamp=datetime.now(timezone.utc),
        )

    def generate_records(self, count: int) -> List[Record]:
        return [self.generate_record() for _ in range(count)]

    def generate_batches(self, total: int, batch_size: int) -> Iterator[List[Record]]:
        """
        Lazily yield `total` records in batches of `batch_size`.

        The last batch holds the remainder; nothing is generated for a
        batch until the consumer asks for it.
        """
        check_batch_size(batch_size)
        if total < 0:
            raise ValueError(f"total must not be negative, got {total}")

        for offset in range(0, total, batch_size):
            yield self.generate_records(min(batch_size, total - offset))
