from .generator import RecordGenerator
from .seeder import SeedingService

__all__ = ["RecordGenerator", "SeedingService"]
