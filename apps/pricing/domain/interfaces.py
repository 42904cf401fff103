from abc import ABC, abstractmethod
from typing import List

from apps.pricing.domain.models import Discount


class BaseDiscountRepository(ABC):
    @abstractmethod
    def get_active(self) -> List[Discount]:
        """Active discounts in declaration order, conditions included."""
