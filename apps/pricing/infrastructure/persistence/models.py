"""
Django ORM models for discounts.
Discounts are edited by the management side; the engine only reads them.
"""

import uuid
from django.db import models


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"
    BOGO = "bogo", "Buy one get one"
    FREE_GIFT = "free_gift", "Free gift"


class ConditionType(models.TextChoices):
    MIN_AMOUNT = "min_amount", "Minimum amount"
    SPECIFIC_PRODUCTS = "specific_products", "Specific products"
    PAYMENT_METHOD = "payment_method", "Payment method"
    CUSTOMER_TIER = "customer_tier", "Customer tier"
    CARD_TYPE = "card_type", "Card type"
    BANK_NAME = "bank_name", "Bank name"


class ConditionOperator(models.TextChoices):
    EQUALS = "equals", "Equals"
    GREATER_THAN = "greater_than", "Greater than"
    LESS_THAN = "less_than", "Less than"
    IN_ARRAY = "in_array", "In list"


class Discount(BaseModel):

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    type = models.CharField(max_length=20, choices=DiscountType.choices)
    value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    free_gift_products = models.JSONField(
        default=list,
        blank=True,
        help_text="Product references handed out for free_gift discounts.",
    )
    min_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_discount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    valid_from = models.DateTimeField()
    valid_to = models.DateTimeField()
    valid_days = models.JSONField(
        null=True,
        blank=True,
        help_text="Weekday indices, 0 = Sunday ... 6 = Saturday. Empty means every day.",
    )
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.name} ({self.get_type_display()} {self.value})"


class DiscountCondition(BaseModel):

    discount = models.ForeignKey(
        Discount,
        related_name="conditions",
        on_delete=models.CASCADE,
    )
    type = models.CharField(max_length=20, choices=ConditionType.choices)
    value = models.JSONField(help_text="Number, string or list depending on the condition type.")
    operator = models.CharField(max_length=20, choices=ConditionOperator.choices, null=True, blank=True)
    min_quantity = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.get_type_display()} {self.operator or 'equals'} {self.value}"
