from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from common.models import TimeStampedModel


class TicketType(TimeStampedModel):
    """A priced class of tickets for an event, with its own stock."""

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text="Total units on sale")
    quantity_sold = models.PositiveIntegerField(default=0, help_text="Units allocated to purchases")
    early_bird_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    early_bird_end_date = models.DateTimeField(null=True, blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_sold__lte=F("quantity")),
                name="ticket_type_not_oversold",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class TicketPurchase(TimeStampedModel):
    """A line item: some units of one ticket type bought under a registration."""

    registration = models.ForeignKey(
        "events.Registration", on_delete=models.CASCADE, related_name="ticket_purchases"
    )
    ticket_type = models.ForeignKey(TicketType, on_delete=models.PROTECT, related_name="purchases")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.ticket_type_id}"
