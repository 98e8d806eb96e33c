from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from user.models import CustomUser, Driver, Gender

CAMPUS_LOCATIONS = [
    "Gate 1",
    "Gate 2",
    "Ponlait",
    "Science Block",
    "Green Energy Technology",
    "Library",
    "Admin Block",
    "Girls Hostel",
    "Boys Hostel",
    "Rajiv Gandhi Stadium",
    "Thiruvalluvar Stadium",
    "Open Air Theatre",
    "SJ Campus",
    "UMISARC",
    "Mass Media",
]
LOCATION_CHOICES = [(name, name) for name in CAMPUS_LOCATIONS]


class DriverPreference(models.TextChoices):
    MALE = 'M', 'Male hero'
    FEMALE = 'F', 'Female hero'
    ANY = 'Any', 'Any hero'


class RideStatus(models.TextChoices):
    REQUESTED = 'requested', 'Requested'
    ACCEPTED = 'accepted', 'Hero Accepted'
    OTP_VERIFIED = 'otp_verified', 'OTP Verified'
    IN_PROGRESS = 'in_progress', 'Ride In Progress'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


TERMINAL_STATUSES = (RideStatus.COMPLETED, RideStatus.CANCELLED)
ACTIVE_STATUSES = (RideStatus.ACCEPTED, RideStatus.OTP_VERIFIED, RideStatus.IN_PROGRESS)


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'


class CancellationReason(models.TextChoices):
    DECLINED = 'declined', 'Declined'
    EXPIRED = 'expired', 'Request expired'
    ABANDONED = 'abandoned', 'OTP not verified in time'


class Ride(models.Model):
    rider = models.ForeignKey(
        CustomUser,
        on_delete=models.CASCADE,
        related_name='rides',
    )
    driver = models.ForeignKey(
        Driver,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='rides',
    )

    pickup_location = models.CharField(max_length=64, choices=LOCATION_CHOICES)
    drop_location = models.CharField(max_length=64, choices=LOCATION_CHOICES)
    fare = models.PositiveIntegerField()

    status = models.CharField(max_length=16, choices=RideStatus.choices, default=RideStatus.REQUESTED)
    rider_gender = models.CharField(max_length=1, choices=Gender.choices, blank=True, null=True)
    driver_preference = models.CharField(max_length=3, choices=DriverPreference.choices, default=DriverPreference.ANY)

    is_pre_booking = models.BooleanField(default=False)
    scheduled_time = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    otp_verified_at = models.DateTimeField(null=True, blank=True)
    actual_pickup_time = models.DateTimeField(null=True, blank=True)
    actual_drop_time = models.DateTimeField(null=True, blank=True)

    # Pairing code, set once when a hero accepts.
    otp = models.CharField(max_length=8, blank=True, default='')
    payment_status = models.CharField(max_length=8, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    cancellation_reason = models.CharField(max_length=10, choices=CancellationReason.choices, blank=True, default='')

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='ride_status_idx'),
            models.Index(fields=['driver'], name='ride_driver_idx'),
            models.Index(fields=['rider'], name='ride_rider_idx'),
            models.Index(fields=['created_at'], name='ride_created_idx'),
            models.Index(fields=['driver', 'status'], name='ride_driver_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(pickup_location=models.F('drop_location')),
                name='ride_pickup_differs_from_drop',
            ),
        ]

    def __str__(self):
        return f"Ride {self.id} - {self.pickup_location} to {self.drop_location} ({self.status})"

    @property
    def is_active(self):
        return self.status not in TERMINAL_STATUSES

    def request_expires_at(self):
        return self.created_at + timedelta(seconds=settings.CAMPUS_RIDES['RIDE_REQUEST_TTL'])

    def time_remaining(self, now=None):
        """Seconds left before the request stops being offered to heroes."""
        now = now or timezone.now()
        return max(0, int((self.request_expires_at() - now).total_seconds()))


class RideFeedback(models.Model):
    ride = models.OneToOneField(Ride, on_delete=models.CASCADE, related_name='feedback')
    rider = models.ForeignKey(CustomUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='ride_feedback')
    name = models.CharField(max_length=120, blank=True)
    email = models.EmailField(blank=True)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Feedback for ride {self.ride_id}: {self.rating}/5"


class PreBooking(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('cancelled', 'Cancelled'),
        ('completed', 'Completed'),
    ]

    username = models.CharField(max_length=150)
    pickup = models.CharField(max_length=64, choices=LOCATION_CHOICES)
    drop_location = models.CharField(max_length=64, choices=LOCATION_CHOICES)
    scheduled_date = models.DateField()
    scheduled_time = models.TimeField()
    scheduled_datetime = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')

    class Meta:
        ordering = ['scheduled_datetime']
        indexes = [
            models.Index(fields=['scheduled_datetime'], name='prebook_scheduled_idx'),
        ]

    def __str__(self):
        return f"PreBooking {self.id} - {self.username} at {self.scheduled_datetime}"
