from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Avg, Count


class Gender(models.TextChoices):
    MALE = 'M', 'Male'
    FEMALE = 'F', 'Female'


class ApprovalStatus(models.TextChoices):
    PENDING = 'pending', 'Pending review'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class CustomUser(AbstractUser):
    USER_TYPES = (
        ('R', 'Rider'),
        ('A', 'Admin'),
        ('D', 'Hero'),
    )

    phone = models.CharField(max_length=20, blank=True, null=True)
    user_type = models.CharField(max_length=1, choices=USER_TYPES, default='R')
    gender = models.CharField(max_length=1, choices=Gender.choices, blank=True, null=True)

    @property
    def is_campus_admin(self):
        return self.is_staff or self.user_type == 'A'


class HeroApplication(models.Model):
    """A student's request to drive. Kept after review as the onboarding record."""
    user = models.ForeignKey(
        CustomUser,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='hero_applications',
    )
    name = models.CharField(max_length=120)
    phone = models.CharField(max_length=20)
    gender = models.CharField(max_length=1, choices=Gender.choices)
    vehicle_type = models.CharField(max_length=40)
    vehicle_number = models.CharField(max_length=32)
    # Document upload happens elsewhere; only the reference is stored.
    license_url = models.URLField(blank=True, null=True)
    agreed = models.BooleanField(default=False)
    status = models.CharField(max_length=10, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    submitted_at = models.DateTimeField(auto_now_add=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-submitted_at']
        indexes = [
            models.Index(fields=['status'], name='heroapp_status_idx'),
            models.Index(fields=['submitted_at'], name='heroapp_submitted_idx'),
        ]

    def __str__(self):
        return f"Application {self.id} - {self.name} ({self.status})"


class Driver(models.Model):
    user = models.OneToOneField(
        CustomUser,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='driver_profile',
    )
    application = models.OneToOneField(
        HeroApplication,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='driver',
    )
    name = models.CharField(max_length=120)
    phone = models.CharField(max_length=20)
    gender = models.CharField(max_length=1, choices=Gender.choices)
    vehicle_type = models.CharField(max_length=40, blank=True)
    vehicle_number = models.CharField(max_length=32, blank=True)

    # Approval and availability are independent; matching checks both.
    approval_status = models.CharField(max_length=10, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    is_online = models.BooleanField(default=False)

    total_rides = models.PositiveIntegerField(default=0)
    total_earnings = models.PositiveIntegerField(default=0)
    last_ride_at = models.DateTimeField(null=True, blank=True)

    # At most one ride at a time, kept in step with the ride's own status.
    active_ride = models.OneToOneField(
        'booking.Ride',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='active_driver',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['approval_status', 'is_online'], name='driver_matching_idx'),
            models.Index(fields=['gender'], name='driver_gender_idx'),
        ]

    def __str__(self):
        return f"Hero {self.name} ({self.approval_status})"

    @property
    def is_approved(self):
        return self.approval_status == ApprovalStatus.APPROVED

    @property
    def average_rating(self):
        """Average rating riders left for this driver's completed rides."""
        from booking.models import RideFeedback

        result = RideFeedback.objects.filter(
            ride__driver=self
        ).aggregate(
            average=Avg('rating'),
            count=Count('id')
        )

        avg = result['average']
        if avg is None:
            return {'average': 0.0, 'count': 0}

        return {
            'average': round(float(avg), 1),
            'count': result['count']
        }
