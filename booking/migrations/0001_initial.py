import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

LOCATIONS = [
    ('Gate 1', 'Gate 1'), ('Gate 2', 'Gate 2'), ('Ponlait', 'Ponlait'), ('Science Block', 'Science Block'),
    ('Green Energy Technology', 'Green Energy Technology'), ('Library', 'Library'), ('Admin Block', 'Admin Block'),
    ('Girls Hostel', 'Girls Hostel'), ('Boys Hostel', 'Boys Hostel'), ('Rajiv Gandhi Stadium', 'Rajiv Gandhi Stadium'),
    ('Thiruvalluvar Stadium', 'Thiruvalluvar Stadium'), ('Open Air Theatre', 'Open Air Theatre'),
    ('SJ Campus', 'SJ Campus'), ('UMISARC', 'UMISARC'), ('Mass Media', 'Mass Media'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('user', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Ride',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('pickup_location', models.CharField(choices=LOCATIONS, max_length=64)),
                ('drop_location', models.CharField(choices=LOCATIONS, max_length=64)),
                ('fare', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('requested', 'Requested'), ('accepted', 'Hero Accepted'), ('otp_verified', 'OTP Verified'), ('in_progress', 'Ride In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='requested', max_length=16)),
                ('rider_gender', models.CharField(blank=True, choices=[('M', 'Male'), ('F', 'Female')], max_length=1, null=True)),
                ('driver_preference', models.CharField(choices=[('M', 'Male hero'), ('F', 'Female hero'), ('Any', 'Any hero')], default='Any', max_length=3)),
                ('is_pre_booking', models.BooleanField(default=False)),
                ('scheduled_time', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('otp_verified_at', models.DateTimeField(blank=True, null=True)),
                ('actual_pickup_time', models.DateTimeField(blank=True, null=True)),
                ('actual_drop_time', models.DateTimeField(blank=True, null=True)),
                ('otp', models.CharField(blank=True, default='', max_length=8)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid')], default='pending', max_length=8)),
                ('cancellation_reason', models.CharField(blank=True, choices=[('declined', 'Declined'), ('expired', 'Request expired'), ('abandoned', 'OTP not verified in time')], default='', max_length=10)),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rides', to='user.driver')),
                ('rider', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rides', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='ride_status_idx'),
                    models.Index(fields=['driver'], name='ride_driver_idx'),
                    models.Index(fields=['rider'], name='ride_rider_idx'),
                    models.Index(fields=['created_at'], name='ride_created_idx'),
                    models.Index(fields=['driver', 'status'], name='ride_driver_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('pickup_location', models.F('drop_location')), _negated=True), name='ride_pickup_differs_from_drop'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PreBooking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('username', models.CharField(max_length=150)),
                ('pickup', models.CharField(choices=LOCATIONS, max_length=64)),
                ('drop_location', models.CharField(choices=LOCATIONS, max_length=64)),
                ('scheduled_date', models.DateField()),
                ('scheduled_time', models.TimeField()),
                ('scheduled_datetime', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled'), ('completed', 'Completed')], default='pending', max_length=10)),
            ],
            options={
                'ordering': ['scheduled_datetime'],
                'indexes': [
                    models.Index(fields=['scheduled_datetime'], name='prebook_scheduled_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RideFeedback',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, max_length=120)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('rating', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('message', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('ride', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='feedback', to='booking.ride')),
                ('rider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ride_feedback', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
