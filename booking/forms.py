from datetime import datetime, timedelta

from django import forms
from django.conf import settings
from django.utils import timezone

from user.models import Gender
from .models import LOCATION_CHOICES, DriverPreference, PreBooking, RideFeedback


class RideRequestForm(forms.Form):
    pickup = forms.ChoiceField(choices=LOCATION_CHOICES)
    drop = forms.ChoiceField(choices=LOCATION_CHOICES)
    preference = forms.ChoiceField(choices=DriverPreference.choices, required=False)
    is_pre_booking = forms.BooleanField(required=False)
    scheduled_time = forms.DateTimeField(required=False)
    rider_gender = forms.ChoiceField(choices=Gender.choices, required=False)

    def clean(self):
        cleaned_data = super().clean()
        pickup = cleaned_data.get('pickup')
        drop = cleaned_data.get('drop')

        if pickup and drop and pickup == drop:
            raise forms.ValidationError('Pickup and drop must be different locations.')

        if cleaned_data.get('is_pre_booking') and not cleaned_data.get('scheduled_time'):
            self.add_error('scheduled_time', 'A scheduled time is required for pre-booking.')

        cleaned_data['preference'] = cleaned_data.get('preference') or DriverPreference.ANY
        cleaned_data['rider_gender'] = cleaned_data.get('rider_gender') or None
        return cleaned_data


class PreBookingForm(forms.Form):
    username = forms.CharField(max_length=150)
    pickup = forms.ChoiceField(choices=LOCATION_CHOICES)
    drop = forms.ChoiceField(choices=LOCATION_CHOICES)
    date = forms.DateField()
    time = forms.TimeField()
    scheduled_datetime = forms.DateTimeField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        pickup = cleaned_data.get('pickup')
        drop = cleaned_data.get('drop')
        if pickup and drop and pickup == drop:
            raise forms.ValidationError('Pickup and drop must be different locations.')

        scheduled = cleaned_data.get('scheduled_datetime')
        if scheduled is None and cleaned_data.get('date') and cleaned_data.get('time'):
            scheduled = timezone.make_aware(datetime.combine(cleaned_data['date'], cleaned_data['time']))
            cleaned_data['scheduled_datetime'] = scheduled

        if scheduled is not None:
            lead = timedelta(hours=settings.CAMPUS_RIDES['PRE_BOOKING_LEAD_HOURS'])
            if scheduled - timezone.now() < lead:
                self.add_error(
                    'scheduled_datetime',
                    f"Pre-bookings must be made at least {settings.CAMPUS_RIDES['PRE_BOOKING_LEAD_HOURS']:g} hour(s) ahead.",
                )
        return cleaned_data

    def save(self):
        data = self.cleaned_data
        return PreBooking.objects.create(
            username=data['username'],
            pickup=data['pickup'],
            drop_location=data['drop'],
            scheduled_date=data['date'],
            scheduled_time=data['time'],
            scheduled_datetime=data['scheduled_datetime'],
        )


class PreBookingStatusForm(forms.Form):
    status = forms.ChoiceField(choices=PreBooking.STATUS_CHOICES)


class RideFeedbackForm(forms.ModelForm):
    class Meta:
        model = RideFeedback
        fields = ['rating', 'message', 'name', 'email']

    def clean_rating(self):
        rating = self.cleaned_data.get('rating')
        if rating is None or not 1 <= rating <= 5:
            raise forms.ValidationError('Rating must be between 1 and 5.')
        return rating
