from django import forms

from .models import ApprovalStatus, HeroApplication


class HeroApplicationForm(forms.ModelForm):
    class Meta:
        model = HeroApplication
        fields = ['name', 'phone', 'gender', 'vehicle_type', 'vehicle_number', 'license_url', 'agreed']

    def clean_phone(self):
        phone = (self.cleaned_data.get('phone') or '').strip()
        digits = phone.replace('+', '').replace(' ', '').replace('-', '')
        if not digits.isdigit() or len(digits) < 10:
            raise forms.ValidationError('Enter a valid phone number.')
        return phone

    def clean_vehicle_number(self):
        return (self.cleaned_data.get('vehicle_number') or '').strip().upper()

    def clean_agreed(self):
        agreed = self.cleaned_data.get('agreed')
        if not agreed:
            raise forms.ValidationError('You must accept the Hero agreement to apply.')
        return agreed


class ApplicationReviewForm(forms.Form):
    status = forms.ChoiceField(choices=[
        (ApprovalStatus.APPROVED, 'Approve'),
        (ApprovalStatus.REJECTED, 'Reject'),
    ])
