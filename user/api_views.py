import logging

from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.authtoken.serializers import AuthTokenSerializer
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from booking.exceptions import ValidationError
from booking.utils import build_application_payload, first_form_error
from . import services
from .forms import ApplicationReviewForm, HeroApplicationForm
from .models import HeroApplication
from .permissions import IsCampusAdmin

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Exchange username/password for an API token and the caller's role."""
    serializer = AuthTokenSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        logger.warning("Failed login for %s", request.data.get('username'))
        raise ValidationError('Invalid username or password.')

    user = serializer.validated_data['user']
    token, _ = Token.objects.get_or_create(user=user)
    driver = getattr(user, 'driver_profile', None)

    return Response({
        'token': token.key,
        'principal': {
            'id': user.id,
            'username': user.username,
            'userType': 'A' if user.is_campus_admin else user.user_type,
            'driverId': driver.id if driver else None,
        },
    })


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def hero_applications(request):
    if request.method == 'GET':
        if not (request.user.is_authenticated and request.user.is_campus_admin):
            raise PermissionDenied('Only campus admins can list hero applications.')
        return Response({
            'applications': [build_application_payload(a) for a in HeroApplication.objects.all()],
        })

    data = request.data
    form = HeroApplicationForm({
        'name': data.get('name'),
        'phone': data.get('phone'),
        'gender': data.get('gender'),
        'vehicle_type': data.get('vehicleType', data.get('vehicle_type')),
        'vehicle_number': data.get('vehicleNumber', data.get('vehicle_number')),
        'license_url': data.get('licenseUrl', data.get('license_url')) or '',
        'agreed': data.get('agreed'),
    })
    if not form.is_valid():
        raise ValidationError(first_form_error(form))

    user = request.user if request.user.is_authenticated else None
    application = services.submit_application(form.cleaned_data, user=user)
    return Response(build_application_payload(application), status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsCampusAdmin])
def review_application(request, application_id):
    form = ApplicationReviewForm(request.data)
    if not form.is_valid():
        raise ValidationError("Status must be 'approved' or 'rejected'.")

    application = services.review_application(application_id, form.cleaned_data['status'])
    return Response(build_application_payload(application))
