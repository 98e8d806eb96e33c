from rest_framework.permissions import BasePermission


class IsCampusAdmin(BasePermission):
    message = 'Only campus admins can do this.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_campus_admin)


def acts_for_driver(user, driver):
    """True when `user` may act as `driver`: the hero themself or an admin."""
    if not user or not user.is_authenticated:
        return False
    if user.is_campus_admin:
        return True
    return driver.user_id is not None and driver.user_id == user.id
