from .fare import calculate_fare, is_pre_booking_discounted

__all__ = ('calculate_fare', 'is_pre_booking_discounted')
