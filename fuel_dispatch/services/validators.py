from typing import Optional

from fuel_dispatch.core.environment import get_max_load_per_dispatch
from fuel_dispatch.services.exceptions import InvalidQuantityError


class BusinessRules:
    MIN_QUANTITY = 0.0

    @staticmethod
    def validate_allocated_quantity(quantity: float, available: float):
        if quantity is None or quantity <= BusinessRules.MIN_QUANTITY:
            raise InvalidQuantityError("Allocated quantity must be greater than 0.")
        if quantity > available:
            raise InvalidQuantityError(
                f"Cannot allocate more than the remaining fuel: requested {quantity:g} gal, available {available:g} gal."
            )

    @staticmethod
    def validate_delivered_quantity(quantity: float, ceiling: float):
        if quantity < BusinessRules.MIN_QUANTITY:
            raise InvalidQuantityError("Delivered quantity cannot be negative.")
        if quantity > ceiling:
            raise InvalidQuantityError(
                f"Delivered quantity {quantity:g} gal exceeds the fuel available for this delivery ({ceiling:g} gal)."
            )

    @staticmethod
    def validate_meter_readings(meter_start: Optional[float], meter_end: Optional[float]):
        if meter_start is not None and meter_start < 0:
            raise InvalidQuantityError("Meter start reading cannot be negative.")
        if meter_start is not None and meter_end is not None and meter_end < meter_start:
            raise InvalidQuantityError("Meter end reading must not be lower than the start reading.")

    @staticmethod
    def validate_total_loaded(total_loaded: float, capacity_gal: float):
        max_load = get_max_load_per_dispatch()
        if total_loaded is None or total_loaded <= BusinessRules.MIN_QUANTITY:
            raise InvalidQuantityError("Total loaded must be greater than 0.")
        if total_loaded > capacity_gal:
            raise InvalidQuantityError(
                f"Load exceeds the truck capacity ({capacity_gal:g} gal)."
            )
        if total_loaded > max_load:
            raise InvalidQuantityError(
                f"Load exceeds the maximum per dispatch ({max_load:g} gal)."
            )
