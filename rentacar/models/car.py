from dataclasses import dataclass


@dataclass(frozen=True)
class Car:
    """
    Catalog car as seen by the reservation engine. The catalog owns the record;
    reservations only keep its `car_id`.
    """
    car_id: str
    price_per_hour: float
    brand: str = ""
    model: str = ""
    builtin: bool = False  # protected demo record, guarded by catalog deletion

    def get_hourly_price(self) -> float:
        return float(self.price_per_hour)
