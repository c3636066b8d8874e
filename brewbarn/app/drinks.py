"""Saved custom drinks and their add-ons."""
from typing import List

from sqlalchemy.orm import Session, selectinload

from .errors import NotFoundError, ValidationFailure
from ..data.models import AddonType, CustomDrink, DrinkAddon
from ..schemas.order_models import CustomDrinkCreate

FLAVOR_SHOTS = ["vanilla", "caramel", "hazelnut", "chocolate"]
TOPPINGS = ["whipped_cream", "cinnamon", "cocoa", "caramel_drizzle"]
DEFAULT_DRINK_NAME = "My Custom Drink"


def addon_type(name: str) -> AddonType:
    if name in TOPPINGS:
        return AddonType.topping
    if name in FLAVOR_SHOTS:
        return AddonType.flavor
    raise ValidationFailure(f"Unknown add-on: {name}")


class DrinkService:
    def __init__(self, db: Session):
        self.db = db

    def list_drinks(self, user_id: str) -> List[CustomDrink]:
        return (self.db.query(CustomDrink)
                .options(selectinload(CustomDrink.addons))
                .filter(CustomDrink.user_id == user_id)
                .order_by(CustomDrink.id)
                .all())

    def save(self, user_id: str, spec: CustomDrinkCreate) -> CustomDrink:
        # de-duplicate while keeping the order the customer picked them in
        addons = list(dict.fromkeys(spec.addons))
        types = [addon_type(a) for a in addons]
        drink = CustomDrink(
            user_id=user_id,
            name=(spec.name or "").strip() or DEFAULT_DRINK_NAME,
            base_drink=spec.base_drink.value,
            milk_type=spec.milk_type.value,
            sweetness_level=spec.sweetness_level,
        )
        for name, kind in zip(addons, types):
            drink.addons.append(DrinkAddon(addon_type=kind, addon_name=name))
        self.db.add(drink)
        self.db.commit()
        self.db.refresh(drink)
        return drink

    def delete(self, user_id: str, drink_id: int):
        drink = self.db.get(CustomDrink, drink_id)
        if drink is None or drink.user_id != user_id:
            raise NotFoundError("Drink not found")
        self.db.delete(drink)
        self.db.commit()
