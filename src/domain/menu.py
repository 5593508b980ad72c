"""Servery menus by meal time.  Every servery serves the same rotation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .enums import MealTime

BREAKFAST_START_HOUR = 6
BREAKFAST_END_HOUR = 11


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    category: str
    price: Decimal


def meal_time(now: Optional[datetime] = None) -> MealTime:
    hour = (now or datetime.now()).hour
    if BREAKFAST_START_HOUR <= hour < BREAKFAST_END_HOUR:
        return MealTime.BREAKFAST
    return MealTime.LUNCH_DINNER


def _item(id: str, name: str, category: str, price: str) -> MenuItem:
    return MenuItem(id, name, category, Decimal(price))


MENU: dict[MealTime, list[MenuItem]] = {
    MealTime.BREAKFAST: [
        _item("plant-egg-scramble", "Plant-based egg scramble", "Plant-based Options", "3.50"),
        _item("plant-tacos", "Plant-based tacos", "Plant-based Options", "4.00"),
        _item("plant-rice", "Plant-based rice", "Plant-based Options", "2.50"),
        _item("plant-beans", "Plant-based beans and plantains", "Plant-based Options", "3.00"),
        _item("scrambled-eggs", "Scrambled eggs", "Traditional", "2.75"),
        _item("egg-whites", "Egg whites", "Traditional", "2.50"),
        _item("bacon", "Bacon", "Traditional", "3.25"),
        _item("sausage", "Sausage patties", "Traditional", "3.00"),
        _item("tacos", "Grab-n-go tacos and sandwiches", "Traditional", "4.50"),
        _item("biscuits", "Biscuits and gravy", "Traditional", "3.75"),
        _item("yogurt", "Yogurt and Fruit Bar", "Healthy Options", "2.25"),
        _item("oatmeal", "Warm oatmeal or grits", "Healthy Options", "2.00"),
        _item("muffins", "Fresh muffins and pastries", "Bakery", "1.75"),
    ],
    MealTime.LUNCH_DINNER: [
        _item("deli", "Self-serve deli sandwich station", "Deli", "5.50"),
        _item("soup-salad", "Soup & Salad Station", "Healthy Options", "4.25"),
        _item("grill-chicken", "Halal chicken", "Grill", "6.00"),
        _item("fries", "French fries", "Grill", "2.50"),
        _item("plant-burger", "Plant-based burgers", "Grill", "5.75"),
        _item("baked-potato", "Baked potatoes", "Grill", "3.50"),
        _item("sweet-potato", "Sweet potatoes", "Grill", "3.75"),
        _item("pizza", "Selection of pizza", "Pizza & Pasta", "4.50"),
        _item("pasta", "Pasta and sauces", "Pizza & Pasta", "5.00"),
        _item("sweets", "Cookies, brownies, cakes and pies", "Desserts", "2.25"),
    ],
}


def find_item(item_id: str, when: MealTime) -> Optional[MenuItem]:
    return next((item for item in MENU[when] if item.id == item_id), None)
