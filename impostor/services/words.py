"""
Word bank
词库 - 按类别抽取秘密词汇与随机卧底
"""

import random
from typing import Dict, List, Optional

from impostor.core.config import settings


WORD_CATEGORIES: Dict[str, List[str]] = {
    "Places": [
        "Beach", "Cinema", "School", "Hospital", "Park", "Restaurant",
        "Supermarket", "Hotel", "Library", "Shopping mall", "Bakery", "Airport",
        "Stadium", "Swimming pool", "Bar", "Coffee shop", "Club", "Garage",
        "Kitchen", "Bedroom",
    ],
    "Transport": [
        "Car", "Bus", "Airplane", "Ship", "Bicycle", "Motorcycle", "Train",
        "Subway", "Truck",
    ],
    "Animals": [
        "Dog", "Cat", "Bird", "Fish", "Horse", "Cow", "Chicken", "Pig",
        "Rabbit", "Lion", "Tiger", "Elephant", "Monkey", "Bear", "Fox", "Wolf",
        "Giraffe", "Zebra", "Snake", "Turtle",
    ],
    "Food": [
        "Rice", "Beans", "Bread", "Cheese", "Milk", "Coffee", "Tea", "Cake",
        "Pizza", "Pasta", "Hamburger", "Potato", "Salad", "Chicken wings",
        "Steak", "Egg", "Soup", "Sandwich", "Apple", "Banana", "Orange",
        "Grape", "Watermelon", "Ice cream", "Chocolate",
    ],
    "Objects": [
        "Watch", "Phone", "Key", "Wallet", "Glasses", "Backpack", "Notebook",
        "Pen", "Pencil", "Computer", "Television", "Remote control", "Fan",
        "Fridge", "Stove", "Microwave", "Blender", "Chair", "Table", "Sofa",
        "Lamp", "Headphones",
    ],
    "Sports": [
        "Football", "Basketball", "Volleyball", "Tennis", "Swimming", "Running",
        "Cycling", "Skateboarding", "Surfing", "Boxing", "Judo",
        "Weightlifting", "Yoga", "Dancing",
    ],
    "Actions": [
        "Eating", "Drinking", "Sleeping", "Running late", "Walking", "Studying",
        "Working", "Travelling", "Cooking", "Driving", "Shopping", "Reading",
        "Writing", "Talking", "Listening", "Watching", "Playing",
    ],
}


def list_categories() -> List[str]:
    """可选类别，默认类别包含全部词汇"""
    return [settings.DEFAULT_CATEGORY] + sorted(WORD_CATEGORIES)


def words_for_category(category: str) -> List[str]:
    if category == settings.DEFAULT_CATEGORY:
        return [word for words in WORD_CATEGORIES.values() for word in words]
    return list(WORD_CATEGORIES.get(category, []))


def is_known_category(category: str) -> bool:
    return category == settings.DEFAULT_CATEGORY or category in WORD_CATEGORIES


def pick_random_word(category: str, rng: Optional[random.Random] = None) -> str:
    """从类别中随机抽取秘密词汇，未知类别回退到默认类别"""
    rng = rng or random
    words = words_for_category(category) or words_for_category(settings.DEFAULT_CATEGORY)
    return rng.choice(words)


def pick_random_impostors(player_ids: List[str], num_impostors: int,
                          rng: Optional[random.Random] = None) -> List[str]:
    """Uniformly choose ``num_impostors`` distinct ids"""
    rng = rng or random
    return rng.sample(player_ids, num_impostors)
