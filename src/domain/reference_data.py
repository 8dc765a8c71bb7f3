from __future__ import annotations

MENU_CATEGORIES = [
    {"name": "Starters", "description": "Small plates to begin with", "parentCategory": ""},
    {"name": "Main Course", "description": "Hearty mains", "parentCategory": ""},
    {"name": "Desserts", "description": "Something sweet", "parentCategory": ""},
    {"name": "Beverages", "description": "Hot and cold drinks", "parentCategory": ""},
    {"name": "Hot Drinks", "description": "", "parentCategory": "Beverages"},
    {"name": "Cold Drinks", "description": "", "parentCategory": "Beverages"},
    {"name": "Today's Special", "description": "Chef's daily picks", "parentCategory": ""},
]

MENU_ITEMS = [
    {
        "name": "Caesar Salad",
        "price": 12.99,
        "category": "Starters",
        "description": "Fresh romaine lettuce, parmesan cheese, croutons, and Caesar dressing",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.5,
    },
    {
        "name": "Buffalo Wings",
        "price": 14.99,
        "category": "Starters",
        "description": "Crispy chicken wings tossed in spicy buffalo sauce, served with ranch dip",
        "isVegetarian": False,
        "isSpicy": True,
        "isVisible": True,
        "rating": 4.7,
    },
    {
        "name": "Bruschetta",
        "price": 9.99,
        "category": "Starters",
        "description": "Toasted bread topped with tomatoes, garlic, basil and olive oil",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.4,
    },
    {
        "name": "Grilled Salmon",
        "price": 24.99,
        "category": "Main Course",
        "description": "Atlantic salmon with seasonal vegetables and lemon butter sauce",
        "isVegetarian": False,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.8,
    },
    {
        "name": "Margherita Pizza",
        "price": 18.99,
        "category": "Main Course",
        "description": "Fresh mozzarella, tomato sauce and basil on a wood-fired crust",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.6,
    },
    {
        "name": "Spicy Chicken Curry",
        "price": 19.99,
        "category": "Main Course",
        "description": "Chicken in a rich, aromatic curry sauce with basmati rice",
        "isVegetarian": False,
        "isSpicy": True,
        "isVisible": True,
        "rating": 4.5,
    },
    {
        "name": "Chocolate Lava Cake",
        "price": 8.99,
        "category": "Desserts",
        "description": "Warm chocolate cake with a molten center and vanilla ice cream",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.9,
    },
    {
        "name": "Tiramisu",
        "price": 7.99,
        "category": "Desserts",
        "description": "Coffee-soaked ladyfingers layered with mascarpone cream",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.7,
    },
    {
        "name": "Fresh Orange Juice",
        "price": 4.99,
        "category": "Beverages",
        "subcategory": "Cold Drinks",
        "description": "Freshly squeezed oranges",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.3,
    },
    {
        "name": "Iced Coffee",
        "price": 5.99,
        "category": "Beverages",
        "subcategory": "Cold Drinks",
        "description": "Cold brew coffee over ice with optional milk",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.4,
    },
    {
        "name": "Cappuccino",
        "price": 4.49,
        "category": "Beverages",
        "subcategory": "Hot Drinks",
        "description": "Espresso with steamed milk foam",
        "isVegetarian": True,
        "isSpicy": False,
        "isVisible": True,
        "rating": 4.6,
    },
]
