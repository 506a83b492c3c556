"""
Built-in labelled expense names used when no training CSV is given.

Labels are the model's raw categories; config/classifier.yaml maps them onto
the app's category list.
"""

TRAINING_DATA = [
    # Food & Drink
    ("Starbucks latte", "Food & Drink"),
    ("Lunch at cafe", "Food & Drink"),
    ("Pizza delivery", "Food & Drink"),
    ("Dinner with friends", "Food & Drink"),
    ("Coffee and bagel", "Food & Drink"),
    ("McDonalds burger", "Food & Drink"),
    ("Sushi restaurant", "Food & Drink"),
    ("Zomato order", "Food & Drink"),
    ("Breakfast at diner", "Food & Drink"),
    ("Bubble tea", "Food & Drink"),
    # Groceries
    ("Grocery run", "Groceries"),
    ("Walmart groceries", "Groceries"),
    ("Milk and eggs", "Groceries"),
    ("Vegetables from market", "Groceries"),
    ("Supermarket shopping", "Groceries"),
    ("Fruit and bread", "Groceries"),
    ("Instacart order", "Groceries"),
    ("Costco bulk rice", "Groceries"),
    # Bills & Utilities
    ("Electricity bill", "Bills & Utilities"),
    ("Water bill", "Bills & Utilities"),
    ("Mobile bill", "Bills & Utilities"),
    ("Internet broadband", "Bills & Utilities"),
    ("Gas utility payment", "Bills & Utilities"),
    ("Rent payment", "Bills & Utilities"),
    ("Mobile recharge", "Bills & Utilities"),
    ("Netflix subscription", "Bills & Utilities"),
    # Travel
    ("Flight to Delhi", "Travel"),
    ("Hotel booking", "Travel"),
    ("Train tickets", "Travel"),
    ("Airbnb stay", "Travel"),
    ("Airport parking", "Travel"),
    # Transport
    ("Uber to airport", "Transport"),
    ("Taxi ride home", "Transport"),
    ("Bus pass", "Transport"),
    ("Fuel for car", "Transport"),
    ("Petrol refill", "Transport"),
    ("Metro card top up", "Transport"),
    ("Lyft ride", "Transport"),
    ("Car service", "Transport"),
    # Shopping
    ("Amazon order", "Shopping"),
    ("New shoes", "Shopping"),
    ("Clothes at mall", "Shopping"),
    ("Headphones", "Shopping"),
    ("Birthday gift", "Shopping"),
    ("Furniture store", "Shopping"),
    ("Target household items", "Shopping"),
    # Entertainment
    ("Movie tickets", "Entertainment"),
    ("Concert tickets", "Entertainment"),
    ("Video game", "Entertainment"),
    ("Bowling night", "Entertainment"),
    ("Theme park entry", "Entertainment"),
    ("Spotify premium", "Entertainment"),
    # Health
    ("Pharmacy medicine", "Health"),
    ("Doctor visit", "Health"),
    ("Dentist appointment", "Health"),
    ("Gym membership", "Health"),
    ("Vitamins", "Health"),
    ("Health insurance premium", "Health"),
    # Education
    ("College tuition", "Education"),
    ("Textbooks", "Education"),
    ("Online course", "Education"),
    ("School fees", "Education"),
    ("Stationery supplies", "Education"),
    ("Exam registration", "Education"),
    # Services
    ("Haircut at salon", "Services"),
    ("Laundry service", "Services"),
    ("Plumber repair", "Services"),
    ("House cleaning", "Services"),
    ("Dry cleaning", "Services"),
]
