"""Application-wide constants."""

from typing import Final

# PIN gate
PIN_LENGTH: Final[int] = 4
PIN_MAX_ATTEMPTS: Final[int] = 5
PIN_LOCKOUT_SECONDS: Final[int] = 30
DEFAULT_PIN: Final[str] = "1234"

# Store keys
PIN_CONFIG_KEY: Final[str] = "@pin_config"
LEGACY_PIN_KEY: Final[str] = "@app_pin"
LEGACY_PIN_ENABLED_KEY: Final[str] = "@pin_enabled"

# Remote data service
DEFAULT_API_HOST: Final[str] = "https://nexus-mono.onrender.com"
API_TIMEOUT_SECONDS: Final[int] = 10
RECORD_DOMAINS: Final[tuple[str, ...]] = ("expense", "income", "investment", "lend")

# Expense form
EXPENSE_TITLE_MAX_LENGTH: Final[int] = 50
EXPENSE_CATEGORY_TAGS: Final[dict[str, tuple[str, ...]]] = {
    "Food": ("Swiggy", "Zomato", "EatClub", "Restaurant", "Grocery", "Street Food", "Others"),
    "Groceries": ("Blinkit", "Zomato", "InstaMart", "Others"),
    "Transport": ("Ola", "Uber", "Metro", "Bus", "Train", "Fuel", "Others"),
    "Entertainment": ("Netflix", "Amazon Prime", "Movie Theater", "Concert", "Games", "Others"),
    "Utilities": ("Electricity", "Water", "Gas", "Internet", "Phone Bill", "Others"),
    "Shopping": ("Amazon", "Flipkart", "Mall", "Local Market", "Online Store", "Others"),
    "Health": ("Pharmacy", "Doctor", "Hospital", "Gym", "Supplements", "Tata 1MG", "Others"),
    "Education": ("Books", "Course", "Tuition", "Stationery", "Online Course", "Others"),
    "Travel": ("Flight", "Hotel", "Train", "Bus", "Car", "Metro", "Others"),
    "House": ("Rent", "Maintenance", "Repairs", "Utilities", "Others"),
    "Trip": ("Solo", "Group", "Others"),
    "Others": ("Miscellaneous", "Personal Care", "Gifts", "Donations", "Custom"),
}

# Session keys
EMAIL_VERIFICATION_KEY: Final[str] = "email_verification_status"
USER_ID_KEY: Final[str] = "user_id"
USER_DATA_KEY: Final[str] = "user_data"
AUTH_TOKEN_KEY: Final[str] = "auth_token"
REFRESH_TOKEN_KEY: Final[str] = "refresh_token"
SESSION_KEYS: Final[tuple[str, ...]] = (
    EMAIL_VERIFICATION_KEY,
    USER_ID_KEY,
    USER_DATA_KEY,
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
)

# List filter preferences, stored under "<domain>_filters"
FILTER_TIMEFRAMES: Final[tuple[str, ...]] = ("year", "all")
FILTER_SORT_FIELDS: Final[tuple[str, ...]] = ("date", "amount")
