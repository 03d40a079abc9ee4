# Utility for loading environment variables
import os
from dotenv import load_dotenv

load_dotenv()

CONGRESS_GOV_API_KEYS = [
    key.strip()
    for key in os.getenv("CONGRESS_GOV_API_KEYS", "").split(",")
    if key.strip()
]
CONGRESS_GOV_API_BASE_URL = os.getenv("CONGRESS_GOV_API_BASE_URL", "https://api.congress.gov/v3")

# As of 6/24/2024, api.congress.gov allows 5k requests per hour per key
RATE_LIMIT_PER_HOUR = int(os.getenv("CONGRESS_API_RATE_LIMIT_PER_HOUR", "5000"))
RETRY_LIMIT = int(os.getenv("CONGRESS_API_RETRY_LIMIT", "3"))
PAGE_SIZE_LIMIT = 250

MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB = os.getenv("MONGO_DB", "chambress")

MAX_WORKERS = int(os.getenv("CHAMBRESS_MAX_WORKERS", "4"))

# Arguments of the default report job
DEFAULT_CHAMBER = os.getenv("CHAMBRESS_CHAMBER", "HOUSE")
DEFAULT_CONGRESS = int(os.getenv("CHAMBRESS_CONGRESS", "118"))

if not CONGRESS_GOV_API_KEYS:
    print("Warning: CONGRESS_GOV_API_KEYS is missing. Please check your .env file.")
