# src/pupil_anonymiser/config/__init__.py

"""
Tunable settings in one place.

- pseudonym scheme defaults
- name column detection
- name-leak check word lists
- OpenAI / LLM settings
"""


# -------------------------
# Pseudonyms
# -------------------------
# '#' run is replaced by the zero-padded number: "Pupil-###" -> Pupil-001
DEFAULT_PSEUDONYM_SCHEME: str = "Pupil-###"
DEFAULT_START_AT: int = 1

# Width used when a template has no '#' in it
DEFAULT_NUMBER_WIDTH: int = 3

# Named cyclical scheme: Alpha-1 .. Omega-1, Alpha-2 ..
GREEK_SCHEME_NAME: str = "Greek"
GREEK_LETTERS: tuple[str, ...] = (
    "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta",
    "Iota", "Kappa", "Lambda", "Mu", "Nu", "Xi", "Omicron", "Pi",
    "Rho", "Sigma", "Tau", "Upsilon", "Phi", "Chi", "Psi", "Omega",
)


# -------------------------
# Name column detection
# -------------------------
# Checked in this order, case-insensitively
NAME_COLUMN_CANDIDATES: tuple[str, ...] = (
    "name",
    "pupil",
    "pupil name",
    "student",
    "child",
    "full name",
)


# -------------------------
# Name-leak check
# -------------------------
# Name column values containing these are programme codes, not pupils
BLOCKED_NAME_KEYWORDS: tuple[str, ...] = ("group", "test", "spelling", "inc", "plp", "hast")

NAME_MIN_LENGTH: int = 2
NAME_MAX_LENGTH: int = 60

# Shortest name part (first name / surname) searched for on its own
NAME_PART_MIN_LENGTH: int = 2

COMMON_FIRST_NAMES: tuple[str, ...] = (
    # Boys
    "Aaron", "Adam", "Alex", "Alexander", "Alfie", "Archie", "Arthur", "Ben",
    "Benjamin", "Billy", "Charlie", "Connor", "Daniel", "David", "Dylan",
    "Edward", "Eli", "Ethan", "Felix", "Finley", "Freddie", "George", "Harrison",
    "Harry", "Harvey", "Henry", "Hugo", "Isaac", "Jack", "Jacob", "Jake",
    "James", "Jayden", "Joe", "Joel", "John", "Joseph", "Joshua", "Leo",
    "Lewis", "Liam", "Logan", "Luca", "Lucas", "Luke", "Mason", "Matthew",
    "Max", "Michael", "Mohammed", "Muhammad", "Nathan", "Noah", "Oliver",
    "Oscar", "Reuben", "Riley", "Robert", "Ryan", "Samuel", "Sebastian",
    "Sonny", "Theo", "Theodore", "Thomas", "Toby", "Tyler", "William", "Zachary",
    # Girls
    "Abigail", "Alice", "Amelia", "Ava", "Bella", "Charlotte", "Chloe", "Daisy",
    "Ella", "Ellie", "Emily", "Emma", "Erin", "Evie", "Faith", "Florence",
    "Freya", "Grace", "Hannah", "Harper", "Holly", "Imogen", "Isabel",
    "Isabella", "Isabelle", "Isla", "Ivy", "Jessica", "Katie", "Lacey", "Layla",
    "Lily", "Lola", "Lucy", "Matilda", "Megan", "Mia", "Millie", "Molly",
    "Nancy", "Olivia", "Phoebe", "Poppy", "Rosie", "Ruby", "Scarlett", "Sienna",
    "Sophia", "Sophie", "Summer", "Willow", "Zara",
    # Unisex / common modern
    "Bailey", "Drew", "Elliot", "Frankie", "Harley", "Jamie", "Jesse",
    "Jordan", "Morgan", "Rowan", "Taylor",
)


# -------------------------
# LLM / OpenAI
# -------------------------
OPENAI_DEFAULT_BASE_URL: str = "https://api.openai.com/v1"
OPENAI_API_KEY_ENV: str = "OPENAI_API_KEY"
DEFAULT_REPORT_MODEL: str = "gpt-4o-mini"

LLM_REPORT_TEMPERATURE: float = 0.4
LLM_REPORT_TIMEOUT: int = 120
LLM_REPORT_MAX_TOKENS: int = 2048
LLM_DEFAULT_MAX_RETRIES: int = 3
LLM_DEFAULT_RETRY_DELAY: float = 2.0  # seconds

# Per-role LLM settings
LLM_PROFILES = {
    "reports": {
        "provider": "openai",
        "model": DEFAULT_REPORT_MODEL,
        "base_url": OPENAI_DEFAULT_BASE_URL,
        "api_key_env": OPENAI_API_KEY_ENV,
        "timeout": LLM_REPORT_TIMEOUT,
    },
}

# Report tones offered to the teacher
REPORT_TONES: tuple[str, ...] = ("balanced", "warm", "concise")
DEFAULT_REPORT_TONE: str = "balanced"


# -------------------------
# Paths
# -------------------------
DEFAULT_LOG_PATH: str = "logs/app.log"
DEFAULT_AUDIT_PATH: str = "data/outputs/audit_log.jsonl"
AUDIT_TIMEZONE: str = "Europe/London"
