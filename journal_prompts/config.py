import os

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379")

TAGGER_PROVIDER = os.environ.get("TAGGER_PROVIDER", "spacy")
SPACY_MODEL = os.environ.get("SPACY_MODEL", "en_core_web_sm")

PROMPT_EXPIRY_DAYS = int(os.environ.get("PROMPT_EXPIRY_DAYS", "7"))
PERSON_WINDOW_DAYS = int(os.environ.get("PERSON_WINDOW_DAYS", "7"))
TOPIC_WINDOW_ENTRIES = int(os.environ.get("TOPIC_WINDOW_ENTRIES", "3"))
MAX_TOPICS = 10
TOPIC_SUGGESTION_CAP = 8

DEFAULT_TONE = os.environ.get("DEFAULT_TONE", "cozy")
DEFAULT_PROMPT_COUNT = int(os.environ.get("DEFAULT_PROMPT_COUNT", "5"))

# Keys in the shared key-value store
BLACKLIST_KEY = "journal:blacklist"
USED_PROMPTS_KEY = "journal:used-prompts"
ENTRIES_KEY = "journal:entries"

WORKER_CONCURRENCY = int(os.environ.get("WORKER_CONCURRENCY", "1"))
MAX_RETRIES = 3
QUEUE_NAME = "metadata:pending"
DEAD_LETTER_QUEUE = "metadata:dead-letter"

if DEFAULT_TONE not in ("cozy", "neutral"):
    raise RuntimeError(
        f"DEFAULT_TONE must be 'cozy' or 'neutral', got {DEFAULT_TONE!r}"
    )
