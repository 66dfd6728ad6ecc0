"""Constants for classification and fill execution."""

# Scoring weights (keyword, pattern, context, input type)
KEYWORD_WEIGHT = 0.4
PATTERN_WEIGHT = 0.3
CONTEXT_WEIGHT = 0.2
TYPE_WEIGHT = 0.1
DEFAULT_CONFIDENCE_THRESHOLD = 0.5
MAX_ALTERNATES = 3
NEUTRAL_CONTEXT_SCORE = 0.5
SECTION_CONTEXT_CREDIT = 0.5

# Timeouts and Delays
FOCUS_DELAY = 0.05         # seconds
TOKEN_INPUT_DELAY = 0.2    # seconds, after a tag token is typed
TOKEN_COMMIT_DELAY = 0.1   # seconds, after the Enter keydown / phase one
POST_UPLOAD_DELAY = 0.2    # seconds
RETRY_DELAY_BASE = 0.5     # seconds between upload attempts
UPLOAD_ATTEMPTS = 3
MAX_TAG_TOKENS = 10
COLLECT_ATTEMPTS = 3
COLLECT_RETRY_DELAY = 1.0  # seconds between collection passes that found nothing

# Page-change watcher
WATCH_INTERVAL = 0.5       # seconds between URL polls
WATCH_SETTLE_DELAY = 1.0   # seconds to let a new step render

# Upload defaults
DEFAULT_UPLOAD_NAME = "resume.pdf"
DEFAULT_UPLOAD_TYPE = "application/pdf"

# Control marker written once a field settles
AUTOFILL_MARKER = "data-autofilled"

# Similarity Thresholds (0.0 to 1.0)
VERIFICATION_THRESHOLD = 0.70
