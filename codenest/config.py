"""
CodeNest Judge Configuration
Execution engine, storage, rate limit and streak settings
"""

import os

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "codenest_db")

# Judge0 execution engine
JUDGE0_API_URL = os.getenv("JUDGE0_API_URL", "https://judge0-ce.p.rapidapi.com")
JUDGE0_API_KEY = os.getenv("JUDGE0_API_KEY", "")
JUDGE0_API_HOST = os.getenv("JUDGE0_API_HOST", "judge0-ce.p.rapidapi.com")

# Judge timeout settings
JUDGE_REQUEST_TIMEOUT_SECONDS = float(os.getenv("JUDGE_REQUEST_TIMEOUT_SECONDS", "10"))
JUDGE_POLL_INTERVAL_SECONDS = float(os.getenv("JUDGE_POLL_INTERVAL_SECONDS", "1"))
JUDGE_MAX_POLL_ATTEMPTS = int(os.getenv("JUDGE_MAX_POLL_ATTEMPTS", "10"))
EVALUATION_TIMEOUT_SECONDS = float(os.getenv("EVALUATION_TIMEOUT_SECONDS", "120"))

# Per-test resource limits
MAX_EXECUTION_TIME_MS = 5000
MAX_MEMORY_USAGE_BYTES = 128 * 1024 * 1024
MAX_OUTPUT_LENGTH = 10000

# Evaluation request budget (per caller)
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "50"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))

# Streaks
STREAK_TIMEZONE = os.getenv("STREAK_TIMEZONE", "UTC")
STREAK_STORE = os.getenv("STREAK_STORE", "mongo")  # mongo | memory

# Auth
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM = "HS256"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
